#!/usr/bin/env python3


import argparse
import hashlib
import math
import os
import re
import stat
import sys
import tempfile
import time
import unicodedata
from collections import Counter
from dataclasses import asdict, dataclass, field
from typing import Dict, List, NamedTuple, Optional, Set, Tuple

import emoji

__all__ = [
    "SimpleLogger",
    "WatermarkMatcher",
    "ScanResult",
    "FileProcessResult",
    "ScanStats",
    "SourceSanitizer",
    "scan_bytes",
    "needs_rewrite",
    "fingerprint",
    "shannon_entropy",
]

# --- Configuration ---
VERSION = "1.0.0"

DEFAULT_MAX_DEPTH = 10

# --- Watermark Definitions ---
# Evaluated in order, first match wins. The pattern source doubles as the
# label reported for a hit.
WATERMARK_PATTERNS: Tuple[str, ...] = (
    r"\*{3,}",      # decorative star rules
    r"={3,}",       # banner separators
    r"/{3,}",       # triple/quad-slash doc-comment markers
    r"//\s*--+",    # "// ----" author/version tag lines
)

# Extensions never scanned in directory mode (binary, image, audio/video, archives).
DENIED_EXTENSIONS: Set[str] = {
    # binaries / objects
    ".exe", ".dll", ".so", ".dylib", ".o", ".obj", ".a", ".lib", ".bin",
    ".class", ".jar", ".pyc", ".pyo", ".wasm", ".rlib", ".pdb",
    # images
    ".png", ".jpg", ".jpeg", ".gif", ".bmp", ".ico", ".tif", ".tiff",
    ".webp", ".psd", ".heic",
    # audio / video
    ".mp3", ".wav", ".flac", ".ogg", ".aac", ".m4a", ".mp4", ".mkv",
    ".avi", ".mov", ".wmv", ".webm",
    # archives
    ".zip", ".tar", ".gz", ".tgz", ".bz2", ".xz", ".7z", ".rar", ".zst",
    # documents / fonts
    ".pdf", ".woff", ".woff2", ".ttf", ".otf", ".eot",
}

# Names for the non-ASCII characters most often found in pasted source code.
# Anything else is named through the emoji library or unicodedata.
KNOWN_CHARACTERS: Dict[str, str] = {
    # Zero Width Characters
    '\u200B': "Zero Width Space (U+200B)",
    '\u200C': "Zero Width Non-Joiner (U+200C)",
    '\u200D': "Zero Width Joiner (U+200D)",
    '\u2060': "Word Joiner (U+2060)",
    '\uFEFF': "Byte Order Mark (BOM) / Zero Width No-Break Space (U+FEFF)",

    # Non-Standard Spaces
    '\u00A0': "Non-Breaking Space (U+00A0)",
    '\u202F': "Narrow No-Break Space (U+202F)",
    '\u2009': "Thin Space (U+2009)",
    '\u3000': "Ideographic Space (U+3000)",
    '\u00AD': "Soft Hyphen (U+00AD)",

    # Directional Formatting Characters
    '\u200E': "Left-to-Right Mark (U+200E)",
    '\u200F': "Right-to-Left Mark (U+200F)",
    '\u202A': "Left-to-Right Embedding (U+202A)",
    '\u202B': "Right-to-Left Embedding (U+202B)",
    '\u202C': "Pop Directional Formatting (U+202C)",
    '\u202D': "Left-to-Right Override (U+202D)",
    '\u202E': "Right-to-Left Override (U+202E)",
    '\u2066': "Left-to-Right Isolate (U+2066)",
    '\u2067': "Right-to-Left Isolate (U+2067)",
    '\u2068': "First Strong Isolate (U+2068)",
    '\u2069': "Pop Directional Isolate (U+2069)",

    # Typographic
    '\u2013': "En Dash (U+2013)",
    '\u2014': "Em Dash (U+2014)",
    '\u2018': "Left Single Quotation Mark (U+2018)",
    '\u2019': "Right Single Quotation Mark (U+2019)",
    '\u201C': "Left Double Quotation Mark (U+201C)",
    '\u201D': "Right Double Quotation Mark (U+201D)",
    '\u2026': "Horizontal Ellipsis (U+2026)",
    '\u2022': "Bullet (U+2022)",

    # Decoder placeholder for malformed byte sequences
    '\uFFFD': "Undecodable byte sequence (U+FFFD)",
}


# --- Logging Setup ---
class SimpleLogger:
    """Simplified logger with color support and minimal configuration."""

    # ANSI color codes
    COLORS: Dict[str, str] = {
        'red': "\x1b[31;1m",
        'green': "\x1b[32;1m",
        'yellow': "\x1b[33;1m",
        'blue': "\x1b[34;1m",
        'magenta': "\x1b[35;1m",
        'cyan': "\x1b[36;1m",
        'reset': "\x1b[0m"
    }

    # Log levels
    DEBUG = 10
    INFO = 20
    WARNING = 30
    ERROR = 40

    def __init__(
        self,
        level: int = INFO,
        use_colors: bool | None = None,
        log_file: Optional[str] = None,
    ) -> None:
        self.level = level
        self.use_colors = (
            sys.stdout.isatty() and os.environ.get("NO_COLOR") is None
            if use_colors is None
            else bool(use_colors)
        )
        self.file_handler = (
            open(log_file, "w", encoding="utf-8") if log_file else None
        )

    def _log(self, level: int, msg: str, *args, color: Optional[str] = None) -> None:
        """Internal logging method."""
        if level < self.level:
            return

        if args:
            msg = msg % args

        if self.use_colors and color and color in self.COLORS:
            msg = f"{self.COLORS[color]}{msg}{self.COLORS['reset']}"

        print(msg)

        # Mirror to the log file without colors
        if self.file_handler:
            clean_msg = re.sub(r'\x1b\[[0-9;]*m', '', msg)
            print(clean_msg, file=self.file_handler)
            self.file_handler.flush()

    def debug(self, msg: str, *args):
        self._log(self.DEBUG, msg, *args, color="cyan")

    def info(self, msg: str, *args):
        self._log(self.INFO, msg, *args)

    def success(self, msg: str, *args):
        """Completed actions (file rewritten, report saved), shown in green."""
        self._log(self.INFO, msg, *args, color="green")

    def warning(self, msg: str, *args):
        self._log(self.WARNING, msg, *args, color="yellow")

    def error(self, msg: str, *args):
        self._log(self.ERROR, msg, *args, color="red")

    # Color convenience methods
    def red(self, s: str) -> str:
        return self._colorize("red", s)

    def green(self, s: str) -> str:
        return self._colorize("green", s)

    def yellow(self, s: str) -> str:
        return self._colorize("yellow", s)

    def blue(self, s: str) -> str:
        return self._colorize("blue", s)

    def magenta(self, s: str) -> str:
        return self._colorize("magenta", s)

    def cyan(self, s: str) -> str:
        return self._colorize("cyan", s)

    def close(self):
        """Close file handler if it exists."""
        if self.file_handler:
            self.file_handler.close()
            self.file_handler = None

    # internal ----------------------------------------------------------
    def _colorize(self, color: str, s: str) -> str:
        return (
            f"{self.COLORS[color]}{s}{self.COLORS['reset']}" if self.use_colors else s
        )


# --- Errors ---
class SanitizerError(Exception):
    """Base class for per-path failures reported by the driver."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"{reason}: {path}")
        self.path = path
        self.reason = reason


class AccessError(SanitizerError):
    """Path does not exist or cannot be opened for reading."""


class WriteError(SanitizerError):
    """Filtered content could not be persisted; the original is untouched."""


class TraversalError(SanitizerError):
    """A directory entry could not be inspected during discovery."""


# --- Data Models ---
class NonAsciiHit(NamedTuple):
    line: int
    column: int


class WatermarkHit(NamedTuple):
    line: int
    column: int
    label: str


class WatermarkMatch(NamedTuple):
    column: int
    label: str


class NonAsciiRun(NamedTuple):
    """Adjacent removed bytes on one line, grouped for reporting."""
    line: int
    column: int
    raw: bytes


@dataclass
class ScanResult:
    """Output of one scan pass over a file's bytes."""
    filtered: bytes
    non_ascii_positions: List[NonAsciiHit] = field(default_factory=list)
    removed_bytes: bytes = b""
    watermark_hits: List[WatermarkHit] = field(default_factory=list)

    @property
    def removed_count(self) -> int:
        return len(self.removed_bytes)

    @property
    def entropy(self) -> float:
        return shannon_entropy(self.removed_bytes)

    @property
    def has_findings(self) -> bool:
        return bool(self.non_ascii_positions or self.watermark_hits)


@dataclass
class FileProcessResult:
    """Result of processing a file."""
    filepath: str
    non_ascii_count: int = 0
    watermark_count: int = 0
    entropy: float = 0.0
    original_fingerprint: str = ""
    filtered_fingerprint: str = ""
    write_required: bool = False
    rewritten: bool = False
    skipped_blank: bool = False
    error: Optional[str] = None

    @property
    def has_findings(self) -> bool:
        return bool(self.non_ascii_count or self.watermark_count)

    def to_dict(self) -> Dict[str, object]:
        data = asdict(self)
        data["has_findings"] = self.has_findings
        return data


@dataclass
class ScanStats:
    """Statistics for the scan operation."""
    files_processed: int = 0
    files_with_findings: int = 0
    files_rewritten: int = 0
    files_failed: int = 0
    total_non_ascii: int = 0
    total_watermarks: int = 0
    start_time: float = 0.0
    end_time: float = 0.0

    @property
    def elapsed_time(self) -> float:
        return self.end_time - self.start_time if self.end_time else 0.0

    def update_from_result(self, result: FileProcessResult) -> None:
        self.files_processed += 1
        if result.has_findings:
            self.files_with_findings += 1
        if result.rewritten:
            self.files_rewritten += 1
        if result.error:
            self.files_failed += 1
        self.total_non_ascii += result.non_ascii_count
        self.total_watermarks += result.watermark_count


# --- Content Measures ---
def fingerprint(data: bytes) -> str:
    """SHA-256 hex digest, used only to compare contents for equality."""
    return hashlib.sha256(data).hexdigest()


def shannon_entropy(data: bytes) -> float:
    """Shannon entropy of the byte distribution, in bits per byte."""
    if not data:
        return 0.0
    total = len(data)
    return sum(
        (count / total) * math.log2(total / count)
        for count in Counter(data).values()
    )


def is_blank(data: bytes) -> bool:
    return not data.strip()


# --- Pattern Matcher ---
class WatermarkMatcher:
    """Fixed, ordered set of compiled watermark detectors.

    Built once and shared read-only by every scan of a run.
    """

    def __init__(self) -> None:
        self._compiled: Tuple[Tuple[str, re.Pattern[str]], ...] = tuple(
            (pattern, re.compile(pattern)) for pattern in WATERMARK_PATTERNS
        )

    @property
    def labels(self) -> List[str]:
        return [label for label, _ in self._compiled]

    def match(self, line: str) -> Optional[WatermarkMatch]:
        """Return the first pattern hit on ``line`` with its 1-indexed column."""
        for label, regex in self._compiled:
            found = regex.search(line)
            if found:
                return WatermarkMatch(found.start() + 1, label)
        return None

    def matches(self, line: str) -> bool:
        return self.match(line) is not None


DEFAULT_MATCHER = WatermarkMatcher()


# --- Scan-and-Filter Engine ---
def _split_lines(data: bytes) -> List[bytes]:
    """Split on ``\\n``; a final terminator does not open another line."""
    lines = data.split(b"\n")
    if lines[-1] == b"":
        lines.pop()
    return lines


def _match_watermark(raw: bytes, matcher: WatermarkMatcher) -> Optional[WatermarkMatch]:
    """Match ``raw`` and report the hit in raw-byte columns."""
    # Byte column of every ASCII byte. Lossy decoding never folds an ASCII
    # byte into a replacement character, so the n-th ASCII character of the
    # decoded text is the n-th ASCII byte of the line.
    columns = [col for col, byte in enumerate(raw, start=1) if byte < 0x80]

    text = raw.decode("utf-8", errors="replace")
    hit = matcher.match(text)
    if hit:
        # every pattern starts on an ASCII character
        ascii_before = sum(1 for ch in text[:hit.column - 1] if ch.isascii())
        return WatermarkMatch(columns[ascii_before], hit.label)
    if raw.isascii():
        return None

    # Some lines only form a watermark once their non-ASCII bytes are gone.
    # Catching them here keeps a second scan of the output free of hits.
    projection = bytes(raw[col - 1] for col in columns)
    hit = matcher.match(projection.decode("ascii"))
    if hit:
        return WatermarkMatch(columns[hit.column - 1], hit.label)
    return None


def scan_bytes(data: bytes, matcher: Optional[WatermarkMatcher] = None) -> ScanResult:
    """Run one scan pass over ``data``.

    Lines matching a watermark pattern are emptied; on every other line
    non-ASCII bytes are dropped and their (line, column) recorded. Columns
    of both kinds of hit count raw bytes, start at 1 and reset on every
    line. Every output line,
    including the last one, is terminated by ``\\n``.

    Never raises: malformed UTF-8 only affects the text handed to the
    matcher, classification always works on the raw bytes.
    """
    matcher = matcher or DEFAULT_MATCHER
    filtered = bytearray()
    removed = bytearray()
    positions: List[NonAsciiHit] = []
    watermarks: List[WatermarkHit] = []

    for line_no, raw in enumerate(_split_lines(data), start=1):
        hit = _match_watermark(raw, matcher)
        if hit:
            watermarks.append(WatermarkHit(line_no, hit.column, hit.label))
            filtered += b"\n"
            continue

        for column, byte in enumerate(raw, start=1):
            if byte < 0x80:
                filtered.append(byte)
            else:
                positions.append(NonAsciiHit(line_no, column))
                removed.append(byte)
        filtered += b"\n"

    return ScanResult(
        filtered=bytes(filtered),
        non_ascii_positions=positions,
        removed_bytes=bytes(removed),
        watermark_hits=watermarks,
    )


# --- Rewrite Decision ---
def needs_rewrite(original: bytes, filtered: bytes, *, skip_blank: bool = False) -> bool:
    """True when the filtered content differs from the original.

    With ``skip_blank`` a rewrite that would leave only whitespace is refused.
    """
    if fingerprint(original) == fingerprint(filtered):
        return False
    if skip_blank and is_blank(filtered):
        return False
    return True


# --- Reporting Helpers ---
def group_non_ascii_runs(result: ScanResult) -> List[NonAsciiRun]:
    """Merge removed bytes sitting next to each other on a line."""
    runs: List[NonAsciiRun] = []
    for hit, byte in zip(result.non_ascii_positions, result.removed_bytes):
        last = runs[-1] if runs else None
        if last and last.line == hit.line and last.column + len(last.raw) == hit.column:
            runs[-1] = last._replace(raw=last.raw + bytes([byte]))
        else:
            runs.append(NonAsciiRun(hit.line, hit.column, bytes([byte])))
    return runs


def describe_sequence(raw: bytes) -> str:
    """Human readable names for the characters a byte run decodes to."""
    names: List[str] = []
    for ch in raw.decode("utf-8", errors="replace"):
        if ch in KNOWN_CHARACTERS:
            names.append(KNOWN_CHARACTERS[ch])
        elif emoji.is_emoji(ch):
            names.append(f"Emoji {emoji.demojize(ch)}")
        else:
            names.append(unicodedata.name(ch, f"U+{ord(ch):04X}").title())
    return ", ".join(names)


# --- I/O ---
def read_source(path: str) -> bytes:
    try:
        with open(path, "rb") as f:
            return f.read()
    except FileNotFoundError as exc:
        raise AccessError(path, "File not found") from exc
    except PermissionError as exc:
        raise AccessError(path, "Permission denied") from exc
    except OSError as exc:
        raise AccessError(path, exc.strerror or str(exc)) from exc


def write_atomically(path: str, data: bytes) -> None:
    """Replace ``path`` with ``data`` via a sibling temp file and os.replace.

    The file mode is preserved. On failure the original is left as it was.
    """
    directory = os.path.dirname(path) or "."
    try:
        temp_obj = tempfile.NamedTemporaryFile(
            mode="wb",
            delete=False,
            dir=directory,
            prefix=f"tmp_{os.path.basename(path)}_",
        )
    except OSError as exc:
        raise WriteError(path, f"Could not create temporary file in {directory}: {exc}") from exc

    temp_path = temp_obj.name
    try:
        with temp_obj:
            temp_obj.write(data)
            temp_obj.flush()
            os.fsync(temp_obj.fileno())
        os.chmod(temp_path, stat.S_IMODE(os.stat(path).st_mode))
        os.replace(temp_path, path)
    except OSError as exc:
        if os.path.exists(temp_path):
            os.remove(temp_path)
        raise WriteError(path, str(exc)) from exc


# ---------------------------------------------------------------------------
#  Core class
# ---------------------------------------------------------------------------
class SourceSanitizer:
    """Find, scan, report on and optionally rewrite source files."""

    VERSION = VERSION

    # ------------------------------------------------------------------
    def __init__(
        self,
        *,
        clean_file: bool = False,
        skip_blank: bool = False,
        report_mode: str = "normal",
        logger: Optional[SimpleLogger] = None,
        matcher: Optional[WatermarkMatcher] = None,
    ) -> None:
        self.clean_file = clean_file
        self.skip_blank = skip_blank
        self.report_mode = report_mode  # normal | quiet | verbose
        self.multiple_files = False
        self.log = logger or SimpleLogger()
        self.matcher = matcher or DEFAULT_MATCHER
        self._results: Dict[str, FileProcessResult] = {}
        self.traversal_errors: List[TraversalError] = []

    # ------------------------------------------------------------------
    #  Low-level helpers
    # ------------------------------------------------------------------
    @staticmethod
    def _is_denied(name: str) -> bool:
        return os.path.splitext(name)[1].lower() in DENIED_EXTENSIONS

    @staticmethod
    def _depth(top: str, root: str) -> int:
        rel = os.path.relpath(root, top)
        return 0 if rel == os.curdir else rel.count(os.sep) + 1

    def _on_walk_error(self, exc: OSError) -> None:
        err = TraversalError(exc.filename or "?", exc.strerror or str(exc))
        self.traversal_errors.append(err)
        self.log.warning("Skipping unreadable entry: %s", err)

    # ------------------------------------------------------------------
    def inspect(self, filepath: str, data: bytes) -> Tuple[ScanResult, FileProcessResult]:
        """Scan ``data`` and fill in the per-file report fields."""
        scan_result = scan_bytes(data, self.matcher)
        original_fp = fingerprint(data)
        filtered_fp = fingerprint(scan_result.filtered)
        write_required = needs_rewrite(data, scan_result.filtered, skip_blank=self.skip_blank)

        result = FileProcessResult(
            filepath=filepath,
            non_ascii_count=scan_result.removed_count,
            watermark_count=len(scan_result.watermark_hits),
            entropy=scan_result.entropy,
            original_fingerprint=original_fp,
            filtered_fingerprint=filtered_fp,
            write_required=write_required,
            skipped_blank=original_fp != filtered_fp and not write_required,
        )
        return scan_result, result

    # ------------------------------------------------------------------
    def _process_file(self, filepath: str) -> FileProcessResult:
        """Read, scan and, when cleaning, rewrite a single file."""
        try:
            data = read_source(filepath)
        except AccessError as e:
            self.log.error("%s", e)
            return FileProcessResult(filepath, error=str(e))

        scan_result, result = self.inspect(filepath, data)

        if self.clean_file and result.write_required:
            try:
                write_atomically(filepath, scan_result.filtered)
                result.rewritten = True
                self.log.debug("Rewrote %s (%d bytes)", filepath, len(scan_result.filtered))
            except WriteError as e:
                self.log.error("Error saving changes for %s: %s", filepath, e.reason)
                result.error = str(e)

        if self.report_mode != "quiet":
            self.log_file_report(result, scan_result)
        return result

    # ------------------------------------------------------------------
    def log_file_report(self, result: FileProcessResult, scan_result: ScanResult) -> None:
        if not result.has_findings and not result.write_required and not result.error:
            if self.report_mode == "verbose" or not self.multiple_files:
                if self.multiple_files:
                    self.log.info("\n%s %s", self.log.blue("File:"), result.filepath)
                self.log.info("File is clean: no non-ASCII bytes or watermark lines detected.")
            return

        if self.multiple_files:
            self.log.info("\n%s %s", self.log.blue("File:"), result.filepath)

        # Non-ASCII runs and watermark lines, in file order
        entries: List[Tuple[int, int, str]] = []
        for run in group_non_ascii_runs(scan_result):
            end = run.column + len(run.raw) - 1
            cols = f"column {run.column}" if end == run.column else f"columns {run.column}-{end}"
            entries.append((
                run.line,
                run.column,
                "  %s %s: %s %s (%s)" % (
                    self.log.cyan(f"L{run.line}"),
                    cols,
                    self.log.red("Non-ASCII"),
                    run.raw.hex(" ").upper(),
                    describe_sequence(run.raw),
                ),
            ))
        for hit in scan_result.watermark_hits:
            entries.append((
                hit.line,
                hit.column,
                "  %s column %d: %s line matched '%s'" % (
                    self.log.cyan(f"L{hit.line}"),
                    hit.column,
                    self.log.magenta("Watermark"),
                    hit.label,
                ),
            ))
        for _, _, text in sorted(entries, key=lambda e: (e[0], e[1])):
            self.log.info("%s", text)

        if self.report_mode == "verbose":
            for hit, byte in zip(scan_result.non_ascii_positions, scan_result.removed_bytes):
                self.log.info("    byte 0x%02X at line %d, column %d", byte, hit.line, hit.column)

        if result.non_ascii_count:
            self.log.info("  Non-ASCII bytes removed: %d", result.non_ascii_count)
            self.log.info("  Non-ASCII entropy: %.4f", result.entropy)
        if result.watermark_count:
            self.log.info("  Watermark lines removed: %d", result.watermark_count)
        if not result.has_findings and result.write_required:
            self.log.info("  Final line has no terminator; a rewrite appends one.")
        self.log.info("  Original sha256: %s", result.original_fingerprint)
        self.log.info("  Filtered sha256: %s", result.filtered_fingerprint)

        if result.rewritten:
            self.log.success("  Rewritten")
            return
        if result.error:
            status = self.log.red("Rewrite failed")
        elif result.skipped_blank:
            status = self.log.yellow("Rewrite skipped: filtered content is blank")
        elif result.write_required:
            status = self.log.yellow("Rewrite required (use -c/--clean to apply)")
        else:
            status = "No rewrite required"
        self.log.info("  %s", status)

    # --- File Discovery Functions ---
    def find_files_to_process(
        self,
        file_path: Optional[str] = None,
        dir_path: Optional[str] = None,
        *,
        max_depth: int = DEFAULT_MAX_DEPTH,
        ignored_dir_names: Optional[Set[str]] = None,
    ) -> List[str]:
        """Return the complete, ordered list of files to scan."""
        files: List[str] = []
        ignored_dir_names = ignored_dir_names or set()

        # Single file mode -------------------------------------------
        if file_path:
            if not os.path.isfile(file_path):
                self.log.error("File '%s' not found.", file_path)
                return []
            files.append(file_path)
            self.log.debug("Added file to process: %s", file_path)
            return files

        # Directory mode ---------------------------------------------
        if dir_path:
            if not os.path.isdir(dir_path):
                self.log.error("Directory '%s' not found.", dir_path)
                return []
            self.log.debug("Processing directory: %s (max_depth=%d)", dir_path, max_depth)
            for root, dirs, names in os.walk(dir_path, onerror=self._on_walk_error, followlinks=False):
                depth = self._depth(dir_path, root)
                dirs[:] = sorted(
                    d for d in dirs
                    if d not in ignored_dir_names and depth < max_depth
                )
                for name in sorted(names):
                    path = os.path.join(root, name)
                    if self._is_denied(name):
                        self.log.debug("Skipping denylisted file: %s", path)
                        continue
                    if os.path.islink(path) or not os.path.isfile(path):
                        self.log.debug("Skipping non-regular file: %s", path)
                        continue
                    files.append(path)
            return files

        self.log.warning("No input path provided to find_files_to_process()")
        return []

    # ------------------------------------------------------------------
    def scan(self, files: List[str]) -> ScanStats:
        """Process every file in order and return accumulated statistics."""
        stats = ScanStats(start_time=time.time())
        if len(files) > 1:
            self.multiple_files = True
            self.log.info("Starting scan of %d file(s)...", len(files))
        self._results = {}

        for path in files:
            res = self._process_file(path)
            self._results[path] = res
            stats.update_from_result(res)

        stats.end_time = time.time()
        return stats

    @property
    def results(self) -> Dict[str, FileProcessResult]:
        return dict(self._results)

    # --- Report Generation Functions ---
    def display_summary_report(self, stats: ScanStats):
        """
        Display a summary report of the scan results.
        """
        if self.report_mode == "quiet":
            return
        sep = "=" * 60
        self.log.info("\n%s", sep)
        self.log.info("%s", self.log.blue("SCAN SUMMARY"))
        self.log.info("%s", sep)
        self.log.info("Files processed: %d", stats.files_processed)
        self.log.info("Files with findings: %d", stats.files_with_findings)
        self.log.info("Non-ASCII bytes removed: %d", stats.total_non_ascii)
        self.log.info("Watermark lines removed: %d", stats.total_watermarks)
        if stats.files_rewritten:
            self.log.info("Files rewritten: %d", stats.files_rewritten)
        if stats.files_failed:
            self.log.info("Files failed: %d", stats.files_failed)
        self.log.info("Elapsed time: %.2f s", stats.elapsed_time)
        self.log.info("%s", sep)
        status = (
            self.log.yellow("FINDINGS DETECTED")
            if stats.files_with_findings
            else self.log.green("NO FINDINGS")
        )
        self.log.info("\nStatus: %s", status)

    def write_report_file(self, path: str, stats: ScanStats) -> None:
        with open(path, 'w', encoding='utf-8') as f:
            f.write("SOURCE SANITIZER REPORT\n")
            f.write("=======================\n\n")
            f.write(f"Date: {time.strftime('%Y-%m-%d %H:%M:%S')}\n")
            f.write(f"Files processed: {stats.files_processed}\n")
            f.write(f"Files with findings: {stats.files_with_findings}\n")
            f.write(f"Non-ASCII bytes removed: {stats.total_non_ascii}\n")
            f.write(f"Watermark lines removed: {stats.total_watermarks}\n")
            f.write(f"Files rewritten: {stats.files_rewritten}\n")
            f.write(f"Files failed: {stats.files_failed}\n")
            f.write(f"Elapsed time: {stats.elapsed_time:.2f} seconds\n\n")
            for res in self._results.values():
                if res.error:
                    f.write(f"{res.filepath}: ERROR {res.error}\n")
                    continue
                f.write(
                    f"{res.filepath}: {res.non_ascii_count} non-ASCII byte(s), "
                    f"{res.watermark_count} watermark line(s), "
                    f"entropy {res.entropy:.4f}, "
                    f"rewritten {'yes' if res.rewritten else 'no'}\n"
                )
            f.write(f"\nStatus: {'FINDINGS DETECTED' if stats.files_with_findings else 'NO FINDINGS'}\n")

    # ------------------------------------------------------------------
    #  Build sanitizer straight from argparse.Namespace
    # ------------------------------------------------------------------
    @classmethod
    def from_args(cls, args, logger: Optional[SimpleLogger] = None):
        return cls(
            clean_file=args.clean,
            skip_blank=args.skip_blank,
            report_mode=args.report_mode,
            logger=logger,
        )

###############################################################################
#  main() - thin CLI for SourceSanitizer
###############################################################################

def _non_negative_int(value: str) -> int:
    try:
        parsed = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid depth: '{value}'")
    if parsed < 0:
        raise argparse.ArgumentTypeError(f"depth must be >= 0, got {parsed}")
    return parsed


def build_arg_parser() -> argparse.ArgumentParser:
    pattern_list = "\n".join(f"  {i}. {p}" for i, p in enumerate(WATERMARK_PATTERNS, start=1))
    denied = " ".join(sorted(DENIED_EXTENSIONS))

    parser = argparse.ArgumentParser(
        description="Strip non-ASCII bytes and watermark lines from source files.",
        formatter_class=argparse.RawTextHelpFormatter,
        epilog=f"""
Examples:
  %(prog)s -f main.rs
  %(prog)s -f main.rs -c
  %(prog)s -d project/ --ignore-dir .git --max-depth 4 -c
  %(prog)s -d src/ --fail --report-mode quiet

Watermark patterns (first match wins, whole line is dropped):
{pattern_list}

Skipped extensions in directory mode:
  {denied}

Output Coloring: Use --no-color to disable. Respects NO_COLOR env var.
"""
    )

    input_group = parser.add_mutually_exclusive_group(required=True)
    input_group.add_argument("-f", "--file", help="Path to a single file to check.")
    input_group.add_argument("-d", "--dir", help="Path to a directory to check.")

    parser.add_argument("--max-depth", type=_non_negative_int, default=DEFAULT_MAX_DEPTH, metavar="N",
                      help=f"Maximum directory depth to descend (used with -d/--dir, default {DEFAULT_MAX_DEPTH}).")

    parser.add_argument("--ignore-dir", action="append", dest="ignored_dirs",
                      default=[], metavar="DIRNAME",
                      help="Directory name(s) to ignore during the scan (e.g., .git). Can be used multiple times.")

    parser.add_argument("-c", "--clean", action="store_true",
                      help="Rewrite files whose filtered content differs. Warning: This modifies files in place!")

    parser.add_argument("--skip-blank", action="store_true",
                      help="Do not rewrite a file when its filtered content would be whitespace only.")

    parser.add_argument("--fail", action="store_true",
                      help="Exit with status code 1 if findings are detected or a file fails.")

    parser.add_argument("--no-color", action="store_true",
                      help="Disable colored output.")

    parser.add_argument("--report-file", metavar="FILE",
                      help="Write a summary report to a file.")

    parser.add_argument("--report-mode", choices=["normal", "quiet", "verbose"],
                      default="normal", help="Set the level of reporting detail.")

    parser.add_argument("--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                      default="INFO", help="Set the logging level.")

    parser.add_argument("--log-file", metavar="FILE",
                      help="Also write logs to a file.")

    parser.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    parser = build_arg_parser()
    args = parser.parse_args(argv)

    log_levels = {
        "DEBUG": SimpleLogger.DEBUG,
        "INFO": SimpleLogger.INFO,
        "WARNING": SimpleLogger.WARNING,
        "ERROR": SimpleLogger.ERROR,
    }
    log = SimpleLogger(
        level=log_levels[args.log_level],
        use_colors=sys.stdout.isatty() and not args.no_color and os.environ.get("NO_COLOR") is None,
        log_file=args.log_file,
    )

    log.debug("Source Sanitizer v%s starting", VERSION)
    log.debug("Log level set to %s", args.log_level)

    sanitizer = SourceSanitizer.from_args(args, logger=log)

    # -- Build file list --
    files_to_process = sanitizer.find_files_to_process(
        file_path=args.file,
        dir_path=args.dir,
        max_depth=args.max_depth,
        ignored_dir_names=set(args.ignored_dirs),
    )

    if not files_to_process:
        log.warning("No files found or selected for processing.")
        log.close()
        raise SystemExit(1)

    # --- Process files ---
    stats = sanitizer.scan(files_to_process)

    sanitizer.display_summary_report(stats)

    if args.report_file:
        try:
            sanitizer.write_report_file(args.report_file, stats)
            log.success("Report written to %s", args.report_file)
        except OSError as e:
            log.error("Error writing report to %s: %s", args.report_file, e)

    # Determine exit code
    exit_code = 0
    if args.file and stats.files_failed:
        log.error("Aborting: '%s' could not be processed.", args.file)
        exit_code = 1
    elif args.fail and (stats.files_with_findings or stats.files_failed):
        log.warning("Exiting with status 1 due to --fail flag and findings/failures.")
        exit_code = 1

    log.debug("Script execution completed")
    log.close()
    raise SystemExit(exit_code)

if __name__ == "__main__":
    main()
