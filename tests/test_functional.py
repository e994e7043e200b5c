import unittest
import tempfile
import os
import shutil
from pathlib import Path

from test_utils import (
    run_script, create_temp_file, read_file_bytes,
    CAFE_UTF8, ZERO_WIDTH_SPACE, SEPARATOR_LINE, NORMAL_TEXT
)

class TestFunctional(unittest.TestCase):

    def setUp(self):
        """Creates a temporary directory before each test."""
        self.test_dir = tempfile.mkdtemp(prefix="ss_test_")

    def tearDown(self):
        """Removes the temporary directory after each test."""
        shutil.rmtree(self.test_dir)

    def test_detect_non_ascii_single_file(self):
        test_file = create_temp_file(self.test_dir, "cafe.txt", CAFE_UTF8)

        result = run_script(["-f", test_file])

        self.assertEqual(result.returncode, 0)
        self.assertIn("L1 columns 4-5: Non-ASCII C3 A9 (Latin Small Letter E With Acute)", result.stdout)
        self.assertIn("Non-ASCII bytes removed: 2", result.stdout)
        self.assertIn("Non-ASCII entropy: 1.0000", result.stdout)
        self.assertIn("Rewrite required (use -c/--clean to apply)", result.stdout)
        self.assertIn("FINDINGS DETECTED", result.stdout)
        self.assertEqual(read_file_bytes(test_file), CAFE_UTF8)  # File unchanged

    def test_detect_watermark_single_file(self):
        test_file = create_temp_file(self.test_dir, "main.rs", SEPARATOR_LINE + b"\nfn f() {}\n")

        result = run_script(["-f", test_file])

        self.assertEqual(result.returncode, 0)
        self.assertIn("L1 column 1: Watermark line matched '//\\s*--+'", result.stdout)
        self.assertIn("Watermark lines removed: 1", result.stdout)

    def test_clean_file_message(self):
        test_file = create_temp_file(self.test_dir, "clean.rs", NORMAL_TEXT)
        result = run_script(["-f", test_file])
        self.assertEqual(result.returncode, 0)
        self.assertIn("File is clean", result.stdout)
        self.assertIn("NO FINDINGS", result.stdout)

    def test_clean_rewrites_file(self):
        test_file = create_temp_file(
            self.test_dir, "mixed.rs",
            SEPARATOR_LINE + b"\nlet s = \"caf\xc3\xa9\";" + ZERO_WIDTH_SPACE + b"\n",
        )

        result = run_script(["-f", test_file, "-c"])

        self.assertEqual(result.returncode, 0)
        self.assertIn("Rewritten", result.stdout)
        self.assertIn("Files rewritten: 1", result.stdout)
        self.assertEqual(read_file_bytes(test_file), b"\nlet s = \"caf\";\n")

    def test_clean_is_idempotent(self):
        test_file = create_temp_file(self.test_dir, "twice.py", b"x = '\xc3\xa9'\n/***/\n")
        run_script(["-f", test_file, "-c"])
        once = read_file_bytes(test_file)
        result = run_script(["-f", test_file, "-c"])
        self.assertEqual(read_file_bytes(test_file), once)
        self.assertIn("File is clean", result.stdout)

    def test_clean_appends_missing_final_newline(self):
        test_file = create_temp_file(self.test_dir, "no_eol.py", b"x = 1")
        result = run_script(["-f", test_file, "-c"])
        self.assertEqual(result.returncode, 0)
        self.assertIn("Final line has no terminator", result.stdout)
        self.assertEqual(read_file_bytes(test_file), b"x = 1\n")

    def test_empty_file_is_not_rewritten(self):
        test_file = create_temp_file(self.test_dir, "empty.py", b"")
        result = run_script(["-f", test_file, "-c"])
        self.assertEqual(result.returncode, 0)
        self.assertIn("File is clean", result.stdout)
        self.assertNotIn("Rewritten", result.stdout)
        self.assertEqual(read_file_bytes(test_file), b"")

    def test_skip_blank_safeguard(self):
        test_file = create_temp_file(self.test_dir, "blank.txt", ZERO_WIDTH_SPACE + b"\n")
        result = run_script(["-f", test_file, "-c", "--skip-blank"])
        self.assertEqual(result.returncode, 0)
        self.assertIn("Rewrite skipped: filtered content is blank", result.stdout)
        self.assertEqual(read_file_bytes(test_file), ZERO_WIDTH_SPACE + b"\n")

    def test_verbose_lists_every_byte(self):
        test_file = create_temp_file(self.test_dir, "cafe.txt", CAFE_UTF8)
        result = run_script(["-f", test_file, "--report-mode", "verbose"])
        self.assertIn("byte 0xC3 at line 1, column 4", result.stdout)
        self.assertIn("byte 0xA9 at line 1, column 5", result.stdout)
        self.assertIn("Original sha256:", result.stdout)

    def test_quiet_mode(self):
        test_file = create_temp_file(self.test_dir, "cafe.txt", CAFE_UTF8)
        result = run_script(["-f", test_file, "--report-mode", "quiet"])
        self.assertEqual(result.returncode, 0)
        self.assertNotIn("Non-ASCII", result.stdout)
        self.assertNotIn("SCAN SUMMARY", result.stdout)

    def test_directory_scan(self):
        dir_to_scan = Path(self.test_dir) / "scan_root"
        dir_to_scan.mkdir()
        subdir = dir_to_scan / "subdir"
        subdir.mkdir()

        create_temp_file(dir_to_scan, "file1.py", CAFE_UTF8)
        create_temp_file(subdir, "file2.rs", SEPARATOR_LINE + b"\n")
        create_temp_file(dir_to_scan, "clean_file.py", NORMAL_TEXT)
        create_temp_file(dir_to_scan, "image.png", b"\x89PNG\r\n\xff")

        result = run_script(["-d", dir_to_scan])
        self.assertEqual(result.returncode, 0)
        self.assertIn("Starting scan of 3 file(s)...", result.stdout)
        self.assertIn(f"File: {dir_to_scan}/file1.py", result.stdout)
        self.assertIn(f"File: {subdir}/file2.rs", result.stdout)
        self.assertNotIn("clean_file.py", result.stdout)  # Clean files are listed in verbose mode only
        self.assertNotIn("image.png", result.stdout)
        self.assertIn("Files with findings: 2", result.stdout)

    def test_ignore_directory_and_depth(self):
        dir_to_scan = Path(self.test_dir) / "scan_root_ignore"
        dir_to_scan.mkdir()
        ignored_subdir = dir_to_scan / "node_modules"
        ignored_subdir.mkdir()
        nested = dir_to_scan / "src" / "deep"
        nested.mkdir(parents=True)

        create_temp_file(dir_to_scan, "root.py", CAFE_UTF8)
        create_temp_file(ignored_subdir, "ignored.js", CAFE_UTF8)
        create_temp_file(dir_to_scan / "src", "source.py", CAFE_UTF8)
        create_temp_file(nested, "nested.py", CAFE_UTF8)

        result = run_script(["-d", dir_to_scan, "--ignore-dir", "node_modules", "--max-depth", "1"])
        self.assertEqual(result.returncode, 0)
        self.assertIn(f"File: {dir_to_scan}/root.py", result.stdout)
        self.assertIn(f"File: {dir_to_scan}/src/source.py", result.stdout)
        self.assertNotIn("ignored.js", result.stdout)
        self.assertNotIn("nested.py", result.stdout)

    def test_directory_clean(self):
        create_temp_file(self.test_dir, "a.py", CAFE_UTF8)
        create_temp_file(self.test_dir, "b.py", b"/// doc\nx\n")
        result = run_script(["-d", self.test_dir, "-c"])
        self.assertEqual(result.returncode, 0)
        self.assertEqual(read_file_bytes(Path(self.test_dir) / "a.py"), b"caf\n")
        self.assertEqual(read_file_bytes(Path(self.test_dir) / "b.py"), b"\nx\n")

    def test_fail_flag_with_findings(self):
        test_file = create_temp_file(self.test_dir, "fail_me.txt", CAFE_UTF8)
        result = run_script(["-f", test_file, "--fail"])
        self.assertEqual(result.returncode, 1)
        self.assertIn("Exiting with status 1", result.stdout)

    def test_fail_flag_without_findings(self):
        test_file = create_temp_file(self.test_dir, "ok.txt", NORMAL_TEXT)
        result = run_script(["-f", test_file, "--fail"])
        self.assertEqual(result.returncode, 0)

    def test_report_file_generation(self):
        report_file_path = Path(self.test_dir) / "scan_report.txt"
        test_file = create_temp_file(self.test_dir, "report_src.txt", CAFE_UTF8)

        result = run_script(["-f", test_file, "--report-file", report_file_path])
        self.assertEqual(result.returncode, 0)
        self.assertTrue(report_file_path.exists())
        report_content = report_file_path.read_text(encoding="utf-8")
        self.assertIn("SOURCE SANITIZER REPORT", report_content)
        self.assertIn("Files with findings: 1", report_content)
        self.assertIn(f"{test_file}: 2 non-ASCII byte(s), 0 watermark line(s), entropy 1.0000, rewritten no", report_content)

    def test_log_file_has_no_colors(self):
        log_path = Path(self.test_dir) / "run.log"
        test_file = create_temp_file(self.test_dir, "cafe.txt", CAFE_UTF8)
        run_script(["-f", test_file, "--log-file", log_path])
        log_content = log_path.read_text(encoding="utf-8")
        self.assertIn("Non-ASCII bytes removed: 2", log_content)
        self.assertNotIn("\x1b[", log_content)

    def test_version_output(self):
        result = run_script(["--version"])
        self.assertEqual(result.returncode, 0)
        self.assertIn("source_sanitizer.py 1.0.0", result.stdout)

if __name__ == "__main__":
    unittest.main()
