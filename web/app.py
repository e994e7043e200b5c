import io
import os
import re
import secrets
import logging
from typing import Optional

from flask import Flask, request, send_file, jsonify
from werkzeug.utils import secure_filename
from werkzeug.exceptions import RequestEntityTooLarge, HTTPException

from source_sanitizer import DENIED_EXTENSIONS, VERSION, SimpleLogger, SourceSanitizer

# --- Flask App Initialization ---
app = Flask(__name__)

# --- Configuration ---
app.config['SECRET_KEY'] = os.environ.get('SECRET_KEY', secrets.token_hex(16))

app.config['MAX_CONTENT_LENGTH'] = 10 * 1024 * 1024  # 10 MB limit

REPORT_MODES = ("normal", "quiet", "verbose")

# --- Production Logging Setup ---
if not app.debug:
    log_handler = logging.FileHandler(os.environ.get('SANITIZER_ERROR_LOG', 'error.log'), delay=True)
    log_handler.setLevel(logging.ERROR)
    log_formatter = logging.Formatter('%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]')
    log_handler.setFormatter(log_formatter)
    app.logger.addHandler(log_handler)
    app.logger.setLevel(logging.INFO)
    app.logger.info('Application startup in production mode')
else:
    app.logger.setLevel(logging.DEBUG)
    app.logger.info('Application startup in debug mode')


# --- Response Hooks ---
@app.after_request
def apply_security_headers(response):
    response.headers['Content-Security-Policy'] = "default-src 'none'; frame-ancestors 'none'"
    response.headers['X-Content-Type-Options'] = 'nosniff'
    response.headers['X-Frame-Options'] = 'DENY'
    if request.is_secure:  # Only send HSTS over HTTPS
        response.headers['Strict-Transport-Security'] = 'max-age=31536000; includeSubDomains'
    response.headers['Referrer-Policy'] = 'strict-origin-when-cross-origin'
    return response


# --- WebLogger (captures the per-file report for the response) ---
class WebLogger(SimpleLogger):
    def __init__(self, level: int = SimpleLogger.INFO, use_colors: bool = False):
        super().__init__(level, use_colors)
        self.log_capture = io.StringIO()

    def _log(self, level: int, msg: str, *args, color: Optional[str] = None) -> None:
        if level < self.level:
            return
        if args:
            msg = msg % args

        clean_msg = re.sub(r'\x1b\[[0-9;]*m', '', msg)
        self.log_capture.write(clean_msg + "\n")

    def get_captured_logs(self) -> str:
        return self.log_capture.getvalue()

    def close(self):
        pass


def denied_file(filename):
    return os.path.splitext(filename)[1].lower() in DENIED_EXTENSIONS


# --- Error Handlers ---
@app.errorhandler(HTTPException)
def handle_http_exception(e):
    app.logger.warning(f'HTTP Exception {e.code} ({e.name}): {request.path} - {e.description}')
    response = e.get_response()
    response.data = jsonify(
        error=e.name,
        message=e.description,
        code=e.code
    ).data
    response.content_type = "application/json"
    return response

@app.errorhandler(Exception)  # Catch non-HTTP exceptions (like 500s)
def handle_generic_exception(e):
    app.logger.error(f'Unhandled Exception: {e}', exc_info=True)
    # Avoid leaking details in production
    error_message = "An internal server error occurred." if not app.debug else str(e)
    return jsonify(error="Internal Server Error", message=error_message), 500

@app.errorhandler(RequestEntityTooLarge)
def handle_file_too_large(e):
    app.logger.warning(f'File upload rejected: Too large (limit: {app.config["MAX_CONTENT_LENGTH"]} bytes)')
    return jsonify(error="File Too Large", message=f"The file must be less than {app.config['MAX_CONTENT_LENGTH'] // 1024 // 1024}MB."), 413


# --- Routes ---
@app.route('/', methods=['GET'])
def index():
    return jsonify(
        service="source-sanitizer",
        version=VERSION,
        endpoints={
            "POST /api/scan": "Scan an uploaded file (file_input) or pasted text (text_input).",
            "POST /download_cleaned": "Download filtered content as a file.",
        },
    )


@app.route('/api/scan', methods=['POST'])
def scan_route():
    file_input = request.files.get('file_input')
    text_input = request.form.get('text_input', '')
    report_mode = request.form.get('report_mode', 'normal')

    if report_mode not in REPORT_MODES:
        return jsonify(error="Bad Request", message=f"Invalid report_mode: {report_mode}"), 400

    if file_input and file_input.filename:
        filename = secure_filename(file_input.filename)
        if not filename:
            return jsonify(error="Bad Request", message="Invalid filename provided."), 400
        if denied_file(filename):
            return jsonify(error="Bad Request", message=f"File type not accepted: {filename}"), 400
        data = file_input.read()
    elif text_input:
        filename = "pasted_text.txt"
        data = text_input.encode('utf-8')
    else:
        return jsonify(error="Bad Request", message="Please provide text input or upload a file."), 400

    web_logger = WebLogger(level=SimpleLogger.INFO)
    sanitizer = SourceSanitizer(
        skip_blank='skip_blank' in request.form,
        report_mode=report_mode,
        logger=web_logger,
    )
    scan_result, file_result = sanitizer.inspect(filename, data)
    if report_mode != "quiet":
        sanitizer.log_file_report(file_result, scan_result)
    app.logger.info(
        f'Scanned {filename}: {file_result.non_ascii_count} non-ASCII byte(s), '
        f'{file_result.watermark_count} watermark line(s)'
    )

    payload = file_result.to_dict()
    payload.update(
        non_ascii_positions=[list(hit) for hit in scan_result.non_ascii_positions],
        watermark_hits=[hit._asdict() for hit in scan_result.watermark_hits],
        filtered_text=scan_result.filtered.decode('ascii'),
        download_name=f"cleaned_{filename}",
        log_output=web_logger.get_captured_logs(),
    )
    return jsonify(payload)


@app.route('/download_cleaned', methods=['POST'])
def download_cleaned_text_route():
    cleaned_data = request.form.get('cleaned_data_for_download')
    filename = request.form.get('filename_for_download', 'cleaned_text.txt')

    filename = secure_filename(filename)
    if not filename:
        filename = 'cleaned_output.txt'

    if cleaned_data is None:
        app.logger.warning('Download attempt with no data.')
        return jsonify(error="Bad Request", message="No data provided for download."), 400

    mem_file = io.BytesIO()
    mem_file.write(cleaned_data.encode('utf-8'))
    mem_file.seek(0)

    return send_file(
        mem_file,
        mimetype='text/plain',
        as_attachment=True,
        download_name=filename
    )


is_debug = os.environ.get('FLASK_DEBUG', '0') == '1'

if __name__ == '__main__':
    # Development server only; production should use Gunicorn/uWSGI
    if is_debug:
        app.logger.info("Starting Flask development server...")
        app.run(debug=True, host='0.0.0.0', port=5001)
    else:
        app.logger.warning("Running with __main__ guard, but FLASK_DEBUG is not '1'.")
        app.logger.warning("For production, use a WSGI server like Gunicorn: ")
        app.logger.warning("gunicorn --bind 0.0.0.0:8000 web.app:app")
