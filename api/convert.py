from http.server import BaseHTTPRequestHandler
from datetime import datetime, timezone
import json
import os
import sys


# Ensure project root is on path so we can import the converter
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if PROJECT_ROOT not in sys.path:
    sys.path.append(PROJECT_ROOT)

from html_source import charset_from_content_type  # noqa: E402
from html_to_json import HTMLToJSONError, html_to_json  # noqa: E402


def _api_log(level: str, event: str, **kwargs) -> None:
    """Structured stdout log line; all keys JSON-serializable."""
    payload = {"ts": datetime.now(timezone.utc).isoformat(), "level": level, "event": event, **{k: v for k, v in kwargs.items() if v is not None}}
    print(json.dumps(payload, default=str, ensure_ascii=False), flush=True)


class handler(BaseHTTPRequestHandler):
    def do_POST(self):
        self._handle_convert()

    def do_GET(self):
        self._send_json({"error": "Use POST to submit HTML."}, status=405)

    def _handle_convert(self):
        content_length = int(self.headers.get("Content-Length", "0"))
        if content_length <= 0:
            _api_log("WARN", "convert_empty_body")
            self._send_json({"error": "Empty request body."}, status=400)
            return

        raw_body = self.rfile.read(content_length)
        if not raw_body:
            _api_log("WARN", "convert_empty_body")
            self._send_json({"error": "Empty request body."}, status=400)
            return

        charset = charset_from_content_type(self.headers.get("Content-Type", "")) or "utf-8"
        try:
            html_content = raw_body.decode(charset, errors="replace")
        except LookupError:
            _api_log("WARN", "convert_bad_charset", charset=charset)
            self._send_json({"error": "Failed to decode request body."}, status=400)
            return

        _api_log("INFO", "convert_start", bytes=len(raw_body), charset=charset)
        try:
            json_text = html_to_json(html_content)
        except HTMLToJSONError as exc:
            _api_log("ERROR", "convert_failed", error=str(exc))
            self._send_json({"error": f"Conversion failed: {exc}"}, status=500)
            return

        _api_log("INFO", "convert_done", chars=len(json_text))
        self._send_body(json_text.encode("utf-8"), status=200)

    def _send_headers(self, status, length):
        self.send_response(status)
        self.send_header("Content-Type", "application/json; charset=utf-8")
        self.send_header("Content-Length", str(length))
        self.end_headers()

    def _send_body(self, body, status=200):
        self._send_headers(status, len(body))
        self.wfile.write(body)

    def _send_json(self, payload, status=200):
        body = json.dumps(payload, indent=2, ensure_ascii=False).encode("utf-8")
        self._send_body(body, status=status)
