from http.server import HTTPServer
import os

from api.convert import handler


class DevHandler(handler):
    def _send_headers(self, status, length):
        self.send_response(status)
        self.send_header("Content-Type", "application/json; charset=utf-8")
        self.send_header("Content-Length", str(length))
        self.send_header("Access-Control-Allow-Origin", "*")
        self.send_header("Access-Control-Allow-Methods", "POST, OPTIONS")
        self.send_header("Access-Control-Allow-Headers", "Content-Type")
        self.end_headers()

    def do_OPTIONS(self):
        self._send_headers(204, 0)

    def do_POST(self):
        if self.path == "/convert":
            return self._handle_convert()

        self._send_json({"error": "Not found"}, status=404)


def run():
    port = int(os.environ.get("DEV_CONVERT_PORT", "5005"))
    server = HTTPServer(("0.0.0.0", port), DevHandler)
    print(f"Dev API running on http://localhost:{port}")
    print(f"- POST http://localhost:{port}/convert")
    server.serve_forever()


if __name__ == "__main__":
    run()
