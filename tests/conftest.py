"""Shared fixtures: a throwaway local HTTP server."""

import threading
from http.server import BaseHTTPRequestHandler, HTTPServer

import pytest


def _serve(handler_cls):
    server = HTTPServer(("127.0.0.1", 0), handler_cls)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    return server, thread


@pytest.fixture
def serve_handler():
    """Start a server for a handler class; returns its base URL."""
    started = []

    def _start(handler_cls):
        server, thread = _serve(handler_cls)
        started.append((server, thread))
        host, port = server.server_address
        return f"http://{host}:{port}"

    yield _start

    for server, thread in started:
        server.shutdown()
        server.server_close()
        thread.join(timeout=5)


@pytest.fixture
def html_server(serve_handler):
    """Static page server. Register pages with ``routes[path] = (status, content_type, body)``."""
    routes = {}

    class _PageHandler(BaseHTTPRequestHandler):
        def do_GET(self):
            status, content_type, body = routes.get(
                self.path, (404, "text/plain", b"Not Found")
            )
            self.send_response(status)
            self.send_header("Content-Type", content_type)
            self.send_header("Content-Length", str(len(body)))
            self.end_headers()
            self.wfile.write(body)

        def log_message(self, format, *args):
            pass

    base_url = serve_handler(_PageHandler)
    return base_url, routes
