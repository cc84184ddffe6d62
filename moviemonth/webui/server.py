# moviemonth/webui/server.py
# Serves the birthdate form, the form submission endpoint and the Gemini proxy.

import html
import http.server
import json
import logging
import socketserver
import urllib.parse
from pathlib import Path

from moviemonth.controller import FormController, Messages
from moviemonth.proxy import ProxyHandler

logger = logging.getLogger(__name__)

WEBUI_DIR = Path(__file__).parent.resolve()


class InvalidRequest(ValueError):
    """The request cannot be read; answered with HTTP 400."""


class MovieRequestHandler(http.server.BaseHTTPRequestHandler):
    """HTTP handler for the form page, ``/submit`` and ``/api/generate``."""

    def __init__(self, *args, controller=None, proxy=None, **kwargs):
        self.controller = controller
        self.proxy = proxy
        super().__init__(*args, **kwargs)

    def log_message(self, format, *args):
        logger.debug("%s - %s", self.address_string(), format % args)

    def do_GET(self):
        parsed_url = urllib.parse.urlparse(self.path)

        if parsed_url.path == "/favicon.ico":
            self.send_response(204)
            self.end_headers()
            return

        if parsed_url.path in ("/", "/index.html"):
            return self.handle_index()

        self.send_error(404, "Not found")

    def do_POST(self):
        parsed_url = urllib.parse.urlparse(self.path)

        try:
            if parsed_url.path == "/submit":
                return self.handle_submit()
            if parsed_url.path == "/api/generate":
                return self.handle_generate()
        except InvalidRequest as exc:
            self.send_error(400, str(exc))
            return

        self.send_error(404, "Not found")

    def _read_body(self) -> bytes:
        try:
            length = int(self.headers.get("Content-Length") or 0)
        except ValueError:
            raise InvalidRequest("Invalid Content-Length header")
        return self.rfile.read(length) if length > 0 else b""

    def _birthdate_from_body(self, body: bytes):
        content_type = self.headers.get("Content-Type", "")
        if content_type.startswith("application/json"):
            try:
                payload = json.loads(body.decode("utf-8") or "{}")
            except (UnicodeDecodeError, json.JSONDecodeError):
                return None
            return payload.get("birthdate") if isinstance(payload, dict) else None
        fields = urllib.parse.parse_qs(body.decode("utf-8", errors="replace"))
        values = fields.get("birthdate")
        return values[0] if values else None

    def handle_index(self):
        template = (WEBUI_DIR / "index.html").read_text(encoding="utf-8")
        page = template.replace("{max_date}", self.controller.max_date()).replace(
            "{not_found_message}", html.escape(Messages.NOT_FOUND)
        )
        self.send_payload(200, page.encode("utf-8"), "text/html; charset=utf-8")

    def handle_submit(self):
        birthdate = self._birthdate_from_body(self._read_body())
        outcome, view = self.controller.submit(birthdate)
        if "application/json" in self.headers.get("Accept", ""):
            self.send_json_response(200, {"outcome": outcome.value, "html": view.html})
            return
        self.send_payload(200, view.html.encode("utf-8"), "text/html; charset=utf-8")

    def handle_generate(self):
        result = self.proxy.handle(self._read_body())
        self.send_payload(result.status, result.to_bytes(), "application/json")

    def send_json_response(self, status, data):
        payload = json.dumps(data, ensure_ascii=False).encode("utf-8")
        self.send_payload(status, payload, "application/json")

    def send_payload(self, status, payload: bytes, content_type: str):
        self.send_response(status)
        self.send_header("Content-Type", content_type)
        self.send_header("Content-Length", str(len(payload)))
        self.end_headers()
        self.wfile.write(payload)


# Factory that injects the controller and the proxy into each handler instance.
def create_handler_factory(controller: FormController, proxy: ProxyHandler):
    def handler_factory(*args, **kwargs):
        return MovieRequestHandler(*args, controller=controller, proxy=proxy, **kwargs)
    return handler_factory


class ReusableThreadingServer(socketserver.ThreadingMixIn, http.server.HTTPServer):
    allow_reuse_address = True
    daemon_threads = True


def create_server(host: str, port: int, controller: FormController, proxy: ProxyHandler):
    return ReusableThreadingServer((host, port), create_handler_factory(controller, proxy))


def start_server(host: str, port: int, controller: FormController, proxy: ProxyHandler):
    with create_server(host, port, controller, proxy) as httpd:
        logger.info("MovieMonth server running at http://%s:%s", host, port)
        try:
            httpd.serve_forever()
        except KeyboardInterrupt:
            logger.info("Shutting down MovieMonth server")
