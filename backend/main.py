"""
Minimal backend HTTP server for report generation and feedback capture.

Routes (also reachable under the /.netlify/functions prefix the UI uses):
- POST /generate-report
- POST /store-feedback
- GET  /health
"""

from __future__ import annotations

import argparse
import json
import logging
import os
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any, Dict, Optional, Tuple

from dotenv import load_dotenv
from pydantic import ValidationError

from backend.report_service import (
    FeedbackService,
    ReportService,
    create_feedback_service,
    create_report_service,
)
from feedback_loop.core.config import Config
from feedback_loop.core.exceptions import ConfigurationMissingError, DataAccessError, ReportGenerationError
from feedback_loop.feedback.schema import FeedbackSubmission
from llm.schema import ReportRequest

logger = logging.getLogger("backend")

FUNCTIONS_PREFIX = "/.netlify/functions"
CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "Content-Type",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
}


class BackendServer(ThreadingHTTPServer):
    """
    HTTP server holding the request services.

    A service left as None answers 500 with the reason it is unavailable.
    """

    def __init__(
        self,
        address: Tuple[str, int],
        report_service: Optional[ReportService] = None,
        feedback_service: Optional[FeedbackService] = None,
        unavailable: Optional[Dict[str, str]] = None,
    ) -> None:
        super().__init__(address, BackendHandler)
        self.report_service = report_service
        self.feedback_service = feedback_service
        self.unavailable = unavailable or {}


def _route(path: str) -> str:
    path = path.split("?", 1)[0]
    if path.startswith(FUNCTIONS_PREFIX):
        path = path[len(FUNCTIONS_PREFIX):]
    return path.rstrip("/") or "/"


class BackendHandler(BaseHTTPRequestHandler):
    server_version = "ReportBackend/1.0"
    server: BackendServer

    def _send_json(self, status: int, payload: Dict[str, Any]) -> None:
        body = json.dumps(payload).encode("utf-8")
        self.send_response(status)
        self.send_header("Content-Type", "application/json")
        for key, value in CORS_HEADERS.items():
            self.send_header(key, value)
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def _read_json(self) -> Optional[Dict[str, Any]]:
        raw_length = self.headers.get("Content-Length", "0")
        try:
            length = int(raw_length)
        except ValueError as exc:
            raise ValueError(f"Invalid Content-Length: {raw_length!r}") from exc
        if length <= 0:
            return None
        data = self.rfile.read(length)
        try:
            payload = json.loads(data.decode("utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError):
            return None
        return payload if isinstance(payload, dict) else None

    def log_message(self, format: str, *args: Any) -> None:
        logger.debug("%s - %s", self.address_string(), format % args)

    def do_GET(self) -> None:
        route = _route(self.path)
        if route == "/health":
            self._send_json(200, {"status": "ok"})
            return
        self._method_not_allowed_or_404(route)

    def do_OPTIONS(self) -> None:
        self.send_response(200)
        for key, value in CORS_HEADERS.items():
            self.send_header(key, value)
        self.send_header("Content-Length", "0")
        self.end_headers()

    def do_POST(self) -> None:
        route = _route(self.path)
        handlers = {"/generate-report": self._handle_generate, "/store-feedback": self._handle_feedback}
        handler = handlers.get(route)
        if handler is None:
            self._send_json(404, {"error": "Not found"})
            return
        try:
            handler()
        except Exception as exc:
            logger.exception("%s error: %s", route.lstrip("/"), exc)
            self._send_json(500, {"error": str(exc) or exc.__class__.__name__})

    def do_PUT(self) -> None:
        self._method_not_allowed_or_404(_route(self.path))

    def do_DELETE(self) -> None:
        self._method_not_allowed_or_404(_route(self.path))

    def _method_not_allowed_or_404(self, route: str) -> None:
        if route in {"/generate-report", "/store-feedback"}:
            self._send_json(405, {"error": "Method Not Allowed"})
            return
        self._send_json(404, {"error": "Not found"})

    def _handle_generate(self) -> None:
        payload = self._read_json() or {}
        if not payload.get("section") or not isinstance(payload.get("context"), dict):
            self._send_json(400, {"error": "Missing section or context"})
            return
        try:
            request = ReportRequest(**payload)
        except ValidationError as exc:
            self._send_json(400, {"error": f"Invalid request: {exc.errors()[0]['msg']}"})
            return

        service = self.server.report_service
        if service is None:
            self._send_json(500, {"error": self.server.unavailable.get("report", "Report service unavailable")})
            return

        try:
            result = service.generate(request)
        except ReportGenerationError as exc:
            logger.error("generate-report error: %s", exc)
            self._send_json(500, {"error": str(exc)})
            return
        self._send_json(200, result)

    def _handle_feedback(self) -> None:
        payload = self._read_json()
        if payload is None:
            self._send_json(400, {"error": "Invalid JSON body"})
            return
        try:
            submission = FeedbackSubmission(**payload)
        except (ValidationError, ValueError) as exc:
            self._send_json(400, {"error": f"Invalid feedback: {exc}"})
            return

        service = self.server.feedback_service
        if service is None:
            self._send_json(500, {"error": self.server.unavailable.get("feedback", "Feedback service unavailable")})
            return

        try:
            inserted = service.submit(submission)
        except DataAccessError as exc:
            logger.error("store-feedback error: %s", exc)
            self._send_json(500, {"error": str(exc)})
            return
        self._send_json(200, {"success": True, "inserted": inserted})


def build_server(host: str, port: int, config: Config) -> BackendServer:
    unavailable: Dict[str, str] = {}
    report_service = feedback_service = None
    try:
        report_service = create_report_service(config)
    except ConfigurationMissingError as exc:
        logger.error("Report generation unavailable: %s", exc)
        unavailable["report"] = str(exc)
    try:
        feedback_service = create_feedback_service(config)
    except ConfigurationMissingError as exc:
        logger.error("Feedback storage unavailable: %s", exc)
        unavailable["feedback"] = str(exc)
    return BackendServer((host, port), report_service, feedback_service, unavailable)


def run(host: str, port: int) -> None:
    config = Config()
    logger.info("Starting backend server on %s:%s", host, port)
    logger.info("FINE_TUNED_MODEL_NAME=%s", config.fine_tuned_model_name or "<not set>")
    server = build_server(host, port, config)
    server.serve_forever()


def main() -> None:
    load_dotenv()
    logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO"))
    parser = argparse.ArgumentParser(description="Report generation backend server")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=8000)
    args = parser.parse_args()

    run(args.host, args.port)


if __name__ == "__main__":
    main()
