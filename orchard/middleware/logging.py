"""Structured logging with request ID propagation."""

from __future__ import annotations

import logging
import time
import uuid
from collections.abc import Iterable
from typing import Any

import structlog
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from orchard.config import LogFormat, Settings, get_settings

REQUEST_ID_HEADER = "x-request-id"
QUIET_PATHS = frozenset({"/health"})

_configured = False


def configure_structured_logging(settings: Settings | None = None) -> None:
	"""Configure stdlib + structlog once per process."""
	global _configured
	if _configured:
		return

	settings = settings or get_settings()
	log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

	shared_processors: list[Any] = [
		structlog.contextvars.merge_contextvars,
		structlog.processors.add_log_level,
		structlog.processors.TimeStamper(fmt="iso", utc=True),
	]

	if settings.log_format == LogFormat.json:
		# Thai plot names stay readable in the JSON lines
		renderer: Any = structlog.processors.JSONRenderer(ensure_ascii=False)
		logging.basicConfig(level=log_level, format="%(message)s")
	else:
		renderer = structlog.dev.ConsoleRenderer()
		logging.basicConfig(level=log_level)

	structlog.configure(
		processors=[
			*shared_processors,
			structlog.processors.format_exc_info,
			renderer,
		],
		wrapper_class=structlog.make_filtering_bound_logger(log_level),
		logger_factory=structlog.PrintLoggerFactory(),
		cache_logger_on_first_use=True,
	)
	_configured = True


def _elapsed_ms(start: float) -> float:
	return round((time.perf_counter() - start) * 1000.0, 2)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
	"""Bind a request id to every engine log line and time the request.

	Health checks hit ``/health`` every few seconds; their lines drop to
	debug so the insight calls stay readable at the default level.
	"""

	def __init__(self, app: ASGIApp, quiet_paths: Iterable[str] = QUIET_PATHS) -> None:
		super().__init__(app)
		self.quiet_paths = frozenset(quiet_paths)

	async def dispatch(self, request: Request, call_next):  # type: ignore[override]
		request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
		request.state.request_id = request_id

		structlog.contextvars.clear_contextvars()
		structlog.contextvars.bind_contextvars(request_id=request_id)

		logger = structlog.get_logger("orchard.request").bind(method=request.method, path=request.url.path)
		start = time.perf_counter()

		try:
			response = await call_next(request)
		except Exception as exc:
			logger.exception("http_request_failed", duration_ms=_elapsed_ms(start), error=str(exc))
			raise

		response.headers[REQUEST_ID_HEADER] = request_id
		log = logger.debug if request.url.path in self.quiet_paths else logger.info
		log("http_request", status_code=response.status_code, duration_ms=_elapsed_ms(start))
		return response
