"""Logging setup: JSON or plain lines tagged with the request ID.

``RequestLoggingMiddleware`` stamps every request with an ID (taken from
the ``X-Request-ID`` header when the caller sends one) and writes an
access line.  ``log_duration`` times an engine call inside a route and
logs it with whatever structured fields the caller passes.
"""

from __future__ import annotations

import json
import logging
import time
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Iterator

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

request_id_var: ContextVar[str] = ContextVar("request_id", default="")

ACCESS_LOGGER = "pvsizer.access"

# Attributes every LogRecord carries; anything else came in via ``extra=``.
_RESERVED = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {"message", "asctime"}


def _extra_fields(record: logging.LogRecord) -> dict[str, Any]:
    return {k: v for k, v in vars(record).items() if k not in _RESERVED and not k.startswith("_")}


class _RequestIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get("") or "-"
        return True


class JSONFormatter(logging.Formatter):
    """One JSON object per line.

    Structured ``extra=`` fields (``panels``, ``inverter_id``,
    ``duration_ms``...) are copied to the top level of the object.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update(_extra_fields(record))
        if entry.get("request_id") == "-":
            del entry["request_id"]

        if record.exc_info and record.exc_info[1]:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Sets the request ID, echoes it as ``X-Request-ID`` and logs timing."""

    async def dispatch(self, request: Request, call_next) -> Response:  # type: ignore[override]
        rid = request.headers.get("x-request-id") or uuid.uuid4().hex[:8]
        token = request_id_var.set(rid)
        start = time.perf_counter()
        try:
            response: Response = await call_next(request)
        finally:
            request_id_var.reset(token)
        duration_ms = round((time.perf_counter() - start) * 1000, 1)

        response.headers["X-Request-ID"] = rid
        logging.getLogger(ACCESS_LOGGER).info(
            "%s %s -> %s (%.1fms)",
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
            extra={
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": duration_ms,
                "client_ip": request.client.host if request.client else None,
            },
        )
        return response


@contextmanager
def log_duration(logger: logging.Logger, label: str, **fields: Any) -> Iterator[dict[str, Any]]:
    """Log ``label`` with its wall time once the block finishes.

    The yielded dict is merged into the log fields, so the block can
    attach results (e.g. annual production) after computing them.
    Nothing is logged when the block raises.
    """
    start = time.perf_counter()
    extra = dict(fields)
    yield extra
    extra["duration_ms"] = round((time.perf_counter() - start) * 1000, 1)
    logger.info("%s (%.1fms)", label, extra["duration_ms"], extra=extra)


def setup_logging(json_format: bool = False, debug: bool = False) -> None:
    """Configure the root logger; ``json_format=True`` for log shipping."""
    handler = logging.StreamHandler()
    handler.addFilter(_RequestIdFilter())
    if json_format:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)-7s [%(request_id)s] %(name)s: %(message)s")
        )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(logging.DEBUG if debug else logging.INFO)

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("multiprocessing").setLevel(logging.WARNING)
