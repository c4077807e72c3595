from __future__ import annotations
import json
import logging
import time
from typing import Any, Callable
from starlette.requests import Request
from starlette.responses import Response

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Install a single stream handler on the root logger (idempotent)."""
    root = logging.getLogger()
    if not any(getattr(h, "_mfroosh", False) for h in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._mfroosh = True  # type: ignore[attr-defined]
        root.addHandler(handler)
    root.setLevel(level.upper())


def json_logger_middleware() -> Callable:
    """Return a Starlette middleware callable that logs a JSON line per request.

    It captures: method, path, status, latency_ms, and the delivery outcome
    stored on request.state by the enquiry route (delivery_provider,
    delivery_status).
    """

    async def _middleware(request: Request, call_next: Callable[[Request], Any]) -> Response:
        start = time.perf_counter()
        status = 500
        try:
            response: Response = await call_next(request)
            status = response.status_code
        finally:
            latency_ms = round((time.perf_counter() - start) * 1000.0, 2)
            s = getattr(request, "state", None)
            payload = {
                "method": request.method,
                "path": request.url.path,
                "status": status,
                "latency_ms": latency_ms,
            }
            for k in ("delivery_provider", "delivery_status"):
                if s is not None and hasattr(s, k):
                    payload[k] = getattr(s, k)
            print(json.dumps(payload), flush=True)
        return response

    return _middleware
