import time
import uuid
from typing import Callable, Tuple
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
import logging
from .logging_config import trace_id_var
from .security import redact_headers
from .services.prometheus_metrics import prometheus_metrics

logger = logging.getLogger("drains")

EXCLUDE_PATHS = ("/v1/healthz", "/v1/metrics/prometheus")


class TracingMiddleware(BaseHTTPMiddleware):
    """Request tracing and structured access logging"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        # Generate or reuse trace ID
        trace_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        token = trace_id_var.set(trace_id)

        client_ip = request.client.host if request.client else "unknown"
        start_time = time.time()

        try:
            response = await call_next(request)
            latency_ms = round((time.time() - start_time) * 1000, 2)

            self._log_request(request, response.status_code, latency_ms, client_ip)
            prometheus_metrics.increment_requests(response.status_code, request.url.path)

            response.headers["X-Request-ID"] = trace_id
            return response

        except Exception as e:
            latency_ms = round((time.time() - start_time) * 1000, 2)
            logger.error(f"Request failed: {e}", extra={
                "method": request.method,
                "path": request.url.path,
                "status": 500,
                "latency_ms": latency_ms,
                "client_ip": client_ip,
            })
            prometheus_metrics.increment_requests(500, request.url.path)
            raise
        finally:
            trace_id_var.reset(token)

    def _configured_secret_headers(self, request: Request) -> Tuple[str, ...]:
        """Token and signature header names from the running drain settings"""
        settings = getattr(request.app.state, "settings", None)
        if settings is None:
            return ()
        return (settings.auth_header_name, settings.signature_header)

    def _log_request(self, request: Request, status: int, latency_ms: float, client_ip: str):
        """Log HTTP request with structured data"""
        path = request.url.path
        if path in EXCLUDE_PATHS:
            return

        extra = {
            "method": request.method,
            "path": path,
            "status": status,
            "latency_ms": latency_ms,
            "client_ip": client_ip,
        }
        if status >= 400:
            extra["headers"] = redact_headers(dict(request.headers), self._configured_secret_headers(request))
            log_level = logging.ERROR if status >= 500 else logging.WARNING
            logger.log(log_level, "HTTP Request", extra=extra)
            return

        logger.info("HTTP Request", extra=extra)
