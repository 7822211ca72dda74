"""Per-request access log with a request id; feeds the request counters in /metrics."""
import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from bus_sg.monitoring.metrics import record_request

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


def _client_ip(request: Request) -> str:
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else ""


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex[:12]
        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000
        record_request(response.status_code)
        response.headers[REQUEST_ID_HEADER] = request_id
        logger.info(
            "request id=%s method=%s path=%s status=%s duration_ms=%.1f client=%s",
            request_id,
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
            _client_ip(request),
            extra={"request_id": request_id, "status": response.status_code},
        )
        return response
