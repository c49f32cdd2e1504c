import logging
import time
import uuid
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
QUIET_PATHS = frozenset({"/health"})


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Tags every request with an id and logs one line per response.

    The id is taken from an incoming X-Request-ID header when present. It is
    echoed back in the same header and in every error envelope, and the
    envelope's error code is appended to the log line.
    """

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id
        fields = {"request_id": request_id, "method": request.method, "path": request.url.path}
        started = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception as exc:
            logger.error(
                f"[{request_id}] {request.method} {request.url.path} - ERROR",
                extra={**fields, "duration_ms": _elapsed_ms(started), "error": str(exc)},
            )
            raise

        duration_ms = _elapsed_ms(started)
        error_code = getattr(request.state, "error_code", None)
        suffix = f" [{error_code}]" if error_code else ""

        if request.url.path in QUIET_PATHS and response.status_code < 400:
            level = logging.DEBUG
        elif response.status_code >= 400:
            level = logging.WARNING
        else:
            level = logging.INFO
        logger.log(
            level,
            f"[{request_id}] {request.method} {request.url.path} - {response.status_code}{suffix} ({duration_ms}ms)",
            extra={**fields, "status_code": response.status_code, "duration_ms": duration_ms, "error_code": error_code},
        )

        response.headers[REQUEST_ID_HEADER] = request_id
        return response


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)
