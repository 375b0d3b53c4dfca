import contextvars
import logging
import time
import uuid
from typing import Optional, Union

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

# Context var to store request id so any code during the request can fetch it
request_id_ctx: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar("request_id", default=None)

REQUEST_ID_HEADER = "X-Request-ID"


class RequestIdFilter(logging.Filter):
    """Attach request_id to every LogRecord so formatter can include it."""
    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_ctx.get() or "-"
        return True


def setup_logging(level: Union[int, str] = logging.INFO) -> None:
    """
    Configure the root logger once at app startup.
    Every line carries the id of the request that produced it.
    """
    root = logging.getLogger()
    if any(isinstance(f, RequestIdFilter) for h in root.handlers for f in h.filters):
        # Avoid adding duplicate handlers when reloading during development
        return

    handler = logging.StreamHandler()
    fmt = "%(asctime)s %(levelname)s [%(request_id)s] %(name)s: %(message)s"
    handler.setFormatter(logging.Formatter(fmt))
    handler.addFilter(RequestIdFilter())

    root.setLevel(level.upper() if isinstance(level, str) else level)
    root.addHandler(handler)


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    Request logger.

    - Reuses the caller's X-Request-ID or generates one, and echoes it back.
    - Logs request start (method, path, client) and end (status, duration_ms).
    - Does not read the request body.
    """

    async def dispatch(self, request: Request, call_next):
        req_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        token = request_id_ctx.set(req_id)

        logger = logging.getLogger("cinema_api.middleware")
        start = time.time()

        try:
            client_host = request.client.host if request.client else None
            logger.info(
                "request.start method=%s path=%s client=%s",
                request.method, request.url.path, client_host,
            )

            response = await call_next(request)

            duration_ms = int((time.time() - start) * 1000)
            logger.info(
                "request.end status_code=%s duration_ms=%s",
                response.status_code, duration_ms,
            )
            response.headers[REQUEST_ID_HEADER] = req_id
            return response

        except Exception:
            # Log unexpected errors with stack trace
            duration_ms = int((time.time() - start) * 1000)
            logger.exception("request.error duration_ms=%s", duration_ms)
            raise
        finally:
            request_id_ctx.reset(token)


def get_request_id() -> Optional[str]:
    return request_id_ctx.get()
