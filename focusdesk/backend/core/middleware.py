"""
Request Context Middleware.

Tags every request with an id, the calling client and its timing, and binds
those to structlog so service and repository logs carry them.
"""

import time
import uuid
from datetime import datetime, timezone

import structlog
from starlette.datastructures import Headers
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from focusdesk.backend.core.logging import get_logger

logger = get_logger(__name__)

# The Mini App sends "web", the terminal client "cli", the bot "telegram".
KNOWN_FRONTENDS = {"web", "cli", "telegram", "api", "internal"}


def resolve_frontend(headers: Headers | dict) -> str:
    """Identify the calling client from X-Frontend-ID.

    A request carrying Telegram init data but no explicit id comes from the
    Mini App.
    """
    frontend = (headers.get("X-Frontend-ID") or "").lower()
    if frontend in KNOWN_FRONTENDS:
        return frontend
    if not frontend and headers.get("X-Telegram-Init-Data"):
        return "web"
    return "unknown"


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    Adds request context to every request.

    - X-Request-ID is propagated or generated
    - request.state carries request_id, frontend and start_time
    - X-Response-Time is set on the response
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        frontend = resolve_frontend(request.headers)

        request.state.request_id = request_id
        request.state.frontend = frontend
        request.state.start_time = datetime.now(timezone.utc).replace(tzinfo=None)
        started = time.perf_counter()

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            frontend=frontend,
            method=request.method,
            path=request.url.path,
        )
        logger.debug(
            "Request started",
            extra={"client_host": request.client.host if request.client else None},
        )

        try:
            response = await call_next(request)
        except Exception as exc:
            logger.error(
                "Request failed with exception",
                extra={
                    "duration_ms": int((time.perf_counter() - started) * 1000),
                    "error_type": type(exc).__name__,
                },
            )
            raise
        else:
            duration_ms = int((time.perf_counter() - started) * 1000)
            response.headers["X-Request-ID"] = request_id
            response.headers["X-Response-Time"] = f"{duration_ms}ms"
            logger.debug(
                "Request completed",
                extra={"status_code": response.status_code, "duration_ms": duration_ms},
            )
            return response
        finally:
            structlog.contextvars.clear_contextvars()
