"""Error Guard — outermost middleware that finalizes every unhandled exception.

Invariants:
    - Exactly one response per request: if http.response.start was already sent,
      the exception is re-raised untouched instead of writing a second response
    - Otherwise the client always gets 500 {"error": ..., "message": str(exc)}
    - Request-derived values (path, method, user agent, board id) are copied out of
      the scope BEFORE the report task is scheduled
    - Reporting is detached: the 500 is written without awaiting the POST, and a
      reporting failure can never re-enter this middleware

Design Decisions:
    - Pure ASGI over BaseHTTPMiddleware: wrapping send() is the only reliable way to
      know whether the response has started (same technique as Starlette's
      ServerErrorMiddleware)
    - Registered last in create_app() so it wraps CORS and the router; FastAPI's own
      ServerErrorMiddleware only ever sees the re-raised "already started" case
    - Route params are read from scope["path_params"], which the router fills in on
      the shared scope dict before the endpoint runs
"""

import logging

from starlette.datastructures import Headers, QueryParams
from starlette.responses import JSONResponse
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from projects_api.core.error_report import RequestSnapshot, extract_board_id
from projects_api.infrastructure.error_reporter import ErrorReporter

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "An error occurred while processing your request"


class ErrorReportingMiddleware:
    """Catch-all for unhandled exceptions: generic 500 plus a best-effort report."""

    def __init__(
        self,
        app: ASGIApp,
        reporter: ErrorReporter,
        default_board_id: str | None = None,
    ):
        self.app = app
        self.reporter = reporter
        self.default_board_id = default_board_id

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        response_started = False

        async def send_wrapper(message: Message) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        except Exception as exc:
            if response_started:
                logger.error(
                    "Response already started - cannot handle exception. Re-raising.",
                    extra={"path": scope.get("path"), "method": scope.get("method")},
                )
                raise

            snapshot = self.snapshot(scope)
            logger.error(
                f"Unhandled exception occurred: {exc}",
                exc_info=True,
                extra={
                    "path": snapshot.path,
                    "method": snapshot.method,
                    "board_id": snapshot.board_id,
                    "exception_type": type(exc).__name__,
                },
            )
            self.reporter.schedule(snapshot, exc)

            response = JSONResponse(
                status_code=500,
                content={"error": GENERIC_ERROR_MESSAGE, "message": str(exc)},
            )
            await response(scope, receive, send)

    def snapshot(self, scope: Scope) -> RequestSnapshot:
        """Copy everything the report needs out of the scope."""
        headers = Headers(scope=scope)
        board_id = extract_board_id(
            path_params=scope.get("path_params") or {},
            query_params=QueryParams(scope.get("query_string", b"")),
            headers=headers,
            host=headers.get("host"),
            default_board_id=self.default_board_id,
            report_url=self.reporter.endpoint_url,
        )
        return RequestSnapshot(
            path=scope.get("path", ""),
            method=scope.get("method", ""),
            user_agent=headers.get("user-agent", ""),
            board_id=board_id,
        )
