"""Runtime Error Reporter — fire-and-forget POST of error reports to a remote endpoint.

Invariants:
    - At most one POST per failure: no retry, no queue, no backpressure
    - Every POST is bounded by timeout_seconds (default 5s)
    - Nothing raised while building or sending a report escapes this module
    - schedule() never blocks the caller; the task is detached from the request
    - Pending tasks are strongly referenced until done (asyncio only keeps weak refs)

Design Decisions:
    - httpx.AsyncClient per attempt: no shared connection state between reports
    - Injectable transport: tests swap in httpx.MockTransport, production uses the default
    - drain() exists for shutdown and tests only; request handling never awaits it
"""

import asyncio
import logging

import httpx

from projects_api.core.error_report import (
    ErrorReport, RequestSnapshot, build_error_report,
)

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 5.0


class ErrorReporter:
    """Posts ErrorReport payloads to a configured URL, best-effort."""

    def __init__(
        self,
        endpoint_url: str | None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.endpoint_url = (endpoint_url or "").strip() or None
        self.timeout_seconds = timeout_seconds
        self._transport = transport
        self._pending: set[asyncio.Task] = set()

    @property
    def enabled(self) -> bool:
        return self.endpoint_url is not None

    @property
    def pending(self) -> frozenset[asyncio.Task]:
        return frozenset(self._pending)

    def schedule(
        self, snapshot: RequestSnapshot, exc: BaseException,
    ) -> asyncio.Task | None:
        """Start a detached task that builds and sends the report for exc."""
        if not self.enabled:
            logger.debug("RUNTIME_ERROR_ENDPOINT_URL is not set - skipping error reporting")
            return None
        task = asyncio.get_running_loop().create_task(
            self._report(snapshot, exc), name="runtime-error-report",
        )
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def _report(self, snapshot: RequestSnapshot, exc: BaseException) -> None:
        try:
            report = build_error_report(snapshot, exc)
            await self.send(report)
        except Exception as e:
            logger.error(
                f"Failed to send error to endpoint: {e}",
                exc_info=True,
                extra={"report_url": self.endpoint_url},
            )

    async def send(self, report: ErrorReport, url: str | None = None) -> bool:
        """POST one report. Returns True on a 2xx answer, False otherwise."""
        target = url or self.endpoint_url
        if not target:
            return False
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout_seconds, transport=self._transport,
            ) as client:
                response = await client.post(target, json=report.to_payload())
        except httpx.HTTPError as e:
            logger.warning(
                f"Error report POST failed: {type(e).__name__}: {e}",
                extra={"report_url": target},
            )
            return False

        if response.is_success:
            logger.info(
                "Sent runtime error report",
                extra={"report_url": target, "status_code": response.status_code},
            )
            return True
        logger.error(
            f"Error endpoint returned {response.status_code}: {response.text[:500]}",
            extra={"report_url": target, "status_code": response.status_code},
        )
        return False

    async def drain(self) -> None:
        """Wait for in-flight reports (shutdown and tests)."""
        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)
