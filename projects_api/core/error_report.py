"""Error Report — pure extraction and formatting for outbound runtime-error reports.

Invariants:
    - No I/O: every function maps plain values (or an exception) to plain values
    - extract_board_id precedence: route > query > header > configured id
      > host name pattern > report URL pattern; first non-blank match wins
    - Source location is best-effort: absence is a normal result, never an error
    - ErrorReport serializes with camelCase keys (wire contract of the receiver)

Design Decisions:
    - RequestSnapshot captured by the Guard before it returns: the ASGI scope is not
      touched by the detached reporting task
    - Two textual layouts for source location: "in <path>:line <n>" (traces forwarded
      from other runtimes) and Python's 'File "<path>", line <n>'
    - Inner report is one level deep: __cause__ first, then implicit __context__
"""

import re
import traceback
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field

BOARD_ID_ROUTE_PARAM = "boardId"
BOARD_ID_QUERY_PARAM = "boardId"
BOARD_ID_HEADER = "X-Board-Id"

# Deployment hosts look like webapi<24 hex chars>.up.railway.app (no hyphen)
_BOARD_ID_PATTERN = re.compile(r"webapi([a-f0-9]{24})", re.IGNORECASE)

# Path must end in a file extension so source text such as "x in d[0:1]" is skipped.
# "in" is a whole word and stays on its own line: a frame "in login" must not run
# into the source line printed below it.
_IN_PATH_LINE_PATTERN = re.compile(
    r"\bin[ \t]+((?:[A-Za-z]:)?[^:\r\n]*\.\w+):(?:line[ \t]+)?(\d+)", re.IGNORECASE,
)
_PYTHON_FRAME_PATTERN = re.compile(r'File "([^"]+)", line (\d+)')


@dataclass(frozen=True)
class SourceLocation:
    file: str | None
    line: int | None


@dataclass(frozen=True)
class RequestSnapshot:
    """Request-derived values copied out of the ASGI scope."""
    path: str
    method: str
    user_agent: str
    board_id: str | None = None


class InnerErrorReport(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str
    type: str
    stack_trace: str | None = Field(None, alias="stackTrace")


class ErrorReport(BaseModel):
    """Structured runtime-error report posted to the configured endpoint."""
    model_config = ConfigDict(populate_by_name=True)

    board_id: str | None = Field(None, alias="boardId")
    timestamp: datetime
    source_file: str | None = Field(None, alias="file")
    source_line: int | None = Field(None, alias="line")
    stack_trace: str | None = Field(None, alias="stackTrace")
    message: str
    exception_kind: str = Field(alias="exceptionType")
    request_path: str = Field(alias="requestPath")
    request_method: str = Field(alias="requestMethod")
    user_agent: str = Field(alias="userAgent")
    inner: InnerErrorReport | None = Field(None, alias="innerException")

    def to_payload(self) -> dict:
        """JSON-ready dict with wire (camelCase) keys."""
        return self.model_dump(mode="json", by_alias=True)


# ─── Board id ───────────────────────────────────────────────────

def _non_blank(value: str | None) -> str | None:
    if value is None or not str(value).strip():
        return None
    return str(value)


def _match_board_pattern(text: str | None) -> str | None:
    if not text:
        return None
    match = _BOARD_ID_PATTERN.search(text)
    return match.group(1) if match else None


def extract_board_id(
    *,
    path_params: Mapping[str, object] | None = None,
    query_params: Mapping[str, str] | None = None,
    headers: Mapping[str, str] | None = None,
    host: str | None = None,
    default_board_id: str | None = None,
    report_url: str | None = None,
) -> str | None:
    """Derive the board id for a failed request, or None when nothing matches.

    headers must be a case-insensitive mapping (Starlette Headers) or use
    lower-case keys.
    """
    candidates = (
        (path_params or {}).get(BOARD_ID_ROUTE_PARAM),
        (query_params or {}).get(BOARD_ID_QUERY_PARAM),
        _header(headers, BOARD_ID_HEADER),
        default_board_id,
    )
    for candidate in candidates:
        board_id = _non_blank(candidate)
        if board_id is not None:
            return board_id
    return _match_board_pattern(host) or _match_board_pattern(report_url)


def _header(headers: Mapping[str, str] | None, name: str) -> str | None:
    if not headers:
        return None
    value = headers.get(name)
    if value is None:
        value = headers.get(name.lower())
    return value


# ─── Source location ────────────────────────────────────────────

def _file_name(path: str) -> str:
    path = path.strip()
    return re.split(r"[/\\]", path)[-1]


def parse_source_location(stack_trace: str | None) -> SourceLocation | None:
    """Parse file name and line number out of a textual stack trace."""
    if not stack_trace:
        return None

    match = _IN_PATH_LINE_PATTERN.search(stack_trace)
    if match:
        return SourceLocation(_file_name(match.group(1)), int(match.group(2)))

    # Python lists the innermost frame last
    frames = _PYTHON_FRAME_PATTERN.findall(stack_trace)
    if frames:
        path, line = frames[-1]
        return SourceLocation(_file_name(path), int(line))
    return None


def format_stack_trace(exc: BaseException) -> str | None:
    """Frames only (no exception line), or None if the exception was never raised."""
    if exc.__traceback__ is None:
        return None
    return "".join(traceback.format_tb(exc.__traceback__))


def locate_exception(exc: BaseException) -> SourceLocation:
    """Textual parse first, then the structured traceback of the raise site."""
    location = parse_source_location(format_stack_trace(exc))
    if location is not None:
        return location

    frames = traceback.extract_tb(exc.__traceback__) if exc.__traceback__ else []
    if frames:
        innermost = frames[-1]
        return SourceLocation(_file_name(innermost.filename), innermost.lineno)
    return SourceLocation(None, None)


# ─── Report ─────────────────────────────────────────────────────

def _inner_exception(exc: BaseException) -> BaseException | None:
    if exc.__cause__ is not None:
        return exc.__cause__
    if exc.__context__ is not None and not exc.__suppress_context__:
        return exc.__context__
    return None


def build_error_report(
    snapshot: RequestSnapshot,
    exc: BaseException,
    *,
    timestamp: datetime | None = None,
) -> ErrorReport:
    """Assemble the report for one failure."""
    location = locate_exception(exc)
    inner_exc = _inner_exception(exc)
    inner = None
    if inner_exc is not None:
        inner = InnerErrorReport(
            message=str(inner_exc),
            type=type(inner_exc).__name__,
            stack_trace=format_stack_trace(inner_exc),
        )
    return ErrorReport(
        board_id=snapshot.board_id,
        timestamp=timestamp or datetime.now(timezone.utc),
        source_file=location.file,
        source_line=location.line,
        stack_trace=format_stack_trace(exc),
        message=str(exc),
        exception_kind=type(exc).__name__,
        request_path=snapshot.path,
        request_method=snapshot.method,
        user_agent=snapshot.user_agent,
        inner=inner,
    )
