"""Error Hierarchy — typed, categorized exceptions for expected failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Only expected-absent states live here (missing row, missing table); they are
      answered by FastAPI exception handlers and never reach the error Guard
    - to_response() produces the REST envelope used by api/error_handlers.py

Design Decisions:
    - Single hierarchy with ProjectsApiError base: one handler covers all domain errors
    - Severity drives log level: absent rows are INFO, not ERROR
    - Unexpected failures are deliberately NOT modelled here — they propagate raw
      to the Guard, which owns the 500 response and the outbound report
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    RESOURCE_NOT_FOUND = "resource_not_found"
    SCHEMA_NOT_READY = "schema_not_ready"


@dataclass
class ErrorContext:
    """Context attached to an error for logs and the response envelope."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class ProjectsApiError(Exception):
    """Base exception for all expected API errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 400,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
            }
        }


class ResourceNotFoundError(ProjectsApiError):
    """Requested row does not exist (or its table does not exist)."""
    def __init__(
        self, resource_type: str, resource_id: Any, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.INFO, context, 404,
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


class SchemaNotReadyError(ProjectsApiError):
    """Target table is missing — the database schema has not been initialized."""
    def __init__(self, table: str, context: ErrorContext | None = None):
        super().__init__(
            "Database schema not initialized. Please contact support.",
            "SCHEMA_NOT_READY", ErrorCategory.SCHEMA_NOT_READY,
            ErrorSeverity.WARNING, context, 503,
        )
        self.table = table
