"""
Structured error information for conversion results.

``convert_regex`` raises categorized exceptions. Callers that want a
value instead (the CLI's JSON output, a web handler) use
``convert_regex_result``, which returns a ``ConversionResult`` holding
either the annotated description or an ``ErrorInfo``.
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field

from .exceptions import RRegexError


class ErrorInfo(BaseModel):
    """
    Structured description of a failed conversion.

    Attributes:
        kind: Error category slug (e.g. "regex_syntax")
        type: Exception class name
        message: Human-readable error message
        stage: Pipeline stage where the error occurred
        timestamp: ISO 8601 timestamp of when the error was recorded
        details: Additional error-specific details

    Example:
        >>> info = ErrorInfo(kind="regex_syntax", type="RegexSyntaxError",
        ...                  message="Invalid regex '(a'", stage="building_enfa")
        >>> info.model_dump()["kind"]
        'regex_syntax'
    """

    kind: str = Field(..., description="Error category")
    type: str = Field(..., description="Exception class name")
    message: str = Field(..., description="Error message")
    stage: Optional[str] = Field(None, description="Pipeline stage")
    timestamp: str = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat(),
        description="ISO 8601 timestamp",
    )
    details: Optional[dict] = Field(None, description="Additional error details")


def create_error_info(error: RRegexError, stage: Optional[str] = None) -> ErrorInfo:
    """Build an ``ErrorInfo`` from a categorized error."""
    return ErrorInfo(
        kind=error.kind,
        type=type(error).__name__,
        message=error.message,
        stage=stage,
        details=error.details or None,
    )


class ConversionResult(BaseModel):
    """Outcome of one conversion: a description or an error, never both."""

    source: str
    description: Optional[str] = None
    start: Optional[int] = None
    accepting: Optional[list] = None
    width: Optional[int] = None
    error: Optional[ErrorInfo] = None

    @property
    def ok(self) -> bool:
        return self.error is None
