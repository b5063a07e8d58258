"""Error Hierarchy — typed, categorized exceptions for all reframing failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors (4xx) are raised before any state mutation — rejections have no side effects
    - Infrastructure errors (5xx) never reach the end user from inside a chat turn:
      the controller degrades ModelAdapterError to the fallback message
    - to_response() produces the REST envelope
    - No user-authored text is ever copied into an error message

Design Decisions:
    - Single hierarchy with ReframeError base: FastAPI global handler catches all (ADR: uniform error shape)
    - ErrorContext as dataclass: rich observability without coupling to logging framework
    - Crisis / injection screening are NOT errors: they are in-band reply kinds (ReplyKind)
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
    BUSINESS_RULE = "business_rule"
    RESOURCE_NOT_FOUND = "resource_not_found"
    FORBIDDEN = "forbidden"
    RATE_LIMIT = "rate_limit"
    DATABASE = "database"
    EXTERNAL_API = "external_api"
    INTERNAL = "internal"
    CONFLICT = "conflict"
    TIMEOUT = "timeout"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    session_id: str | None = None
    user_id: int | None = None
    turn_count: int | None = None
    debug_info: dict[str, Any] | None = None
    retry_after_ms: int | None = None


class ReframeError(Exception):
    """Base exception for all Mindful Reframe errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
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
                "context": {
                    "session_id": self.context.session_id,
                    "turn_count": self.context.turn_count,
                    "retry_after_ms": self.context.retry_after_ms,
                },
            }
        }


# ─── Domain Errors (4xx) ─────────────────────────────────────────

class ReframeValidationError(ReframeError):
    """Input failed a domain validation rule."""
    def __init__(self, message: str, field: str, context: ErrorContext | None = None):
        super().__init__(
            message, "VALIDATION_ERROR", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.field = field


class InvalidMethodError(ReframeError):
    """Unknown reframing method requested at session start."""
    def __init__(self, method: str, context: ErrorContext | None = None):
        super().__init__(
            f"Unknown reframing method '{method}'",
            "INVALID_METHOD", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.method = method


class InvalidPacingChoiceError(ReframeError):
    """Pacing option not offered for this session."""
    def __init__(self, choice: str, context: ErrorContext | None = None):
        super().__init__(
            f"Pacing option '{choice}' is not available for this session",
            "INVALID_PACING_CHOICE", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.choice = choice


class SessionClosedError(ReframeError):
    """Mutation attempted on a completed session."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "This reframing session is already completed. Start a new session for a new thought.",
            "SESSION_CLOSED", ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, context, 409,
        )


class PacingChoicePendingError(ReframeError):
    """Message sent while the pacing menu is still unanswered."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Choose how to continue (keep reframing, different thought, visualization) before sending a message.",
            "PACING_CHOICE_PENDING", ErrorCategory.CONFLICT,
            ErrorSeverity.WARNING, context, 409,
        )


class PacingChoiceNotExpectedError(ReframeError):
    """Pacing choice posted while no pacing menu is open."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "No pacing choice is pending for this session.",
            "PACING_CHOICE_NOT_EXPECTED", ErrorCategory.CONFLICT,
            ErrorSeverity.WARNING, context, 409,
        )


class ResourceNotFoundError(ReframeError):
    """Requested resource does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )


class AccessDeniedError(ReframeError):
    """Resource belongs to a different user."""
    def __init__(self, resource_type: str, context: ErrorContext | None = None):
        super().__init__(
            f"Access denied to {resource_type}",
            "ACCESS_DENIED", ErrorCategory.FORBIDDEN,
            ErrorSeverity.ERROR, context, 403,
        )


class SessionLimitError(ReframeError):
    """User reached the saved journal entry cap."""
    def __init__(self, count: int, limit: int, context: ErrorContext | None = None):
        super().__init__(
            f"Session limit reached ({count}/{limit}). Please delete some sessions or upgrade your account.",
            "SESSION_LIMIT_REACHED", ErrorCategory.RATE_LIMIT,
            ErrorSeverity.WARNING, context, 429,
        )
        self.count = count
        self.limit = limit


# ─── Infrastructure Errors (5xx) ─────────────────────────────────

class DatabaseError(ReframeError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation


class ModelAdapterError(ReframeError):
    """Language model call failed, timed out, or returned unusable output."""
    def __init__(
        self,
        message: str,
        api_error_type: str,
        retry_after_ms: int | None = None,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.retry_after_ms = retry_after_ms
        super().__init__(
            f"Model API error ({api_error_type}): {message}",
            "MODEL_API_ERROR", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.CRITICAL, ctx, 503,
        )
        self.api_error_type = api_error_type
