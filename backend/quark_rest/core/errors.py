"""Error Hierarchy — typed, categorized exceptions for every quark-rest failure mode.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Decode/validation/precondition errors are 400-level; store/transport errors are 500-level
    - to_response() produces the REST error envelope (also used as Task failure payload)
    - ContractViolationError is fatal: raised, never turned into a TaskResult

Design Decisions:
    - Single hierarchy with QuarkRestError base: FastAPI global handler catches all
    - ErrorContext as dataclass: resource/user/method context without coupling to logging
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
    DATABASE = "database"
    EXTERNAL_API = "external_api"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Where the failure happened: which resource, which user, which verb."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    resource_type: str | None = None
    resource_id: str | None = None
    user: str | None = None
    method: str | None = None
    debug_info: dict[str, Any] | None = None


class QuarkRestError(Exception):
    """Base exception for all quark-rest errors."""

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
                    "resource_type": self.context.resource_type,
                    "resource_id": self.context.resource_id,
                    "user": self.context.user,
                    "method": self.context.method,
                },
            }
        }


# ─── Wire Errors (400-level) ────────────────────────────────────

class TaskDecodeError(QuarkRestError):
    """Incoming request could not be turned into a Task."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "TASK_DECODE_ERROR", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )


class TaskEncodeError(QuarkRestError):
    """Task could not be turned into a request."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "TASK_ENCODE_ERROR", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )


class MixedCommandError(QuarkRestError):
    """A command of a different kind was added to a Task."""
    def __init__(self, expected: str, got: str, context: ErrorContext | None = None):
        super().__init__(
            f"task holds {expected} commands, cannot add {got} command",
            "MIXED_COMMANDS", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.expected = expected
        self.got = got


class ResourceValidationError(QuarkRestError):
    """Resource failed its own validation predicate."""
    def __init__(self, message: str, field: str, context: ErrorContext | None = None):
        super().__init__(
            message, "VALIDATION_ERROR", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.field = field


class UnknownResourceError(QuarkRestError):
    """Update/delete/patch targeted a resource that does not exist."""
    def __init__(
        self, action: str, resource_type: str, resource_id: str,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.resource_type = resource_type
        ctx.resource_id = resource_id
        super().__init__(
            f"{action} unknown resource: {resource_type}",
            "UNKNOWN_RESOURCE", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, ctx, 404,
        )
        self.action = action


class ServiceNotFoundError(QuarkRestError):
    """Service registry has no endpoint under the requested name."""
    def __init__(self, name: str, context: ErrorContext | None = None):
        super().__init__(
            f"service '{name}' not found",
            "SERVICE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )
        self.name = name


# ─── Infrastructure Errors (500-level) ──────────────────────────

class TaskResultDecodeError(QuarkRestError):
    """Response body could not be read or parsed into the expected shape."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "RESULT_DECODE_ERROR", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.ERROR, context, 502,
        )


class RegistrationError(QuarkRestError):
    """Resource type could not be registered with the serializer."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "REGISTRATION_ERROR", ErrorCategory.INTERNAL,
            ErrorSeverity.CRITICAL, context, 500,
        )


class StoreError(QuarkRestError):
    """Resource store operation failed."""
    def __init__(
        self, message: str, operation: str,
        context: ErrorContext | None = None, prefix: str = "",
    ):
        super().__init__(
            f"{prefix}Store {operation} failed: {message}",
            "STORE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation
        self.detail = message


class TransportError(QuarkRestError):
    """Connect or send produced no usable response."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Transport {operation} failed: {message}",
            "TRANSPORT_ERROR", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation


class ContractViolationError(QuarkRestError):
    """An invariant was broken upstream (e.g. unknown command kind reached dispatch)."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "CONTRACT_VIOLATION", ErrorCategory.INTERNAL,
            ErrorSeverity.CRITICAL, context, 500,
        )
