"""Error Hierarchy — typed, categorized exceptions for all lnpulse failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Node errors propagate unchanged to the refresh caller (no wrapping, no retry)
    - to_log_extra() produces flat fields accepted by the JSON log formatter

Design Decisions:
    - Single hierarchy with LnPulseError base: drivers catch one type per refresh
    - ErrorContext as dataclass: rich observability without coupling to logging framework
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone


class ErrorSeverity(str, Enum):
    """Error severity for observability and driver handling."""
    DEBUG = "debug"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    RESOURCE_NOT_FOUND = "resource_not_found"
    EXTERNAL_API = "external_api"
    TIMEOUT = "timeout"
    CONFIGURATION = "configuration"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    operation: str | None = None
    channel_point: str | None = None
    pub_key: str | None = None
    status_code: int | None = None
    debug_info: dict[str, Any] | None = None


class LnPulseError(Exception):
    """Base exception for all lnpulse errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()

    @property
    def recoverable(self) -> bool:
        """Whether the driver may simply try again on its next tick."""
        return self.category in (
            ErrorCategory.EXTERNAL_API, ErrorCategory.TIMEOUT,
        )

    def to_log_extra(self) -> dict:
        """Flatten into `extra=` fields for structured logging."""
        extra = {
            "error_code": self.code,
            "error_category": self.category.value,
            "severity": self.severity.value,
            "operation": self.context.operation,
            "channel_point": self.context.channel_point,
            "pub_key": self.context.pub_key,
            "status_code": self.context.status_code,
        }
        return {k: v for k, v in extra.items() if v is not None}


# ─── Node Errors ────────────────────────────────────────────────

class NodeRPCError(LnPulseError):
    """Remote node call failed (transport, HTTP status, or unreadable response)."""
    def __init__(
        self, message: str, rpc_error_type: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"Node RPC error ({rpc_error_type}): {message}",
            "NODE_RPC_ERROR", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.ERROR, context,
        )
        self.rpc_error_type = rpc_error_type


class NodeTimeoutError(LnPulseError):
    """Remote node call did not complete within the caller's timeout."""
    def __init__(self, operation: str, timeout: float, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.operation = ctx.operation or operation
        super().__init__(
            f"{operation} timed out after {timeout:g}s",
            "NODE_TIMEOUT", ErrorCategory.TIMEOUT,
            ErrorSeverity.WARNING, ctx,
        )
        self.timeout = timeout


class NodeNotFoundError(LnPulseError):
    """Requested graph object (node or edge) is unknown to the remote node."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "NODE_RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.DEBUG, context,
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


# ─── Boundary Errors ────────────────────────────────────────────

class InvalidRoutingEventError(LnPulseError):
    """Value handed to the routing log is not a well-formed routing event."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "INVALID_ROUTING_EVENT", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context,
        )


class ConfigurationError(LnPulseError):
    """Settings cannot produce a working node client."""
    def __init__(self, message: str, setting: str, context: ErrorContext | None = None):
        super().__init__(
            message, "CONFIGURATION_ERROR", ErrorCategory.CONFIGURATION,
            ErrorSeverity.CRITICAL, context,
        )
        self.setting = setting
