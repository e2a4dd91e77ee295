"""Error hierarchy tests — codes, categories and log fields."""

from lnpulse.core.errors import (
    ErrorCategory,
    ErrorContext,
    InvalidRoutingEventError,
    LnPulseError,
    NodeNotFoundError,
    NodeRPCError,
    NodeTimeoutError,
)


def test_rpc_error_is_recoverable():
    e = NodeRPCError("connection refused", "transport_error")
    assert isinstance(e, LnPulseError)
    assert e.code == "NODE_RPC_ERROR"
    assert e.category == ErrorCategory.EXTERNAL_API
    assert e.recoverable
    assert "transport_error" in e.message


def test_timeout_records_operation():
    e = NodeTimeoutError("refresh_info", 2.5)
    assert e.context.operation == "refresh_info"
    assert e.message == "refresh_info timed out after 2.5s"
    assert e.recoverable


def test_timeout_keeps_existing_operation():
    ctx = ErrorContext(operation="get_channel_info")
    e = NodeTimeoutError("refresh_channels", 1, context=ctx)
    assert e.context.operation == "get_channel_info"


def test_not_found_is_not_recoverable():
    e = NodeNotFoundError("node", "02ab")
    assert e.message == "node '02ab' not found"
    assert not e.recoverable


def test_log_extra_drops_empty_fields():
    e = NodeRPCError(
        "boom", "http_500",
        ErrorContext(operation="get_info", status_code=500),
    )
    assert e.to_log_extra() == {
        "error_code": "NODE_RPC_ERROR",
        "error_category": "external_api",
        "severity": "error",
        "operation": "get_info",
        "status_code": 500,
    }


def test_invalid_event_is_validation_error():
    e = InvalidRoutingEventError("bad")
    assert e.category == ErrorCategory.VALIDATION
    assert e.to_log_extra()["error_code"] == "INVALID_ROUTING_EVENT"
