"""Routing Event Schemas — validation for routing events entering the core untyped.

Invariants:
    - parse_routing_event() returns a RoutingEvent or raises InvalidRoutingEventError
    - RoutingEvent instances pass through untouched (already typed at their producer)
    - Channel and HTLC ids are non-negative (uint64 on the wire)

Design Decisions:
    - Validation only at the true boundary: the stream producer already yields
      RoutingEvent; mappings come from replayed or bridged sources
    - Pydantic coerces string-encoded uint64s, which is how LND's JSON gateway sends them
"""

from collections.abc import Mapping
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from lnpulse.core.domain_types import RoutingDirection, RoutingStatus
from lnpulse.core.errors import ErrorContext, InvalidRoutingEventError
from lnpulse.core.routing_event import RoutingEvent


class RoutingEventPayload(BaseModel):
    """Mapping form of a routing event."""
    model_config = ConfigDict(extra="ignore")

    incoming_channel_id: int = Field(ge=0)
    outgoing_channel_id: int = Field(ge=0)
    incoming_htlc_id: int = Field(ge=0)
    outgoing_htlc_id: int = Field(ge=0)
    direction: RoutingDirection
    status: RoutingStatus
    last_update: datetime
    incoming_timelock: int = Field(0, ge=0)
    outgoing_timelock: int = Field(0, ge=0)
    amount_msat: int = Field(0, ge=0)
    fee_msat: int = 0
    failure_code: str = ""
    failure_detail: str = ""

    def to_domain(self) -> RoutingEvent:
        return RoutingEvent(**self.model_dump())


def parse_routing_event(value: object) -> RoutingEvent:
    """Coerce an untyped value into a RoutingEvent or raise InvalidRoutingEventError."""
    if isinstance(value, RoutingEvent):
        return value
    if not isinstance(value, Mapping):
        raise InvalidRoutingEventError(
            f"expected RoutingEvent or mapping, got {type(value).__name__}",
        )
    try:
        return RoutingEventPayload.model_validate(dict(value)).to_domain()
    except ValidationError as e:
        raise InvalidRoutingEventError(
            f"malformed routing event: {e.error_count()} validation error(s)",
            context=ErrorContext(debug_info={"errors": e.errors(include_url=False)}),
        ) from e
