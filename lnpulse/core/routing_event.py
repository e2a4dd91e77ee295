"""Routing Event — one HTLC observed passing through (or from, or to) the local node.

Invariants:
    - Identity is the (incoming channel, incoming htlc, outgoing channel,
      outgoing htlc) tuple; two fetched objects with equal identity are the
      same event at different stages
    - update() never touches identity or amounts, only progress fields

Design Decisions:
    - same_event() kept as the domain relation; identity_key is the same
      relation as a hashable tuple so the log can index events
"""

from dataclasses import dataclass
from datetime import datetime

from lnpulse.core.domain_types import RoutingDirection, RoutingStatus

RoutingEventKey = tuple[int, int, int, int]


@dataclass
class RoutingEvent:
    """An HTLC event; mutable so later observations can be folded in."""
    incoming_channel_id: int
    outgoing_channel_id: int
    incoming_htlc_id: int
    outgoing_htlc_id: int
    direction: RoutingDirection
    status: RoutingStatus
    last_update: datetime
    incoming_timelock: int = 0
    outgoing_timelock: int = 0
    amount_msat: int = 0
    fee_msat: int = 0
    failure_code: str = ""
    failure_detail: str = ""

    @property
    def identity_key(self) -> RoutingEventKey:
        return (
            self.incoming_channel_id,
            self.incoming_htlc_id,
            self.outgoing_channel_id,
            self.outgoing_htlc_id,
        )

    def same_event(self, other: "RoutingEvent") -> bool:
        return self.identity_key == other.identity_key

    def update(self, newer: "RoutingEvent") -> None:
        """Fold a later observation of the same event into this one."""
        self.last_update = newer.last_update
        self.status = newer.status
        self.failure_code = newer.failure_code
        self.failure_detail = newer.failure_detail
