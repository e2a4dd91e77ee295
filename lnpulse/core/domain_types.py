"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - ChannelPoint is "<funding_txid>:<output_index>" and unique per channel
    - PubKey is the hex-encoded compressed public key of a node
    - All valid states encoded as Enums — no raw string matching

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: values match the names LND uses, so schemas map them directly
"""

from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

ChannelPoint = NewType("ChannelPoint", str)
PubKey = NewType("PubKey", str)
ShortChannelId = NewType("ShortChannelId", int)     # 0 while pending


# ─── Limits ──────────────────────────────────────────────────────

# One line per event on an 8K monitor at 8px per line is ~540 rows.
MAX_ROUTING_EVENTS = 512


# ─── Enums ───────────────────────────────────────────────────────

class ChannelStatus(str, Enum):
    """Channel lifecycle as reported by the node (open and pending lists)."""
    ACTIVE = "active"
    INACTIVE = "inactive"
    OPENING = "opening"
    CLOSING = "closing"
    FORCE_CLOSING = "force_closing"
    WAITING_CLOSE = "waiting_close"

    @property
    def is_pending(self) -> bool:
        return self not in (ChannelStatus.ACTIVE, ChannelStatus.INACTIVE)


class RoutingDirection(str, Enum):
    """Which side of the HTLC the local node is on."""
    SEND = "send"
    RECEIVE = "receive"
    FORWARD = "forward"


class RoutingStatus(str, Enum):
    """HTLC progress — an event starts ACTIVE and ends in one of the others."""
    ACTIVE = "active"
    FAILED = "failed"
    SETTLED = "settled"
    LINK_FAILED = "link_failed"

    @property
    def is_final(self) -> bool:
        return self is not RoutingStatus.ACTIVE
