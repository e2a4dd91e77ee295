"""Node Models — view-state records for the local node, its balances and channels.

Invariants:
    - Snapshots (NodeInfo, WalletBalance, ChannelsBalance) are frozen: a refresh
      replaces them, nobody edits them
    - Channel is mutable only while owned by the reconciling operation; once
      upserted into the collection it is treated as read-only
    - Detail fields (last_update, policies, node) are None until enrichment

Design Decisions:
    - Plain dataclasses, no IO: schemas/ builds them, services/ moves them around
    - Amounts in satoshi unless the field name says msat
"""

from dataclasses import dataclass, field
from datetime import datetime

from lnpulse.core.domain_types import (
    ChannelPoint,
    ChannelStatus,
    PubKey,
    ShortChannelId,
)


# ─── Snapshots ───────────────────────────────────────────────────

@dataclass(frozen=True)
class NodeInfo:
    """Identity, sync state and version of the local node."""
    pub_key: PubKey
    alias: str = ""
    version: str = ""
    block_height: int = 0
    block_hash: str = ""
    synced_to_chain: bool = False
    synced_to_graph: bool = False
    num_active_channels: int = 0
    num_inactive_channels: int = 0
    num_pending_channels: int = 0
    num_peers: int = 0
    chains: tuple[str, ...] = ()


@dataclass(frozen=True)
class WalletBalance:
    """On-chain wallet balance."""
    total: int = 0
    confirmed: int = 0
    unconfirmed: int = 0


@dataclass(frozen=True)
class ChannelsBalance:
    """Sum of local balances across open and pending-open channels."""
    balance: int = 0
    pending_open_balance: int = 0


# ─── Graph records ───────────────────────────────────────────────

@dataclass(frozen=True)
class Node:
    """Peer node metadata from the channel graph."""
    pub_key: PubKey
    alias: str = ""
    color: str = ""
    num_channels: int = 0
    total_capacity: int = 0
    last_update: datetime | None = None
    addresses: tuple[str, ...] = ()


@dataclass(frozen=True)
class RoutingPolicy:
    """One direction of a channel edge's forwarding policy."""
    time_lock_delta: int = 0
    min_htlc: int = 0
    fee_base_msat: int = 0
    fee_rate_milli_msat: int = 0
    disabled: bool = False


@dataclass(frozen=True)
class HTLC:
    """Pending HTLC locked in a channel commitment."""
    incoming: bool
    amount: int
    hashlock: str = ""
    expiration_height: int = 0


# ─── Channel ─────────────────────────────────────────────────────

@dataclass
class Channel:
    """A payment channel keyed by its channel point."""
    channel_point: ChannelPoint
    remote_pubkey: PubKey
    id: ShortChannelId = ShortChannelId(0)
    status: ChannelStatus = ChannelStatus.ACTIVE
    capacity: int = 0
    local_balance: int = 0
    remote_balance: int = 0
    commit_fee: int = 0
    unsettled_balance: int = 0
    total_amount_sent: int = 0
    total_amount_received: int = 0
    updates_count: int = 0
    csv_delay: int = 0
    private: bool = False
    pending_htlcs: list[HTLC] = field(default_factory=list)

    # Detail fields, filled by enrichment
    last_update: datetime | None = None
    local_policy: RoutingPolicy | None = None
    remote_policy: RoutingPolicy | None = None
    node: Node | None = None

    @property
    def is_pending(self) -> bool:
        return self.status.is_pending

    @property
    def has_detail(self) -> bool:
        return self.last_update is not None
