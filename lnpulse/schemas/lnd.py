"""LND REST Schemas — pydantic models for the lnd REST gateway's JSON responses.

Invariants:
    - uint64/int64 arrive as JSON strings; lax-mode int fields coerce them
    - Missing fields fall back to proto3 zero values (gateway may omit defaults)
    - to_domain() output contains only core dataclasses
    - Unix timestamps of 0 mean "never" and become None

Design Decisions:
    - extra="ignore" everywhere: lnd adds fields between releases
    - Only the fields the dashboard shows are modelled
"""

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field

from lnpulse.core.domain_types import (
    ChannelPoint,
    ChannelStatus,
    PubKey,
    RoutingDirection,
    RoutingStatus,
    ShortChannelId,
)
from lnpulse.core.node_models import (
    HTLC,
    Channel,
    ChannelsBalance,
    Node,
    NodeInfo,
    RoutingPolicy,
    WalletBalance,
)
from lnpulse.core.routing_event import RoutingEvent


class _LndModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


def _from_unix(seconds: int) -> datetime | None:
    if not seconds:
        return None
    return datetime.fromtimestamp(seconds, tz=timezone.utc)


# ─── Snapshots ───────────────────────────────────────────────────

class _Chain(_LndModel):
    chain: str = ""
    network: str = ""


class GetInfoResponse(_LndModel):
    identity_pubkey: str
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
    chains: list[_Chain] = Field(default_factory=list)

    def to_domain(self) -> NodeInfo:
        return NodeInfo(
            pub_key=PubKey(self.identity_pubkey),
            alias=self.alias,
            version=self.version,
            block_height=self.block_height,
            block_hash=self.block_hash,
            synced_to_chain=self.synced_to_chain,
            synced_to_graph=self.synced_to_graph,
            num_active_channels=self.num_active_channels,
            num_inactive_channels=self.num_inactive_channels,
            num_pending_channels=self.num_pending_channels,
            num_peers=self.num_peers,
            chains=tuple(f"{c.chain}/{c.network}" for c in self.chains),
        )


class WalletBalanceResponse(_LndModel):
    total_balance: int = 0
    confirmed_balance: int = 0
    unconfirmed_balance: int = 0

    def to_domain(self) -> WalletBalance:
        return WalletBalance(
            total=self.total_balance,
            confirmed=self.confirmed_balance,
            unconfirmed=self.unconfirmed_balance,
        )


class ChannelBalanceResponse(_LndModel):
    balance: int = 0
    pending_open_balance: int = 0

    def to_domain(self) -> ChannelsBalance:
        return ChannelsBalance(
            balance=self.balance,
            pending_open_balance=self.pending_open_balance,
        )


# ─── Channels ────────────────────────────────────────────────────

class _Htlc(_LndModel):
    incoming: bool = False
    amount: int = 0
    hashlock: str = ""
    expiration_height: int = 0

    def to_domain(self) -> HTLC:
        return HTLC(
            incoming=self.incoming,
            amount=self.amount,
            hashlock=self.hashlock,
            expiration_height=self.expiration_height,
        )


class _OpenChannel(_LndModel):
    active: bool = False
    remote_pubkey: str
    channel_point: str
    chan_id: int = 0
    capacity: int = 0
    local_balance: int = 0
    remote_balance: int = 0
    commit_fee: int = 0
    unsettled_balance: int = 0
    total_satoshis_sent: int = 0
    total_satoshis_received: int = 0
    num_updates: int = 0
    csv_delay: int = 0
    private: bool = False
    pending_htlcs: list[_Htlc] = Field(default_factory=list)

    def to_domain(self) -> Channel:
        return Channel(
            channel_point=ChannelPoint(self.channel_point),
            remote_pubkey=PubKey(self.remote_pubkey),
            id=ShortChannelId(self.chan_id),
            status=ChannelStatus.ACTIVE if self.active else ChannelStatus.INACTIVE,
            capacity=self.capacity,
            local_balance=self.local_balance,
            remote_balance=self.remote_balance,
            commit_fee=self.commit_fee,
            unsettled_balance=self.unsettled_balance,
            total_amount_sent=self.total_satoshis_sent,
            total_amount_received=self.total_satoshis_received,
            updates_count=self.num_updates,
            csv_delay=self.csv_delay,
            private=self.private,
            pending_htlcs=[h.to_domain() for h in self.pending_htlcs],
        )


class ListChannelsResponse(_LndModel):
    channels: list[_OpenChannel] = Field(default_factory=list)

    def to_domain(self) -> list[Channel]:
        return [c.to_domain() for c in self.channels]


class _PendingChannelCore(_LndModel):
    remote_node_pub: str
    channel_point: str
    capacity: int = 0
    local_balance: int = 0
    remote_balance: int = 0
    private: bool = False


class _PendingChannel(_LndModel):
    channel: _PendingChannelCore
    commit_fee: int = 0

    def to_domain(self, status: ChannelStatus) -> Channel:
        core = self.channel
        return Channel(
            channel_point=ChannelPoint(core.channel_point),
            remote_pubkey=PubKey(core.remote_node_pub),
            status=status,
            capacity=core.capacity,
            local_balance=core.local_balance,
            remote_balance=core.remote_balance,
            commit_fee=self.commit_fee,
            private=core.private,
        )


class PendingChannelsResponse(_LndModel):
    pending_open_channels: list[_PendingChannel] = Field(default_factory=list)
    pending_closing_channels: list[_PendingChannel] = Field(default_factory=list)
    pending_force_closing_channels: list[_PendingChannel] = Field(default_factory=list)
    waiting_close_channels: list[_PendingChannel] = Field(default_factory=list)

    def to_domain(self) -> list[Channel]:
        groups = (
            (self.pending_open_channels, ChannelStatus.OPENING),
            (self.pending_closing_channels, ChannelStatus.CLOSING),
            (self.pending_force_closing_channels, ChannelStatus.FORCE_CLOSING),
            (self.waiting_close_channels, ChannelStatus.WAITING_CLOSE),
        )
        return [p.to_domain(status) for items, status in groups for p in items]


# ─── Graph ───────────────────────────────────────────────────────

class _RoutingPolicy(_LndModel):
    time_lock_delta: int = 0
    min_htlc: int = 0
    fee_base_msat: int = 0
    fee_rate_milli_msat: int = 0
    disabled: bool = False

    def to_domain(self) -> RoutingPolicy:
        return RoutingPolicy(
            time_lock_delta=self.time_lock_delta,
            min_htlc=self.min_htlc,
            fee_base_msat=self.fee_base_msat,
            fee_rate_milli_msat=self.fee_rate_milli_msat,
            disabled=self.disabled,
        )


class ChannelEdgeResponse(_LndModel):
    channel_id: int = 0
    last_update: int = 0
    node1_pub: str = ""
    node2_pub: str = ""
    node1_policy: _RoutingPolicy | None = None
    node2_policy: _RoutingPolicy | None = None

    def apply_to(self, channel: Channel) -> None:
        """Fill the channel's detail fields; policies are oriented by remote peer.

        last_update is always set, to the epoch when no policy update was seen
        yet, so the channel counts as enriched.
        """
        channel.last_update = datetime.fromtimestamp(self.last_update, tz=timezone.utc)
        if self.node1_pub == channel.remote_pubkey:
            remote, local = self.node1_policy, self.node2_policy
        else:
            remote, local = self.node2_policy, self.node1_policy
        channel.local_policy = local.to_domain() if local else None
        channel.remote_policy = remote.to_domain() if remote else None


class _NodeAddress(_LndModel):
    network: str = ""
    addr: str = ""


class _LightningNode(_LndModel):
    pub_key: str
    alias: str = ""
    color: str = ""
    last_update: int = 0
    addresses: list[_NodeAddress] = Field(default_factory=list)


class NodeInfoResponse(_LndModel):
    node: _LightningNode
    num_channels: int = 0
    total_capacity: int = 0

    def to_domain(self) -> Node:
        return Node(
            pub_key=PubKey(self.node.pub_key),
            alias=self.node.alias,
            color=self.node.color,
            num_channels=self.num_channels,
            total_capacity=self.total_capacity,
            last_update=_from_unix(self.node.last_update),
            addresses=tuple(a.addr for a in self.node.addresses),
        )


# ─── HTLC events ─────────────────────────────────────────────────

class _HtlcInfo(_LndModel):
    incoming_timelock: int = 0
    outgoing_timelock: int = 0
    incoming_amt_msat: int = 0
    outgoing_amt_msat: int = 0


class _ForwardEvent(_LndModel):
    info: _HtlcInfo | None = None


class _LinkFailEvent(_LndModel):
    info: _HtlcInfo | None = None
    wire_failure: str = ""
    failure_detail: str = ""
    failure_string: str = ""


_DIRECTIONS = {
    "SEND": RoutingDirection.SEND,
    "RECEIVE": RoutingDirection.RECEIVE,
    "FORWARD": RoutingDirection.FORWARD,
}


class HtlcEventPayload(_LndModel):
    """One `result` object from /v2/router/htlcevents."""
    incoming_channel_id: int = 0
    outgoing_channel_id: int = 0
    incoming_htlc_id: int = 0
    outgoing_htlc_id: int = 0
    timestamp_ns: int = 0
    event_type: str = "UNKNOWN"
    forward_event: _ForwardEvent | None = None
    forward_fail_event: dict | None = None
    settle_event: dict | None = None
    link_fail_event: _LinkFailEvent | None = None

    def to_domain(self) -> RoutingEvent | None:
        """RoutingEvent for HTLC progress updates; None for subscription notices."""
        info: _HtlcInfo | None = None
        failure_code = failure_detail = ""
        if self.forward_event is not None:
            status = RoutingStatus.ACTIVE
            info = self.forward_event.info
        elif self.forward_fail_event is not None:
            status = RoutingStatus.FAILED
        elif self.settle_event is not None:
            status = RoutingStatus.SETTLED
        elif self.link_fail_event is not None:
            status = RoutingStatus.LINK_FAILED
            info = self.link_fail_event.info
            failure_code = self.link_fail_event.wire_failure
            failure_detail = (
                self.link_fail_event.failure_string
                or self.link_fail_event.failure_detail
            )
        else:
            return None

        event = RoutingEvent(
            incoming_channel_id=self.incoming_channel_id,
            outgoing_channel_id=self.outgoing_channel_id,
            incoming_htlc_id=self.incoming_htlc_id,
            outgoing_htlc_id=self.outgoing_htlc_id,
            direction=_DIRECTIONS.get(self.event_type, RoutingDirection.FORWARD),
            status=status,
            last_update=datetime.fromtimestamp(self.timestamp_ns / 1e9, tz=timezone.utc),
            failure_code=failure_code,
            failure_detail=failure_detail,
        )
        if info is not None:
            event.incoming_timelock = info.incoming_timelock
            event.outgoing_timelock = info.outgoing_timelock
            # Sends have no incoming leg, receives no outgoing leg
            event.amount_msat = info.outgoing_amt_msat or info.incoming_amt_msat
            if info.incoming_amt_msat and info.outgoing_amt_msat:
                event.fee_msat = info.incoming_amt_msat - info.outgoing_amt_msat
        return event
