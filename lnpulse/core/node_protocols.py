"""Boundary Protocols — contracts between core and the remote node client.

Invariants:
    - Core NEVER imports from infrastructure — dependency arrows point inward only
    - All node IO accessed through the NodeClient Protocol
    - Implementations raise LnPulseError subclasses (core/errors.py), nothing else

Design Decisions:
    - Protocol over ABC: structural subtyping, test fakes need no inheritance
    - Async in Protocol: implementations do IO; cancellation is the caller's task
      cancellation, so no explicit token parameter
    - get_channel_info fills the channel in place: the reconciler owns the
      fetched channel until it is upserted
"""

from collections.abc import AsyncIterator
from typing import Protocol

from lnpulse.core.domain_types import PubKey
from lnpulse.core.node_models import (
    Channel,
    ChannelsBalance,
    Node,
    NodeInfo,
    WalletBalance,
)
from lnpulse.core.routing_event import RoutingEvent


class NodeClient(Protocol):
    """Contract for the remote node — implemented by infrastructure."""
    async def get_info(self) -> NodeInfo: ...
    async def get_wallet_balance(self) -> WalletBalance: ...
    async def get_channels_balance(self) -> ChannelsBalance: ...
    async def list_channels(self, *, include_pending: bool = False) -> list[Channel]: ...
    async def get_channel_info(self, channel: Channel) -> None: ...
    async def get_node(self, pub_key: PubKey) -> Node: ...
    def subscribe_routing_events(self) -> AsyncIterator[RoutingEvent]: ...
