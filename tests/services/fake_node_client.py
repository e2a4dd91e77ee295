"""Fake Node Client — scripted NodeClient for store, reconciler and scheduler tests.

Invariants:
    - Every call is appended to `calls` as (method, argument)
    - list_channels returns fresh deep copies, like a real fetch would
    - Configured exceptions are raised instead of returning
    - Routing streams are consumed one script per subscribe call

Design Decisions:
    - Flat class, no inheritance from the Protocol: structural typing is what
      the services rely on
    - `on_channel_info` hook lets tests inspect the store mid-reconcile
"""

import asyncio
import copy
from datetime import timedelta

from lnpulse.core.errors import NodeNotFoundError, NodeRPCError
from lnpulse.core.node_models import (
    Channel,
    ChannelsBalance,
    Node,
    NodeInfo,
    WalletBalance,
)
from lnpulse.core.domain_types import PubKey

from tests.builders import T0, make_policy


class FakeNodeClient:
    def __init__(self):
        self.calls: list[tuple[str, object]] = []
        self.info = NodeInfo(pub_key=PubKey("02" + "0" * 64), alias="local", block_height=830_000)
        self.wallet_balance = WalletBalance(total=150_000, confirmed=150_000)
        self.channels_balance = ChannelsBalance(balance=600_000)
        self.channels: list[Channel] = []
        self.nodes: dict[str, Node] = {}
        self.failures: dict[str, Exception] = {}
        self.channel_info_failures: dict[str, Exception] = {}
        self.delay: float = 0.0
        self.routing_streams: list[list] = []
        self.on_channel_info = None

    def count(self, method: str) -> int:
        return sum(1 for name, _ in self.calls if name == method)

    async def _enter(self, method: str, arg: object = None) -> None:
        self.calls.append((method, arg))
        if self.delay:
            await asyncio.sleep(self.delay)
        if method in self.failures:
            raise self.failures[method]

    async def get_info(self) -> NodeInfo:
        await self._enter("get_info")
        return self.info

    async def get_wallet_balance(self) -> WalletBalance:
        await self._enter("get_wallet_balance")
        return self.wallet_balance

    async def get_channels_balance(self) -> ChannelsBalance:
        await self._enter("get_channels_balance")
        return self.channels_balance

    async def list_channels(self, *, include_pending: bool = False) -> list[Channel]:
        await self._enter("list_channels", include_pending)
        return copy.deepcopy(self.channels)

    async def get_channel_info(self, channel: Channel) -> None:
        await self._enter("get_channel_info", channel.channel_point)
        if self.on_channel_info is not None:
            self.on_channel_info(channel)
        if channel.channel_point in self.channel_info_failures:
            raise self.channel_info_failures[channel.channel_point]
        channel.last_update = T0 + timedelta(minutes=channel.updates_count)
        channel.local_policy = make_policy(100)
        channel.remote_policy = make_policy(250)

    async def get_node(self, pub_key: PubKey) -> Node:
        await self._enter("get_node", pub_key)
        if pub_key not in self.nodes:
            raise NodeNotFoundError("node", pub_key)
        return self.nodes[pub_key]

    async def subscribe_routing_events(self):
        self.calls.append(("subscribe_routing_events", None))
        if not self.routing_streams:
            # Nothing scripted: behave like an idle stream
            await asyncio.Event().wait()
        for item in self.routing_streams.pop(0):
            if isinstance(item, Exception):
                raise item
            yield item


def rpc_error(kind: str = "http_503") -> NodeRPCError:
    return NodeRPCError("node unavailable", kind)
