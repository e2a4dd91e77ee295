"""View-Model Store — single authoritative copy of every dashboard sub-model.

Invariants:
    - Each refresh_* touches exactly one sub-model and is independently failable
    - Snapshot refreshes are all-or-nothing: on error the stored value is the
      same object as before the call
    - refresh_channels stops at the first failing fetch; earlier channels stay updated
    - record_routing_event never raises; malformed input is logged at ERROR and dropped
    - No retries; `timeout` bounds the whole operation including enrichment

Design Decisions:
    - Explicit object owned by the driver and handed to the renderer
      (no module-level singleton)
    - Sub-models exposed as attributes for read access; only this class and the
      reconciler it owns assign to them
    - Timeouts via asyncio.wait_for, mapped to NodeTimeoutError; cancellation is
      plain task cancellation and propagates untouched
"""

import asyncio
import logging
import time
from collections.abc import Awaitable
from typing import TypeVar

from lnpulse.core.channel_collection import ChannelCollection
from lnpulse.core.domain_types import MAX_ROUTING_EVENTS
from lnpulse.core.errors import ErrorContext, InvalidRoutingEventError, NodeTimeoutError
from lnpulse.core.node_models import ChannelsBalance, NodeInfo, WalletBalance
from lnpulse.core.node_protocols import NodeClient
from lnpulse.core.routing_log import RoutingLog
from lnpulse.schemas.routing import parse_routing_event
from lnpulse.services.channel_reconciler import ChannelReconciler, ReconcileResult

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def _bounded(operation: str, aw: Awaitable[T], timeout: float | None) -> T:
    """Await `aw`, mapping a timeout to NodeTimeoutError."""
    if timeout is None:
        return await aw
    try:
        return await asyncio.wait_for(aw, timeout)
    except asyncio.TimeoutError:
        raise NodeTimeoutError(
            operation, timeout, context=ErrorContext(operation=operation),
        ) from None


class ViewModelStore:
    """Owns node info, balances, channels and the routing log."""

    def __init__(
        self, client: NodeClient, routing_log_capacity: int = MAX_ROUTING_EVENTS,
    ):
        self.client = client
        self.info: NodeInfo | None = None
        self.wallet_balance: WalletBalance | None = None
        self.channels_balance: ChannelsBalance | None = None
        self.channels = ChannelCollection()
        self.routing_log = RoutingLog(routing_log_capacity)
        self._reconciler = ChannelReconciler(client, self.channels)

    # --- Snapshot holders ---------------------------------------------------------

    async def refresh_info(self, timeout: float | None = None) -> None:
        info = await _bounded("refresh_info", self.client.get_info(), timeout)
        self.info = info

    async def refresh_wallet_balance(self, timeout: float | None = None) -> None:
        balance = await _bounded(
            "refresh_wallet_balance", self.client.get_wallet_balance(), timeout,
        )
        self.wallet_balance = balance

    async def refresh_channels_balance(self, timeout: float | None = None) -> None:
        balance = await _bounded(
            "refresh_channels_balance", self.client.get_channels_balance(), timeout,
        )
        self.channels_balance = balance

    # --- Channels -----------------------------------------------------------------

    async def refresh_channels(self, timeout: float | None = None) -> ReconcileResult:
        """Fetch open + pending channels and reconcile them into `channels`."""
        return await _bounded("refresh_channels", self._refresh_channels(), timeout)

    async def _refresh_channels(self) -> ReconcileResult:
        started = time.monotonic()
        fetched = await self.client.list_channels(include_pending=True)
        result = await self._reconciler.reconcile(fetched)
        logger.debug(
            "refresh_channels: %d channel(s) reconciled", result.processed,
            extra={
                "operation": "refresh_channels",
                "added": result.added,
                "enriched": result.enriched,
                "peer_lookups_failed": result.peer_lookups_failed,
                "duration_ms": int((time.monotonic() - started) * 1000),
            },
        )
        return result

    # --- Routing ------------------------------------------------------------------

    def record_routing_event(self, value: object) -> None:
        """Merge one routing event into the log; drop anything that is not one."""
        try:
            event = parse_routing_event(value)
        except InvalidRoutingEventError as e:
            logger.error(
                "refresh_routing: invalid event data: %s", e.message,
                extra={"operation": "refresh_routing", "error_code": e.code},
            )
            return
        self.routing_log.record(event)

    async def refresh_routing(self, value: object) -> None:
        """Awaitable form of record_routing_event for uniform drivers."""
        self.record_routing_event(value)
