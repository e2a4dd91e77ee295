"""Channel Reconciler — merges a fetched channel list into the Channel Collection.

Invariants:
    - Channels processed strictly in fetch order, one at a time (no fan-out)
    - Enrichment only when the stored channel is stale: its updates_count is
      below the fetched one, or it has never been enriched (last_update None)
    - A first sighting is always stale, so it is always enriched
    - get_channel_info failures propagate and stop the pass; channels already
      processed stay updated
    - get_node failures are logged at DEBUG and swallowed; the channel is still upserted

Design Decisions:
    - Enrichment mutates the fetched Channel, which the reconciler owns until
      upsert; the stored copy is replaced in one assignment afterwards
    - Peer lookup only runs inside the enrichment branch: an unchanged channel
      keeps the node carried over from the stored copy
    - An enriched channel is upserted with exactly the detail it was given, so
      a failed peer lookup leaves it without a node
"""

import logging
from dataclasses import dataclass

from lnpulse.core.channel_collection import ChannelCollection
from lnpulse.core.errors import LnPulseError
from lnpulse.core.node_models import Channel
from lnpulse.core.node_protocols import NodeClient

logger = logging.getLogger(__name__)


@dataclass
class ReconcileResult:
    """What one reconcile pass did — for logs and tests."""
    processed: int = 0
    added: int = 0
    enriched: int = 0
    peer_lookups_failed: int = 0


def is_stale(stored: Channel, fetched: Channel) -> bool:
    """Whether `fetched` needs detail enrichment given what is stored."""
    return (
        stored.updates_count < fetched.updates_count
        or not stored.has_detail
    )


class ChannelReconciler:
    """Applies fetched channel lists to a ChannelCollection it does not own."""

    def __init__(self, client: NodeClient, channels: ChannelCollection):
        self.client = client
        self.channels = channels

    async def reconcile(self, fetched: list[Channel]) -> ReconcileResult:
        result = ReconcileResult()
        for channel in fetched:
            await self._reconcile_one(channel, result)
            result.processed += 1
        return result

    async def _reconcile_one(self, channel: Channel, result: ReconcileResult) -> None:
        if not self.channels.contains(channel):
            self.channels.add(channel)
            result.added += 1

        stored = self.channels.get(channel.channel_point)
        enriched = stored is not None and is_stale(stored, channel)
        if enriched:
            await self.client.get_channel_info(channel)
            result.enriched += 1
            if channel.node is None and not await self._resolve_peer(channel):
                result.peer_lookups_failed += 1

        self.channels.upsert(channel, carry_detail=not enriched)

    async def _resolve_peer(self, channel: Channel) -> bool:
        """Best-effort peer metadata lookup. Never raises LnPulseError."""
        try:
            channel.node = await self.client.get_node(channel.remote_pubkey)
        except LnPulseError as e:
            logger.debug(
                "refresh_channels: cannot find node %s: %s",
                channel.remote_pubkey, e.message,
                extra={
                    "channel_point": channel.channel_point,
                    "pub_key": channel.remote_pubkey,
                    "error_code": e.code,
                },
            )
            channel.node = None
            return False
        return True
