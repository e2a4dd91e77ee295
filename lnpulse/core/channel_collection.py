"""Channel Collection — insertion-ordered, key-unique map of known channels.

Invariants:
    - Channel points are unique; entries are never deleted
    - Position of a channel is fixed at first sighting (upsert keeps it)
    - Every write is one dict assignment of a fully built Channel, so a reader
      iterating between awaits never sees a half-merged channel
    - Detail fields missing on the incoming channel are carried over from the
      stored one; an enriched channel does not turn stale on the next plain fetch

Design Decisions:
    - dict over list + index: Python dicts keep insertion order and replacing a
      key's value does not move it
    - add() stores a copy: the fetched object stays owned by the reconciler
      until upsert hands it over
"""

import dataclasses
from collections.abc import Iterator

from lnpulse.core.domain_types import ChannelPoint
from lnpulse.core.node_models import Channel

# Filled by enrichment, absent from a plain channel listing
_DETAIL_FIELDS: tuple[str, ...] = (
    "last_update", "local_policy", "remote_policy", "node",
)


class ChannelCollection:
    """Known channels in first-seen order. Mutated only by the reconciler."""

    def __init__(self) -> None:
        self._index: dict[ChannelPoint, Channel] = {}

    def __len__(self) -> int:
        return len(self._index)

    def __iter__(self) -> Iterator[Channel]:
        return iter(list(self._index.values()))

    def __contains__(self, channel_point: object) -> bool:
        return channel_point in self._index

    def contains(self, channel: Channel) -> bool:
        return channel.channel_point in self._index

    def get(self, channel_point: ChannelPoint) -> Channel | None:
        return self._index.get(channel_point)

    def to_list(self) -> list[Channel]:
        """Point-in-time copy of the channels, in first-seen order."""
        return list(self._index.values())

    def add(self, channel: Channel) -> None:
        """Record a first sighting with exactly the fetched fields."""
        if channel.channel_point in self._index:
            return
        self._index[channel.channel_point] = dataclasses.replace(channel)

    def upsert(self, channel: Channel, carry_detail: bool = True) -> Channel:
        """Store `channel` under its channel point. Returns the stored value.

        With carry_detail=False the incoming detail fields are taken as they
        are, absent ones included (used right after enrichment).
        """
        stored = self._index.get(channel.channel_point)
        if stored is not None and carry_detail:
            carried = {
                name: getattr(stored, name)
                for name in _DETAIL_FIELDS
                if getattr(channel, name) is None
            }
            if carried:
                channel = dataclasses.replace(channel, **carried)
        self._index[channel.channel_point] = channel
        return channel
