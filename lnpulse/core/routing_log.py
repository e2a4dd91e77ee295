"""Routing Event Log — bounded, deduplicated history of routing events.

Invariants:
    - len(log) <= capacity at all times
    - An event matching an existing entry is folded into it: same position,
      same object, length unchanged
    - A new event at capacity evicts exactly the oldest entry (index 0)
    - Deterministic: the same sequence of record() calls yields the same log

Design Decisions:
    - OrderedDict keyed by identity_key: matching is a dict lookup instead of
      a linear scan, eviction is popitem(last=False), and in-place update keeps
      the entry's position
    - Capacity fixed at construction; MAX_ROUTING_EVENTS by default
"""

from collections import OrderedDict
from collections.abc import Iterator

from lnpulse.core.domain_types import MAX_ROUTING_EVENTS
from lnpulse.core.routing_event import RoutingEvent, RoutingEventKey


class RoutingLog:
    """Append-with-eviction queue of routing events, oldest first."""

    def __init__(self, capacity: int = MAX_ROUTING_EVENTS) -> None:
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {capacity}")
        self.capacity = capacity
        self._entries: OrderedDict[RoutingEventKey, RoutingEvent] = OrderedDict()

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[RoutingEvent]:
        return iter(list(self._entries.values()))

    @property
    def events(self) -> list[RoutingEvent]:
        """Point-in-time copy, oldest first."""
        return list(self._entries.values())

    @property
    def is_full(self) -> bool:
        return len(self._entries) >= self.capacity

    def find(self, event: RoutingEvent) -> RoutingEvent | None:
        """Stored entry that is the same event as `event`, if any."""
        return self._entries.get(event.identity_key)

    def record(self, event: RoutingEvent) -> bool:
        """Merge or append `event`. Returns True when a new entry was appended."""
        existing = self._entries.get(event.identity_key)
        if existing is not None:
            existing.update(event)
            return False
        if self.is_full:
            self._entries.popitem(last=False)
        self._entries[event.identity_key] = event
        return True
