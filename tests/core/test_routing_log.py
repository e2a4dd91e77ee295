"""RoutingLog tests — bounded, deduplicated routing history.

Tests cover:
    - Append on first sighting
    - In-place merge for a repeated identity (position, object, length)
    - Eviction of the oldest entry at capacity
    - Length bound over long mixed sequences
"""

import random

import pytest

from lnpulse.core.domain_types import MAX_ROUTING_EVENTS, RoutingStatus
from lnpulse.core.routing_log import RoutingLog

from tests.builders import make_event


def test_default_capacity_is_512():
    assert RoutingLog().capacity == MAX_ROUTING_EVENTS == 512


def test_first_event_is_appended():
    log = RoutingLog()
    e1 = make_event(htlc_id=1)
    assert log.record(e1) is True
    assert log.events == [e1]


def test_distinct_events_keep_arrival_order():
    log = RoutingLog()
    events = [make_event(htlc_id=i) for i in range(5)]
    for e in events:
        log.record(e)
    assert log.events == events


def test_same_identity_updates_in_place():
    log = RoutingLog()
    log.record(make_event(htlc_id=3))
    first = make_event(htlc_id=7, status=RoutingStatus.ACTIVE)
    log.record(first)
    log.record(make_event(htlc_id=9))

    settled = make_event(htlc_id=7, status=RoutingStatus.SETTLED, seconds=4)
    assert log.record(settled) is False

    assert len(log) == 3
    assert log.events[1] is first
    assert first.status == RoutingStatus.SETTLED
    assert first.last_update == settled.last_update


def test_same_htlc_id_on_other_channel_is_new_event():
    log = RoutingLog()
    log.record(make_event(htlc_id=1, in_chan=111))
    log.record(make_event(htlc_id=1, in_chan=333))
    assert len(log) == 2


def test_new_event_at_capacity_evicts_oldest():
    log = RoutingLog()
    for i in range(512):
        log.record(make_event(htlc_id=i))
    oldest, second = log.events[0], log.events[1]

    e513 = make_event(htlc_id=10_000)
    log.record(e513)

    assert len(log) == 512
    assert oldest not in log.events
    assert log.events[0] is second
    assert log.events[-1] is e513


def test_update_at_capacity_does_not_evict():
    log = RoutingLog(capacity=3)
    for i in range(3):
        log.record(make_event(htlc_id=i))
    log.record(make_event(htlc_id=0, status=RoutingStatus.FAILED))
    assert [e.incoming_htlc_id for e in log.events] == [0, 1, 2]
    assert log.events[0].status == RoutingStatus.FAILED


def test_evicted_identity_returns_as_newest():
    log = RoutingLog(capacity=2)
    log.record(make_event(htlc_id=1))
    log.record(make_event(htlc_id=2))
    log.record(make_event(htlc_id=3))
    log.record(make_event(htlc_id=1, status=RoutingStatus.SETTLED))
    assert [e.incoming_htlc_id for e in log.events] == [3, 1]


def test_length_never_exceeds_capacity():
    rng = random.Random(20240301)
    log = RoutingLog()
    for _ in range(3000):
        log.record(make_event(htlc_id=rng.randrange(900)))
        assert len(log) <= 512


def test_same_inputs_give_same_log():
    def build():
        rng = random.Random(7)
        log = RoutingLog(capacity=16)
        for _ in range(200):
            log.record(make_event(
                htlc_id=rng.randrange(40),
                status=rng.choice(list(RoutingStatus)),
            ))
        return [(e.identity_key, e.status) for e in log.events]

    assert build() == build()


def test_find_returns_stored_entry():
    log = RoutingLog()
    stored = make_event(htlc_id=4)
    log.record(stored)
    assert log.find(make_event(htlc_id=4, status=RoutingStatus.SETTLED)) is stored
    assert log.find(make_event(htlc_id=5)) is None


def test_events_is_a_copy():
    log = RoutingLog()
    log.record(make_event(htlc_id=1))
    snapshot = log.events
    log.record(make_event(htlc_id=2))
    assert len(snapshot) == 1


@pytest.mark.parametrize("capacity", [0, -1])
def test_capacity_must_be_positive(capacity):
    with pytest.raises(ValueError):
        RoutingLog(capacity=capacity)
