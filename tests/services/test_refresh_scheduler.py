"""RefreshScheduler tests — periodic refresh and routing subscription driver."""

import asyncio

import pytest

from lnpulse.config import Settings
from lnpulse.core.domain_types import RoutingStatus
from lnpulse.core.errors import NodeRPCError
from lnpulse.services.refresh_scheduler import RefreshScheduler
from lnpulse.services.view_models import ViewModelStore

from tests.builders import make_channel, make_event
from tests.services.fake_node_client import FakeNodeClient, rpc_error


@pytest.fixture
def client():
    return FakeNodeClient()


@pytest.fixture
def store(client):
    return ViewModelStore(client)


def _scheduler(store, client, **kwargs):
    kwargs.setdefault("interval_seconds", 0.01)
    kwargs.setdefault("resubscribe_seconds", 0.01)
    return RefreshScheduler(store, client, **kwargs)


async def _run_until(scheduler, condition, limit=2.0):
    task = asyncio.create_task(scheduler.run())
    try:
        async with asyncio.timeout(limit):
            while not condition():
                await asyncio.sleep(0.005)
    finally:
        scheduler.stop()
        await task


async def test_run_once_refreshes_everything(store, client):
    client.channels = [make_channel("txid:0")]

    outcome = await _scheduler(store, client).run_once()

    assert outcome == {
        "refresh_info": None,
        "refresh_wallet_balance": None,
        "refresh_channels_balance": None,
        "refresh_channels": None,
    }
    assert store.info is client.info
    assert "txid:0" in store.channels


async def test_run_once_continues_after_failure(store, client):
    client.failures["get_wallet_balance"] = rpc_error()
    client.channels = [make_channel("txid:0")]

    outcome = await _scheduler(store, client).run_once()

    assert isinstance(outcome["refresh_wallet_balance"], NodeRPCError)
    assert outcome["refresh_channels"] is None
    assert store.wallet_balance is None
    assert store.channels_balance is not None
    assert "txid:0" in store.channels


async def test_run_records_routing_events(store, client):
    client.routing_streams = [[
        make_event(htlc_id=1),
        make_event(htlc_id=2),
        make_event(htlc_id=1, status=RoutingStatus.SETTLED),
    ]]
    scheduler = _scheduler(store, client)

    await _run_until(
        scheduler,
        lambda: store.routing_log.events
        and store.routing_log.events[0].status == RoutingStatus.SETTLED,
    )

    assert [e.incoming_htlc_id for e in store.routing_log.events] == [1, 2]


async def test_routing_failure_resubscribes(store, client):
    client.routing_streams = [
        [make_event(htlc_id=1), rpc_error("stream_error")],
        [make_event(htlc_id=2)],
    ]
    scheduler = _scheduler(store, client)

    await _run_until(scheduler, lambda: len(store.routing_log) == 2)

    assert client.count("subscribe_routing_events") >= 2


async def test_poll_loop_repeats(store, client):
    scheduler = _scheduler(store, client)

    await _run_until(scheduler, lambda: client.count("get_info") >= 3)

    assert store.info is client.info


async def test_unexpected_error_stops_run(store, client):
    client.failures["get_info"] = RuntimeError("bug")
    scheduler = _scheduler(store, client)

    with pytest.raises(RuntimeError, match="bug"):
        await asyncio.wait_for(scheduler.run(), 2.0)


def test_from_settings_uses_configured_intervals(store, client):
    settings = Settings(
        refresh_interval_seconds=7, routing_resubscribe_seconds=11,
        request_timeout_seconds=4,
    )
    scheduler = RefreshScheduler.from_settings(store, client, settings)
    assert scheduler.interval_seconds == 7
    assert scheduler.resubscribe_seconds == 11
    assert scheduler.timeout_seconds == 4


async def test_stop_before_run_is_not_lost(store, client):
    scheduler = _scheduler(store, client, interval_seconds=60)
    scheduler.stop()

    await asyncio.wait_for(scheduler.run(), 1.0)
