"""Refresh Scheduler — drives the View-Model Store from a timer and the HTLC stream.

Invariants:
    - run_once() attempts every snapshot refresh and the channel refresh; one
      failing does not skip the others
    - Only LnPulseError is absorbed (logged with its structured fields);
      anything else is a bug and stops run()
    - Routing events are recorded in arrival order
    - A closed or failed routing subscription is reopened after a fixed delay
    - stop() makes run() return after cancelling and awaiting both loops; a
      stop() issued before run() starts is kept

Design Decisions:
    - Fixed interval, no backoff: a hung call is bounded by the per-refresh
      timeout, the next tick is the retry
    - Poll loop and routing loop are independent tasks sharing the store;
      they touch disjoint sub-models
"""

import asyncio
import logging

from lnpulse.config import Settings
from lnpulse.core.errors import LnPulseError
from lnpulse.core.node_protocols import NodeClient
from lnpulse.services.view_models import ViewModelStore

logger = logging.getLogger(__name__)


class RefreshScheduler:
    """Periodic refresh + routing subscription for one ViewModelStore."""

    def __init__(
        self,
        store: ViewModelStore,
        client: NodeClient,
        interval_seconds: float = 3.0,
        resubscribe_seconds: float = 5.0,
        timeout_seconds: float | None = None,
    ):
        self.store = store
        self.client = client
        self.interval_seconds = interval_seconds
        self.resubscribe_seconds = resubscribe_seconds
        self.timeout_seconds = timeout_seconds
        self._stopping = asyncio.Event()

    @classmethod
    def from_settings(
        cls, store: ViewModelStore, client: NodeClient, settings: Settings,
    ) -> "RefreshScheduler":
        return cls(
            store,
            client,
            interval_seconds=settings.refresh_interval_seconds,
            resubscribe_seconds=settings.routing_resubscribe_seconds,
            timeout_seconds=settings.request_timeout_seconds,
        )

    async def run_once(self) -> dict[str, LnPulseError | None]:
        """Refresh every polled sub-model once. Returns operation -> error."""
        refreshes = (
            ("refresh_info", self.store.refresh_info),
            ("refresh_wallet_balance", self.store.refresh_wallet_balance),
            ("refresh_channels_balance", self.store.refresh_channels_balance),
            ("refresh_channels", self.store.refresh_channels),
        )
        outcome: dict[str, LnPulseError | None] = {}
        for name, refresh in refreshes:
            try:
                await refresh(timeout=self.timeout_seconds)
                outcome[name] = None
            except LnPulseError as e:
                logger.warning(
                    "%s failed: %s", name, e.message,
                    extra={**e.to_log_extra(), "operation": name},
                )
                outcome[name] = e
        return outcome

    async def run(self) -> None:
        """Run both loops until stop() or until one of them crashes."""
        tasks = {
            asyncio.create_task(self._poll_loop(), name="lnpulse-poll"),
            asyncio.create_task(self._routing_loop(), name="lnpulse-routing"),
        }
        stop_waiter = asyncio.create_task(self._stopping.wait())
        try:
            done, _ = await asyncio.wait(
                tasks | {stop_waiter}, return_when=asyncio.FIRST_COMPLETED,
            )
        finally:
            for task in (*tasks, stop_waiter):
                task.cancel()
            await asyncio.gather(*tasks, stop_waiter, return_exceptions=True)

        for task in done:
            if task is not stop_waiter and not task.cancelled() and task.exception():
                raise task.exception()  # type: ignore[misc]

    def stop(self) -> None:
        self._stopping.set()

    async def _poll_loop(self) -> None:
        while True:
            await self.run_once()
            await asyncio.sleep(self.interval_seconds)

    async def _routing_loop(self) -> None:
        while True:
            try:
                async for event in self.client.subscribe_routing_events():
                    self.store.record_routing_event(event)
                logger.info("Routing subscription closed by node")
            except LnPulseError as e:
                logger.warning(
                    "Routing subscription failed: %s", e.message,
                    extra=e.to_log_extra(),
                )
            await asyncio.sleep(self.resubscribe_seconds)
