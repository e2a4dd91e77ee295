"""lnpulse — process entry point.

Invariants:
    - One ViewModelStore per process, built here and passed explicitly
    - Logging configured before the first network call
    - SIGINT/SIGTERM stop the scheduler cleanly; the node client is always closed

Design Decisions:
    - Configuration from environment only (pydantic-settings); no CLI flags
    - A renderer attaches by receiving the store from build_store()
"""

import asyncio
import logging
import signal

from lnpulse.config import Settings, get_settings
from lnpulse.core.errors import ConfigurationError
from lnpulse.core.node_protocols import NodeClient
from lnpulse.infrastructure.lnd_client import LndRestClient
from lnpulse.infrastructure.observability import setup_logging
from lnpulse.services.refresh_scheduler import RefreshScheduler
from lnpulse.services.view_models import ViewModelStore

logger = logging.getLogger(__name__)


def build_store(client: NodeClient, settings: Settings) -> ViewModelStore:
    return ViewModelStore(client, routing_log_capacity=settings.routing_log_capacity)


async def run(settings: Settings) -> None:
    """Keep the view models fresh until a termination signal arrives."""
    async with LndRestClient.from_settings(settings) as client:
        store = build_store(client, settings)
        scheduler = RefreshScheduler.from_settings(store, client, settings)

        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, scheduler.stop)
            except NotImplementedError:
                pass  # Windows: KeyboardInterrupt still ends asyncio.run

        logger.info("lnpulse started", extra={"operation": "startup"})
        await scheduler.run()
        logger.info("lnpulse shutting down", extra={"operation": "shutdown"})


def main() -> None:
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    try:
        asyncio.run(run(settings))
    except ConfigurationError as e:
        logger.critical(
            "Configuration error (%s): %s", e.setting, e.message,
            extra=e.to_log_extra(),
        )
        raise SystemExit(2) from e
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
