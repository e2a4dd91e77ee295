"""LND REST Client — implements NodeClient over lnd's REST gateway with httpx.

Invariants:
    - Every failure is mapped to an LnPulseError subclass (core/errors.py):
      timeouts -> NodeTimeoutError, 404 -> NodeNotFoundError,
      other status / transport / unreadable body -> NodeRPCError
    - No retries: one request per call, the driver decides what happens next
    - get_channel_info is a no-op for pending channels (no short channel id yet)
    - CancelledError (BaseException) passes through uncaught

Design Decisions:
    - Wrapper over raw httpx.AsyncClient: isolates wire format from the core
    - Responses validated by schemas/lnd.py before anything reaches the core
    - Macaroon read once at construction; hex-encoded into the gateway header
"""

import json
import logging
from collections.abc import AsyncIterator
from pathlib import Path
from typing import TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from lnpulse.config import Settings
from lnpulse.core.domain_types import PubKey
from lnpulse.core.errors import (
    ConfigurationError,
    ErrorContext,
    NodeNotFoundError,
    NodeRPCError,
    NodeTimeoutError,
)
from lnpulse.core.node_models import (
    Channel,
    ChannelsBalance,
    Node,
    NodeInfo,
    WalletBalance,
)
from lnpulse.core.routing_event import RoutingEvent
from lnpulse.schemas.lnd import (
    ChannelBalanceResponse,
    ChannelEdgeResponse,
    GetInfoResponse,
    HtlcEventPayload,
    ListChannelsResponse,
    NodeInfoResponse,
    PendingChannelsResponse,
    WalletBalanceResponse,
)

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

_MACAROON_HEADER = "Grpc-Metadata-macaroon"


def read_macaroon(path: str) -> str:
    """Hex-encode the macaroon file at `path`."""
    try:
        return Path(path).expanduser().read_bytes().hex()
    except OSError as e:
        raise ConfigurationError(
            f"cannot read macaroon: {e}", "macaroon_path",
        ) from e


class LndRestClient:
    """Async lnd REST client returning core dataclasses."""

    def __init__(
        self,
        base_url: str,
        macaroon_hex: str | None = None,
        tls_cert_path: str | None = None,
        timeout_seconds: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        headers = {_MACAROON_HEADER: macaroon_hex} if macaroon_hex else {}
        verify: str | bool = (
            str(Path(tls_cert_path).expanduser()) if tls_cert_path else False
        )
        self.timeout_seconds = timeout_seconds
        self.http = httpx.AsyncClient(
            base_url=base_url,
            headers=headers,
            verify=verify,
            timeout=timeout_seconds,
            transport=transport,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "LndRestClient":
        macaroon = read_macaroon(settings.macaroon_path) if settings.macaroon_path else None
        return cls(
            settings.lnd_rest_url,
            macaroon_hex=macaroon,
            tls_cert_path=settings.tls_cert_path,
            timeout_seconds=settings.request_timeout_seconds,
        )

    async def aclose(self) -> None:
        await self.http.aclose()

    async def __aenter__(self) -> "LndRestClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    # --- NodeClient ---------------------------------------------------------------

    async def get_info(self) -> NodeInfo:
        resp = await self._get("/v1/getinfo", GetInfoResponse, "get_info")
        return resp.to_domain()

    async def get_wallet_balance(self) -> WalletBalance:
        resp = await self._get(
            "/v1/balance/blockchain", WalletBalanceResponse, "get_wallet_balance",
        )
        return resp.to_domain()

    async def get_channels_balance(self) -> ChannelsBalance:
        resp = await self._get(
            "/v1/balance/channels", ChannelBalanceResponse, "get_channels_balance",
        )
        return resp.to_domain()

    async def list_channels(self, *, include_pending: bool = False) -> list[Channel]:
        resp = await self._get("/v1/channels", ListChannelsResponse, "list_channels")
        channels = resp.to_domain()
        if include_pending:
            pending = await self._get(
                "/v1/channels/pending", PendingChannelsResponse, "list_channels",
            )
            channels.extend(pending.to_domain())
        return channels

    async def get_channel_info(self, channel: Channel) -> None:
        if channel.id == 0:
            return
        ctx = ErrorContext(
            operation="get_channel_info", channel_point=channel.channel_point,
        )
        resp = await self._get(
            f"/v1/graph/edge/{channel.id}", ChannelEdgeResponse,
            "get_channel_info", ctx, resource=("channel edge", str(channel.id)),
        )
        resp.apply_to(channel)

    async def get_node(self, pub_key: PubKey) -> Node:
        ctx = ErrorContext(operation="get_node", pub_key=pub_key)
        resp = await self._get(
            f"/v1/graph/node/{pub_key}", NodeInfoResponse,
            "get_node", ctx, resource=("node", pub_key),
        )
        return resp.to_domain()

    async def subscribe_routing_events(self) -> AsyncIterator[RoutingEvent]:
        """Stream HTLC events; ends when lnd closes the stream."""
        ctx = ErrorContext(operation="subscribe_routing_events")
        try:
            async with self.http.stream(
                "GET", "/v2/router/htlcevents", timeout=httpx.Timeout(
                    self.timeout_seconds, read=None,
                ),
            ) as response:
                if not response.is_success:
                    await response.aread()
                self._check_status(response, ctx)
                async for line in response.aiter_lines():
                    event = self._parse_stream_line(line, ctx)
                    if event is not None:
                        yield event
        except httpx.TimeoutException:
            raise NodeTimeoutError(
                "subscribe_routing_events", self.timeout_seconds, ctx,
            ) from None
        except httpx.HTTPError as e:
            raise NodeRPCError(str(e), "transport_error", ctx) from e

    # --- Helpers ------------------------------------------------------------------

    async def _get(
        self,
        path: str,
        schema: type[M],
        operation: str,
        context: ErrorContext | None = None,
        resource: tuple[str, str] | None = None,
    ) -> M:
        """GET `path` and validate the body against `schema`."""
        ctx = context or ErrorContext(operation=operation)
        try:
            response = await self.http.get(path)
        except httpx.TimeoutException:
            raise NodeTimeoutError(operation, self.timeout_seconds, ctx) from None
        except httpx.HTTPError as e:
            raise NodeRPCError(str(e), "transport_error", ctx) from e

        if response.status_code == 404 and resource is not None:
            ctx.status_code = 404
            raise NodeNotFoundError(*resource, context=ctx)
        self._check_status(response, ctx)

        try:
            return schema.model_validate_json(response.content)
        except ValidationError as e:
            logger.warning(
                "Unreadable %s response: %s", operation, e,
                extra={"operation": operation},
            )
            raise NodeRPCError(
                f"unexpected response shape for {operation}",
                "invalid_response", ctx,
            ) from e

    @staticmethod
    def _check_status(response: httpx.Response, ctx: ErrorContext) -> None:
        if response.is_success:
            return
        ctx.status_code = response.status_code
        raise NodeRPCError(
            _error_message(response), f"http_{response.status_code}", ctx,
        )

    @staticmethod
    def _parse_stream_line(line: str, ctx: ErrorContext) -> RoutingEvent | None:
        """One line of the gateway stream: {"result": ...} or {"error": ...}."""
        if not line.strip():
            return None
        try:
            frame = json.loads(line)
        except json.JSONDecodeError as e:
            raise NodeRPCError("unreadable stream frame", "invalid_response", ctx) from e
        if not isinstance(frame, dict):
            raise NodeRPCError("unreadable stream frame", "invalid_response", ctx)
        if "error" in frame:
            error = frame["error"]
            if isinstance(error, dict):
                message = str(error.get("message") or "stream error")
            else:
                message = str(error or "stream error")
            raise NodeRPCError(message, "stream_error", ctx)
        try:
            payload = HtlcEventPayload.model_validate(frame.get("result") or {})
        except ValidationError as e:
            raise NodeRPCError("unreadable htlc event", "invalid_response", ctx) from e
        return payload.to_domain()


def _error_message(response: httpx.Response) -> str:
    """lnd gateway errors are {"code", "message"}; fall back to the reason phrase."""
    try:
        body = response.json()
    except ValueError:
        return response.reason_phrase or "request failed"
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return response.reason_phrase or "request failed"
