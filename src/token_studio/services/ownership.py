"""On-chain ownership resolution for deployed tokens.

Ownership is never cached: every gated mutation asks the chain again. EVM
tokens answer through the Ownable ``owner()`` accessor (``eth_call``), Solana
mints through the parsed account's ``mintAuthority``.

`is_token_owner` is the only entry point handlers should use. It fails
closed: an RPC outage, a timeout, a missing endpoint or an unparseable reply
all count as "not the owner".
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Protocol

import httpx

from token_studio.core.networks import ChainFamily, Network, get_network
from token_studio.core.settings import settings
from token_studio.models import Token
from token_studio.services.errors import OwnershipLookupError
from token_studio.utils.address import canonical_address, is_evm_address

logger = logging.getLogger(__name__)

# keccak256("owner()")[:4]
OWNER_SELECTOR = "0x8da5cb5b"
ZERO_ADDRESS = "0x" + "0" * 40


class OwnerResolver(Protocol):
    """Capability returning the current on-chain owner of a token."""

    async def resolve_owner(self, token: Token) -> str | None:
        """Return the owner's address, or None when the token has no owner."""
        ...


class RpcOwnerResolver:
    """Resolve owners through each network's JSON-RPC endpoint."""

    def __init__(
        self,
        *,
        timeout_seconds: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.timeout_seconds = (
            timeout_seconds if timeout_seconds is not None else settings.rpc_http_timeout_seconds
        )
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._client_lock = asyncio.Lock()

    async def _ensure_client(self) -> httpx.AsyncClient:
        async with self._client_lock:
            if self._client is None:
                self._client = httpx.AsyncClient(
                    timeout=httpx.Timeout(self.timeout_seconds),
                    transport=self._transport,
                )
        return self._client

    async def _rpc(self, network: Network, method: str, params: list[Any]) -> Any:
        client = await self._ensure_client()
        payload = {"jsonrpc": "2.0", "id": 1, "method": method, "params": params}
        try:
            response = await client.post(network.rpc_url, json=payload)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise OwnershipLookupError(f"RPC request to {network.id} failed: {exc}") from exc
        except (httpx.InvalidURL, ValueError) as exc:
            raise OwnershipLookupError(f"Invalid RPC endpoint for {network.id}: {exc}") from exc

        try:
            data = response.json()
        except ValueError as exc:
            raise OwnershipLookupError("Invalid JSON in RPC response") from exc

        if not isinstance(data, dict):
            raise OwnershipLookupError("Malformed RPC response")
        if data.get("error"):
            error = data["error"]
            message = error.get("message", "Unknown RPC error") if isinstance(error, dict) else error
            raise OwnershipLookupError(f"RPC error from {network.id}: {message}")
        if "result" not in data:
            raise OwnershipLookupError("Malformed RPC response; missing result")
        return data["result"]

    async def resolve_owner(self, token: Token) -> str | None:
        network = get_network(token.network)
        if network is None:
            raise OwnershipLookupError(f"No RPC endpoint configured for network {token.network!r}")

        if network.family is ChainFamily.EVM:
            return await self._resolve_evm_owner(network, token.address)
        return await self._resolve_solana_authority(network, token.address)

    async def _resolve_evm_owner(self, network: Network, address: str) -> str | None:
        if not is_evm_address(address):
            raise OwnershipLookupError(f"Not an EVM address: {address!r}")

        result = await self._rpc(
            network,
            "eth_call",
            [{"to": address, "data": OWNER_SELECTOR}, "latest"],
        )
        if not isinstance(result, str) or not result.startswith("0x"):
            raise OwnershipLookupError("owner() returned a non-hex value")

        word = result[2:]
        if len(word) < 64:
            # Contracts without owner() answer with empty data.
            raise OwnershipLookupError("owner() returned no data")
        try:
            int(word[:64], 16)
        except ValueError as exc:
            raise OwnershipLookupError("owner() returned a non-hex value") from exc

        owner = "0x" + word[24:64].lower()
        if owner == ZERO_ADDRESS:
            return None
        return owner

    async def _resolve_solana_authority(self, network: Network, mint: str) -> str | None:
        result = await self._rpc(
            network,
            "getAccountInfo",
            [mint, {"encoding": "jsonParsed", "commitment": "confirmed"}],
        )
        try:
            value = result["value"]
            if value is None:
                raise OwnershipLookupError(f"Mint {mint} not found on {network.id}")
            parsed = value["data"]["parsed"]
            if parsed.get("type") != "mint":
                raise OwnershipLookupError(f"Account {mint} is not a token mint")
            authority = parsed["info"].get("mintAuthority")
        except (KeyError, TypeError, AttributeError) as exc:
            raise OwnershipLookupError("Malformed getAccountInfo response") from exc

        if authority is None:
            return None
        if not isinstance(authority, str):
            raise OwnershipLookupError("mintAuthority is not a string")
        return authority

    async def close(self) -> None:
        """Clean up underlying HTTP client resources."""
        async with self._client_lock:
            if self._client is not None:
                await self._client.aclose()
                self._client = None


async def is_token_owner(resolver: OwnerResolver, token: Token, caller_address: str) -> bool:
    """Return True only when the chain confirms ``caller_address`` owns ``token``."""
    try:
        owner = await resolver.resolve_owner(token)
    except (
        OwnershipLookupError,
        httpx.HTTPError,
        httpx.InvalidURL,
        asyncio.TimeoutError,
    ) as exc:
        logger.warning(
            "Ownership lookup for %s on %s failed closed: %s",
            token.address,
            token.network,
            exc,
        )
        return False

    if owner is None:
        return False
    return canonical_address(owner) == canonical_address(caller_address)


class _OwnerResolverSingleton:
    """Singleton wrapper for RpcOwnerResolver."""

    _instance: RpcOwnerResolver | None = None

    @classmethod
    def get_instance(cls) -> RpcOwnerResolver:
        if cls._instance is None:
            cls._instance = RpcOwnerResolver()
        return cls._instance


def get_owner_resolver() -> RpcOwnerResolver:
    """Return the process-wide RPC owner resolver."""
    return _OwnerResolverSingleton.get_instance()
