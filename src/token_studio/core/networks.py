"""Registry of the chains tokens can be deployed on."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum

from token_studio.core.settings import settings


class ChainFamily(str, Enum):
    """Address and RPC dialect shared by a group of networks."""

    EVM = "evm"
    SOLANA = "solana"


@dataclass(frozen=True)
class Network:
    """Static description of a supported network."""

    id: str
    name: str
    family: ChainFamily
    rpc_url: str
    explorer_url: str
    is_testnet: bool = False


_BUILTIN_NETWORKS: tuple[Network, ...] = (
    Network("ethereum", "Ethereum Mainnet", ChainFamily.EVM,
            "https://eth.llamarpc.com", "https://etherscan.io"),
    Network("sepolia", "Sepolia Testnet", ChainFamily.EVM,
            "https://rpc.sepolia.org", "https://sepolia.etherscan.io", True),
    Network("bsc", "BNB Smart Chain", ChainFamily.EVM,
            "https://bsc-dataseed.binance.org", "https://bscscan.com"),
    Network("polygon", "Polygon", ChainFamily.EVM,
            "https://polygon-rpc.com", "https://polygonscan.com"),
    Network("arbitrum", "Arbitrum One", ChainFamily.EVM,
            "https://arb1.arbitrum.io/rpc", "https://arbiscan.io"),
    Network("base", "Base", ChainFamily.EVM,
            "https://mainnet.base.org", "https://basescan.org"),
    Network("solana-mainnet", "Solana Mainnet", ChainFamily.SOLANA,
            "https://api.mainnet-beta.solana.com", "https://explorer.solana.com"),
    Network("solana-devnet", "Solana Devnet", ChainFamily.SOLANA,
            "https://api.devnet.solana.com", "https://explorer.solana.com/?cluster=devnet", True),
    Network("solana-testnet", "Solana Testnet", ChainFamily.SOLANA,
            "https://api.testnet.solana.com", "https://explorer.solana.com/?cluster=testnet", True),
)


def list_networks() -> list[Network]:
    """Return every known network with configured RPC overrides applied."""
    overrides = settings.rpc_url_overrides
    return [
        replace(network, rpc_url=overrides[network.id]) if network.id in overrides else network
        for network in _BUILTIN_NETWORKS
    ]


def get_network(network_id: str) -> Network | None:
    """Look up a network by identifier; None when unknown."""
    for network in list_networks():
        if network.id == network_id:
            return network
    return None
