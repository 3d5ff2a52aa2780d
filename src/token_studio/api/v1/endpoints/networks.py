# src/token_studio/api/v1/endpoints/networks.py
"""Supported network listing."""

from fastapi import APIRouter

from token_studio.core.networks import list_networks
from token_studio.schemas.token import NetworkResponse

router = APIRouter(prefix="/networks", tags=["networks"])


@router.get("", response_model=list[NetworkResponse])
async def get_networks() -> list[NetworkResponse]:
    """List the networks tokens can be registered on."""
    return [
        NetworkResponse(
            id=network.id,
            name=network.name,
            family=network.family.value,
            explorer_url=network.explorer_url,
            is_testnet=network.is_testnet,
        )
        for network in list_networks()
    ]
