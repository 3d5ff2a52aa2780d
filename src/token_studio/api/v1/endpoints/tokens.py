# src/token_studio/api/v1/endpoints/tokens.py
"""Registry endpoints for deployed tokens."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Response, status

from token_studio.api.v1.dependencies import CurrentCallerDep, OwnerResolverDep, SessionDep
from token_studio.models import Token
from token_studio.schemas.token import TokenRegister, TokenResponse
from token_studio.services import tokens as token_service

router = APIRouter(prefix="/tokens", tags=["tokens"])


@router.post("", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def register_token(
    payload: TokenRegister,
    caller: CurrentCallerDep,
    resolver: OwnerResolverDep,
    db: SessionDep,
) -> Token:
    """Record a deployed token owned by the caller."""
    return await token_service.register_token(db, resolver, payload, caller.address)


@router.get("/{address}", response_model=list[TokenResponse])
async def get_tokens(
    address: str,
    db: SessionDep,
    network: str | None = None,
) -> list[Token]:
    """Get registered tokens by address, across networks unless one is given."""
    tokens = token_service.find_tokens(db, address, network)
    if not tokens:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Token not found")
    return tokens


@router.delete(
    "/{address}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
)
async def delete_token(
    address: str,
    caller: CurrentCallerDep,
    resolver: OwnerResolverDep,
    db: SessionDep,
    network: str | None = None,
) -> Response:
    """Remove a token together with its metadata and history."""
    await token_service.delete_token(db, resolver, address, network, caller.address)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
