"""CRUD-style helpers for the registry of deployed tokens."""
from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from token_studio.core.networks import ChainFamily, get_network
from token_studio.models import Token
from token_studio.repositories import MetadataRepository
from token_studio.schemas.token import TokenRegister
from token_studio.services.errors import (
    ConflictError,
    ForbiddenError,
    MetadataValidationError,
    NotFoundError,
)
from token_studio.services.ownership import OwnerResolver, is_token_owner
from token_studio.utils.address import canonical_address, is_base58_address, is_evm_address

__all__ = [
    "delete_token",
    "find_tokens",
    "register_token",
    "resolve_token",
]

logger = logging.getLogger(__name__)


def resolve_token(repo: MetadataRepository, address: str, network: str | None = None) -> Token:
    """Return the single registered token matching ``address``.

    Raises:
        NotFoundError: No token with this address (on this network) is registered.
        MetadataValidationError: The address exists on several networks and none was given.
    """
    tokens = repo.find_tokens(canonical_address(address), network)
    if not tokens:
        raise NotFoundError("Token not found")
    if len(tokens) > 1:
        raise MetadataValidationError(
            "Token address exists on several networks; specify the network",
        )
    return tokens[0]


def find_tokens(db: Session, address: str, network: str | None = None) -> list[Token]:
    """Return every registered token with this address."""
    return MetadataRepository(db).find_tokens(canonical_address(address), network)


async def register_token(
    db: Session,
    resolver: OwnerResolver,
    payload: TokenRegister,
    caller_address: str,
) -> Token:
    """Record a deployed token after confirming the caller owns it on-chain."""
    network = get_network(payload.network)
    if network is None:
        raise MetadataValidationError(f"Unknown network {payload.network!r}")

    address = payload.address.strip()
    if network.family is ChainFamily.EVM and not is_evm_address(address):
        raise MetadataValidationError("Address is not a valid EVM contract address")
    if network.family is ChainFamily.SOLANA and not is_base58_address(address):
        raise MetadataValidationError("Address is not a valid Solana mint address")

    repo = MetadataRepository(db)
    if repo.find_tokens(canonical_address(address), network.id):
        raise ConflictError("Token is already registered on this network")

    token = Token(
        network=network.id,
        address=address,
        canonical_address=canonical_address(address),
        owner_address=canonical_address(caller_address),
        name=payload.name,
        symbol=payload.symbol,
    )
    if not await is_token_owner(resolver, token, caller_address):
        raise ForbiddenError("Only the token owner can register a token")

    try:
        repo.add_token(token)
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ConflictError("Token is already registered on this network") from exc
    db.refresh(token)
    logger.info("Registered token %s on %s", token.canonical_address, token.network)
    return token


async def delete_token(
    db: Session,
    resolver: OwnerResolver,
    address: str,
    network: str | None,
    caller_address: str,
) -> None:
    """Remove a token; its metadata and history go with it."""
    token = resolve_token(MetadataRepository(db), address, network)
    if not await is_token_owner(resolver, token, caller_address):
        raise ForbiddenError("Only the token owner can remove a token")
    removed = (token.canonical_address, token.network)
    db.delete(token)
    db.commit()
    logger.info("Removed token %s on %s", *removed)
