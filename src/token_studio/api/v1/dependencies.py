"""Shared API dependencies for authentication and service wiring."""

from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy.orm import Session

from token_studio.core.security import decode_access_token
from token_studio.db.session import get_db
from token_studio.services.assets import LogoStorage, get_logo_storage
from token_studio.services.metadata import MetadataService
from token_studio.services.ownership import OwnerResolver, get_owner_resolver
from token_studio.utils.address import canonical_address

# HTTP Bearer scheme for JWT authentication
bearer_scheme = HTTPBearer()

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]


@dataclass(frozen=True)
class Caller:
    """Authenticated wallet identity attached to a request."""

    address: str


def get_current_caller(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(bearer_scheme)],
) -> Caller:
    """Get the calling wallet address from the bearer token.

    Raises:
        HTTPException: If the token is invalid or carries no address
    """
    try:
        payload = decode_access_token(credentials.credentials)
    except JWTError as err:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
        ) from err

    subject = payload.get("sub")
    if not isinstance(subject, str) or not subject.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
        )
    return Caller(address=canonical_address(subject))


def get_owner_resolver_dep() -> OwnerResolver:
    return get_owner_resolver()


def get_logo_storage_dep() -> LogoStorage:
    return get_logo_storage()


CurrentCallerDep = Annotated[Caller, Depends(get_current_caller)]
OwnerResolverDep = Annotated[OwnerResolver, Depends(get_owner_resolver_dep)]
LogoStorageDep = Annotated[LogoStorage, Depends(get_logo_storage_dep)]


def get_metadata_service(
    db: SessionDep,
    resolver: OwnerResolverDep,
    storage: LogoStorageDep,
) -> MetadataService:
    """Build a request-scoped metadata service."""
    return MetadataService(db, resolver, storage)


MetadataServiceDep = Annotated[MetadataService, Depends(get_metadata_service)]
