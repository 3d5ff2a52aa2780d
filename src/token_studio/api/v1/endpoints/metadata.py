# src/token_studio/api/v1/endpoints/metadata.py
"""Token metadata endpoints: records, drafts, logos, history and verification."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, File, Form, Query, UploadFile

from token_studio.api.v1.dependencies import CurrentCallerDep, MetadataServiceDep
from token_studio.models import TemporaryMetadata, TokenMetadata, TokenMetadataHistory
from token_studio.schemas.metadata import (
    HistoryEntryResponse,
    LogoUploadResponse,
    MetadataCreate,
    MetadataResponse,
    MetadataUpdate,
    SessionLink,
    SessionResponse,
    SessionUpsert,
    TokenCategory,
)

router = APIRouter(prefix="/metadata", tags=["metadata"])

NetworkQuery = Annotated[str | None, Query(description="Network id when the address is ambiguous")]


@router.get("", response_model=list[MetadataResponse])
async def search_metadata(
    service: MetadataServiceDep,
    tag: TokenCategory | None = None,
    verified: bool | None = None,
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
) -> list[TokenMetadata]:
    """List metadata records, optionally filtered by category tag."""
    return service.search(
        tag=tag.value if tag else None,
        verified=verified,
        limit=limit,
        offset=offset,
    )


@router.post("", response_model=MetadataResponse)
async def create_metadata(
    payload: MetadataCreate,
    caller: CurrentCallerDep,
    service: MetadataServiceDep,
) -> TokenMetadata | MetadataResponse:
    """Create or update token metadata (owner only when a token is named)."""
    return await service.create(payload, caller.address)


@router.post("/upload-logo", response_model=LogoUploadResponse)
async def upload_logo(
    caller: CurrentCallerDep,
    service: MetadataServiceDep,
    logo: Annotated[UploadFile, File(description="JPG, PNG or WebP, at most 1 MiB")],
    token_address: Annotated[str | None, Form(alias="tokenAddress")] = None,
    network: Annotated[str | None, Form()] = None,
) -> LogoUploadResponse:
    """Store a logo and attach it to the token when one is given."""
    # Read one byte past the limit so oversized files are detected without buffering them whole.
    data = await logo.read(service.storage.config.max_bytes + 1)
    url = await service.upload_logo(
        data,
        logo.content_type,
        caller.address,
        token_address=token_address or None,
        network=network or None,
    )
    return LogoUploadResponse(logo_url=url)


@router.post("/session", response_model=SessionResponse)
async def upsert_session(
    payload: SessionUpsert,
    caller: CurrentCallerDep,
    service: MetadataServiceDep,
) -> TemporaryMetadata:
    """Create or refresh a pre-deployment metadata draft."""
    return service.upsert_session(payload, caller.address)


@router.post("/session/link", response_model=MetadataResponse)
async def link_session(
    payload: SessionLink,
    caller: CurrentCallerDep,
    service: MetadataServiceDep,
) -> TokenMetadata:
    """Bind a draft onto a deployed token; the draft is consumed."""
    return await service.link_session(payload, caller.address)


@router.get("/session/{session_id}", response_model=SessionResponse)
async def get_session(
    session_id: str,
    caller: CurrentCallerDep,
    service: MetadataServiceDep,
) -> TemporaryMetadata:
    """Return the caller's live draft."""
    return service.get_session(session_id, caller.address)


@router.get("/{token_address}", response_model=MetadataResponse)
async def get_metadata(
    token_address: str,
    service: MetadataServiceDep,
    network: NetworkQuery = None,
) -> TokenMetadata:
    """Get token metadata by address (public)."""
    return service.get(token_address, network)


@router.put("/{token_address}", response_model=MetadataResponse)
async def update_metadata(
    token_address: str,
    payload: MetadataUpdate,
    caller: CurrentCallerDep,
    service: MetadataServiceDep,
) -> TokenMetadata:
    """Update token metadata (owner only)."""
    return await service.update(token_address, payload, caller.address)


@router.get("/{token_address}/history", response_model=list[HistoryEntryResponse])
async def get_metadata_history(
    token_address: str,
    caller: CurrentCallerDep,
    service: MetadataServiceDep,
    network: NetworkQuery = None,
) -> list[TokenMetadataHistory]:
    """Return the metadata audit trail, newest first (owner only)."""
    return await service.history(token_address, caller.address, network)


@router.post("/{token_address}/verify", response_model=MetadataResponse)
async def verify_metadata(
    token_address: str,
    caller: CurrentCallerDep,
    service: MetadataServiceDep,
    network: NetworkQuery = None,
) -> TokenMetadata:
    """Mark token metadata as verified (admin allow-list only)."""
    return service.verify(token_address, caller.address, network)
