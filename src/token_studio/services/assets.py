"""Logo asset validation and storage.

Logos are pinned to a content-addressed store when one is configured; when
pinning is unconfigured, times out or fails, the bytes are written to the
local upload directory that the app serves statically. Callers only ever get
back a URL.
"""

from __future__ import annotations

import asyncio
import base64
import binascii
import logging
import uuid
from dataclasses import dataclass
from pathlib import Path

import httpx

from token_studio.core.settings import settings
from token_studio.services.errors import AssetStorageError, MetadataValidationError

logger = logging.getLogger(__name__)

ALLOWED_LOGO_TYPES: dict[str, str] = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/webp": ".webp",
}

_MAGIC_PREFIXES: tuple[tuple[bytes, str], ...] = (
    (b"\xff\xd8\xff", "image/jpeg"),
    (b"\x89PNG\r\n\x1a\n", "image/png"),
)


class RemotePinError(RuntimeError):
    """Raised when the content-addressed store rejects or garbles an upload."""


@dataclass(frozen=True)
class StoredLogo:
    """A stored asset and where it can be fetched from."""

    url: str
    content_type: str
    size: int


@dataclass(frozen=True)
class AssetStorageConfig:
    """Immutable configuration for logo storage."""

    max_bytes: int
    upload_dir: Path
    public_base_url: str
    ipfs_upload_url: str | None
    ipfs_api_token: str | None
    ipfs_gateway_template: str
    timeout_seconds: float

    @property
    def remote_enabled(self) -> bool:
        return bool(self.ipfs_upload_url and self.ipfs_api_token)


def load_asset_config() -> AssetStorageConfig:
    """Build configuration object from global settings."""
    return AssetStorageConfig(
        max_bytes=settings.max_logo_bytes,
        upload_dir=Path(settings.upload_dir),
        public_base_url=settings.public_base_url.rstrip("/"),
        ipfs_upload_url=settings.ipfs_upload_url,
        ipfs_api_token=settings.ipfs_api_token,
        ipfs_gateway_template=settings.ipfs_gateway_template,
        timeout_seconds=float(settings.asset_http_timeout_seconds),
    )


def sniff_image_type(data: bytes) -> str | None:
    """Guess the image MIME type from its leading bytes."""
    for prefix, content_type in _MAGIC_PREFIXES:
        if data.startswith(prefix):
            return content_type
    if len(data) >= 12 and data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "image/webp"
    return None


def validate_logo(data: bytes, content_type: str | None, *, max_bytes: int) -> str:
    """Check size and type before anything is stored; return the MIME type."""
    if not data:
        raise MetadataValidationError("Logo file is empty")
    if len(data) > max_bytes:
        raise MetadataValidationError(
            f"Logo exceeds the maximum size of {max_bytes} bytes",
        )
    normalized = (content_type or "").split(";", 1)[0].strip().lower()
    if normalized not in ALLOWED_LOGO_TYPES:
        raise MetadataValidationError("Only JPG, PNG, and WebP files are allowed")
    return normalized


def decode_inline_image(logo_data: str) -> tuple[bytes, str | None]:
    """Decode a base64 image, optionally wrapped as a ``data:`` URL.

    Returns the raw bytes and the declared MIME type, falling back to the type
    sniffed from the bytes when the payload carries no declaration.
    """
    declared: str | None = None
    payload = logo_data.strip()
    if payload.startswith("data:"):
        header, sep, payload = payload.partition(",")
        if not sep or ";base64" not in header:
            raise MetadataValidationError("Logo data URL must be base64 encoded")
        declared = header[len("data:"):].split(";", 1)[0] or None

    try:
        raw = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise MetadataValidationError("Logo data is not valid base64") from exc
    return raw, declared or sniff_image_type(raw)


def validate_inline_logo(logo_data: str, *, max_bytes: int) -> None:
    """Reject an inline logo that could never be stored."""
    raw, content_type = decode_inline_image(logo_data)
    validate_logo(raw, content_type, max_bytes=max_bytes)


class LogoStorage:
    """Store validated logos remotely, falling back to the local upload directory."""

    def __init__(
        self,
        config: AssetStorageConfig | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config or load_asset_config()
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._client_lock = asyncio.Lock()

    async def _ensure_client(self) -> httpx.AsyncClient:
        async with self._client_lock:
            if self._client is None:
                self._client = httpx.AsyncClient(
                    timeout=httpx.Timeout(self.config.timeout_seconds),
                    transport=self._transport,
                )
        return self._client

    async def store(
        self,
        data: bytes,
        suggested_name: str,
        content_type: str | None,
    ) -> StoredLogo:
        """Validate and store a logo, returning its durable URL."""
        mime = validate_logo(data, content_type, max_bytes=self.config.max_bytes)
        filename = self._filename(suggested_name, mime)

        if self.config.remote_enabled:
            try:
                url = await self._pin_remote(data, filename, mime)
                logger.info("Pinned logo %s (%d bytes)", filename, len(data))
                return StoredLogo(url=url, content_type=mime, size=len(data))
            except (httpx.HTTPError, httpx.InvalidURL, RemotePinError) as exc:
                logger.warning("Remote pinning failed for %s, using local storage: %s", filename, exc)

        url = await asyncio.to_thread(self._write_local, data, filename)
        return StoredLogo(url=url, content_type=mime, size=len(data))

    async def store_inline(self, logo_data: str, suggested_name: str) -> StoredLogo:
        """Store a base64 (or data URL) encoded logo."""
        raw, content_type = decode_inline_image(logo_data)
        return await self.store(raw, suggested_name, content_type)

    @staticmethod
    def _filename(suggested_name: str, content_type: str) -> str:
        stem = "".join(ch for ch in suggested_name if ch.isalnum() or ch in "-_")[:80] or "logo"
        return f"{stem}-{uuid.uuid4().hex[:12]}{ALLOWED_LOGO_TYPES[content_type]}"

    async def _pin_remote(self, data: bytes, filename: str, content_type: str) -> str:
        client = await self._ensure_client()
        response = await client.post(
            self.config.ipfs_upload_url or "",
            headers={
                "Authorization": f"Bearer {self.config.ipfs_api_token}",
                "X-Name": filename,
            },
            files={"file": (filename, data, content_type)},
        )
        response.raise_for_status()
        try:
            cid = response.json().get("cid")
        except (ValueError, AttributeError) as exc:
            raise RemotePinError("Pinning service returned invalid JSON") from exc
        if not isinstance(cid, str) or not cid:
            raise RemotePinError("Pinning service response has no CID")
        try:
            gateway = self.config.ipfs_gateway_template.format(cid=cid).rstrip("/")
        except (KeyError, IndexError, ValueError) as exc:
            raise RemotePinError(f"Invalid gateway template: {exc}") from exc
        return f"{gateway}/{filename}"

    def _write_local(self, data: bytes, filename: str) -> str:
        try:
            self.config.upload_dir.mkdir(parents=True, exist_ok=True)
            (self.config.upload_dir / filename).write_bytes(data)
        except OSError as exc:
            raise AssetStorageError(f"Could not store logo locally: {exc}") from exc
        return f"{self.config.public_base_url}/uploads/{filename}"

    async def close(self) -> None:
        """Clean up underlying HTTP client resources."""
        async with self._client_lock:
            if self._client is not None:
                await self._client.aclose()
                self._client = None


class _LogoStorageSingleton:
    """Singleton wrapper for LogoStorage."""

    _instance: LogoStorage | None = None

    @classmethod
    def get_instance(cls) -> LogoStorage:
        if cls._instance is None:
            cls._instance = LogoStorage()
        return cls._instance


def get_logo_storage() -> LogoStorage:
    """Return the process-wide logo storage backend."""
    return _LogoStorageSingleton.get_instance()
