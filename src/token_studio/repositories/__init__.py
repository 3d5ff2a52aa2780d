"""Data access layer."""

from .metadata_repo import MetadataRepository

__all__ = ["MetadataRepository"]
