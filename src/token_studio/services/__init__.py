# src/token_studio/services/__init__.py
"""Business logic services for the Token Studio service."""

from .assets import LogoStorage, get_logo_storage
from .metadata import MetadataService
from .ownership import OwnerResolver, RpcOwnerResolver, get_owner_resolver, is_token_owner
from .session_sweep import SessionSweepWorker, purge_expired_sessions

__all__ = [
    "LogoStorage",
    "MetadataService",
    "OwnerResolver",
    "RpcOwnerResolver",
    "SessionSweepWorker",
    "get_logo_storage",
    "get_owner_resolver",
    "is_token_owner",
    "purge_expired_sessions",
]
