"""Dependency injection for FastAPI."""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from ...config import Config, load_config
from ...review import QueryCache, RemoteSyncClient
from .config import WebConfig
from .services.session_registry import SessionRegistry


@lru_cache
def get_config() -> WebConfig:
    """Get the web configuration (cached)."""
    return WebConfig()


@lru_cache
def get_app_config() -> Config:
    """Get the review configuration (cached)."""
    return load_config(get_config().config_path)


@lru_cache
def get_cache() -> QueryCache:
    """Get the shared query cache (cached singleton)."""
    return QueryCache()


@lru_cache
def get_sync_client() -> RemoteSyncClient:
    """Get the remote sync client (cached singleton)."""
    config = get_app_config()
    return RemoteSyncClient(config.sync.base_url, timeout=config.sync.timeout_seconds)


@lru_cache
def get_session_registry() -> SessionRegistry:
    """Get the session registry (cached singleton)."""
    return SessionRegistry(
        sync=get_sync_client(),
        cache=get_cache(),
        config=get_app_config(),
        max_sessions=get_config().max_sessions,
    )


# Type aliases for cleaner router signatures
ConfigDep = Annotated[WebConfig, Depends(get_config)]
AppConfigDep = Annotated[Config, Depends(get_app_config)]
SyncClientDep = Annotated[RemoteSyncClient, Depends(get_sync_client)]
SessionRegistryDep = Annotated[SessionRegistry, Depends(get_session_registry)]
