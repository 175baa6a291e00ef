"""LRU-cached settings loaders.

Settings are loaded and validated once, then cached for the lifetime of the
process.

Testing:
    Clear the cache to force reload:
    get_ledger_settings.cache_clear()
"""

from __future__ import annotations

from functools import lru_cache

from .app import AppSettings
from .graphql import GraphQLSettings
from .ledger import LedgerSettings
from .logs import LoggingSettings


@lru_cache(maxsize=1)
def get_app_settings() -> AppSettings:
    """Get cached application settings."""
    return AppSettings()


@lru_cache(maxsize=1)
def get_graphql_settings() -> GraphQLSettings:
    """Get cached GraphQL settings."""
    return GraphQLSettings()


@lru_cache(maxsize=1)
def get_ledger_settings() -> LedgerSettings:
    """Get cached upstream ledger settings."""
    return LedgerSettings()


@lru_cache(maxsize=1)
def get_logging_settings() -> LoggingSettings:
    """Get cached logging settings."""
    return LoggingSettings()


def clear_settings_cache() -> None:
    """Drop every cached settings instance (tests and reloads)."""
    from .unified import get_settings

    for loader in (
        get_app_settings,
        get_graphql_settings,
        get_ledger_settings,
        get_logging_settings,
        get_settings,
    ):
        loader.cache_clear()
