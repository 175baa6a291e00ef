"""Modular Pydantic Settings v2 configuration.

One frozen settings class per domain, each with its own env prefix:
- APP_      application/server (``AppSettings``)
- GRAPHQL_  endpoint, page sizes, loader batching (``GraphQLSettings``)
- LEDGER_   upstream JSON-RPC connection (``LedgerSettings``)
- LOG_      logging (``LoggingSettings``)

Import settings via cached loaders:
    from ledger_gateway.core.settings import get_ledger_settings

Configuration precedence (highest to lowest):
    1. init kwargs (testing/overrides)
    2. Environment variables
    3. .env file
"""

from __future__ import annotations

from .loader import (
    clear_settings_cache,
    get_app_settings,
    get_graphql_settings,
    get_ledger_settings,
    get_logging_settings,
)
from .unified import Settings, get_settings

__all__ = [
    "Settings",
    "clear_settings_cache",
    "get_app_settings",
    "get_graphql_settings",
    "get_ledger_settings",
    "get_logging_settings",
    "get_settings",
]
