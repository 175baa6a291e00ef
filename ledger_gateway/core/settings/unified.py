"""Unified settings composition.

Usage:
    from ledger_gateway.core.settings import get_settings

    settings = get_settings()
    print(settings.ledger.endpoint)
    print(settings.graphql.default_page_size)

Each nested settings class still respects its own env prefix. Code that only
needs one domain should prefer the individual get_*_settings() loaders.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache

from .app import AppSettings
from .graphql import GraphQLSettings
from .ledger import LedgerSettings
from .logs import LoggingSettings


@dataclass(frozen=True)
class Settings:
    """All settings domains in one object."""

    app: AppSettings
    graphql: GraphQLSettings
    ledger: LedgerSettings
    logging: LoggingSettings

    @property
    def environment(self) -> str:
        return self.app.environment


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached unified settings."""
    from .loader import (
        get_app_settings,
        get_graphql_settings,
        get_ledger_settings,
        get_logging_settings,
    )

    return Settings(
        app=get_app_settings(),
        graphql=get_graphql_settings(),
        ledger=get_ledger_settings(),
        logging=get_logging_settings(),
    )
