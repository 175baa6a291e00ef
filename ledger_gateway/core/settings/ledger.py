"""Upstream ledger RPC settings.

Environment variables use LEDGER_ prefix.
"""

from __future__ import annotations

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

Network = Literal["mainnet", "testnet", "devnet", "localnet", "custom"]

FULLNODE_URLS: dict[str, str] = {
    "mainnet": "https://fullnode.mainnet.sui.io:443",
    "testnet": "https://fullnode.testnet.sui.io:443",
    "devnet": "https://fullnode.devnet.sui.io:443",
    "localnet": "http://127.0.0.1:9000",
}


class LedgerSettings(BaseSettings):
    """Connection settings for the ledger JSON-RPC fullnode.

    Example: LEDGER_NETWORK=testnet, LEDGER_RPC_URL=http://localhost:9000
    """

    network: Network = Field(
        default="devnet",
        description="Named network; used to pick rpc_url when it is not set",
    )
    rpc_url: str | None = Field(
        default=None,
        description="Explicit JSON-RPC endpoint, overrides network",
    )

    timeout: float = Field(
        default=30.0,
        gt=0,
        le=300.0,
        description="Per-request timeout in seconds",
    )
    max_retries: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Attempts for transport-level failures (timeouts, resets)",
    )
    retry_initial_delay: float = Field(default=0.5, ge=0.0, le=30.0)
    retry_max_delay: float = Field(default=10.0, ge=0.0, le=120.0)

    max_connections: int = Field(default=100, ge=1, le=1000)
    max_keepalive_connections: int = Field(default=20, ge=0, le=1000)

    epoch_page_size: int | None = Field(
        default=None,
        ge=1,
        le=1000,
        description="Page size for forward epoch scans; None uses the upstream default",
    )

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
        env_ignore_empty=True,
    )

    @field_validator("rpc_url")
    @classmethod
    def _strip_trailing_slash(cls, v: str | None) -> str | None:
        return v.rstrip("/") if v else v

    @property
    def endpoint(self) -> str:
        """Resolved JSON-RPC endpoint."""
        if self.rpc_url:
            return self.rpc_url
        if self.network == "custom":
            msg = "LEDGER_RPC_URL is required when LEDGER_NETWORK=custom"
            raise ValueError(msg)
        return FULLNODE_URLS[self.network]
