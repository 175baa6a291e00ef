"""Unit tests for modular Pydantic Settings v2."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from ledger_gateway.core.settings import (
    clear_settings_cache,
    get_graphql_settings,
    get_ledger_settings,
    get_settings,
)
from ledger_gateway.core.settings.app import AppSettings
from ledger_gateway.core.settings.graphql import GraphQLSettings
from ledger_gateway.core.settings.ledger import FULLNODE_URLS, LedgerSettings
from ledger_gateway.core.settings.logs import LoggingSettings


@pytest.mark.unit
class TestAppSettings:
    """Test suite for AppSettings."""

    def test_environment_from_env(self):
        """Test that APP_ENVIRONMENT from conftest is picked up."""
        settings = AppSettings()

        assert settings.environment == "test"
        assert settings.is_production is False
        assert settings.service_name == "ledger-gateway"

    def test_frozen(self):
        settings = AppSettings()

        with pytest.raises(ValidationError):
            settings.debug = True

    def test_production_flag(self):
        assert AppSettings(environment="production").is_production is True

    def test_rejects_bad_service_name(self):
        with pytest.raises(ValidationError):
            AppSettings(service_name="Ledger Gateway")


@pytest.mark.unit
class TestGraphQLSettings:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("GRAPHQL_DEFAULT_PAGE_SIZE", raising=False)
        settings = GraphQLSettings()

        assert settings.path == "/graphql"
        assert settings.default_page_size == 20
        assert settings.max_page_size == 50
        assert settings.max_batch_size == 50

    def test_default_page_size_cannot_exceed_max(self):
        with pytest.raises(ValidationError, match="must not exceed"):
            GraphQLSettings(default_page_size=100, max_page_size=10)

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("GRAPHQL_MAX_PAGE_SIZE", "200")
        clear_settings_cache()

        assert get_graphql_settings().max_page_size == 200

    def test_path_must_be_absolute(self):
        with pytest.raises(ValidationError):
            GraphQLSettings(path="graphql")


@pytest.mark.unit
class TestLedgerSettings:
    """Test suite for LedgerSettings."""

    def test_explicit_url_wins(self):
        settings = LedgerSettings(rpc_url="http://localhost:9000/", network="mainnet")

        assert settings.endpoint == "http://localhost:9000"

    @pytest.mark.parametrize("network", ["mainnet", "testnet", "devnet", "localnet"])
    def test_named_networks(self, monkeypatch, network):
        monkeypatch.delenv("LEDGER_RPC_URL", raising=False)

        settings = LedgerSettings(network=network)

        assert settings.endpoint == FULLNODE_URLS[network]

    def test_custom_network_requires_url(self, monkeypatch):
        monkeypatch.delenv("LEDGER_RPC_URL", raising=False)
        settings = LedgerSettings(network="custom")

        with pytest.raises(ValueError, match="LEDGER_RPC_URL"):
            _ = settings.endpoint

    def test_retries_must_be_positive(self):
        with pytest.raises(ValidationError):
            LedgerSettings(max_retries=0)

    def test_cached_loader_reads_env(self, monkeypatch):
        monkeypatch.setenv("LEDGER_EPOCH_PAGE_SIZE", "25")
        clear_settings_cache()

        settings = get_ledger_settings()

        assert settings.epoch_page_size == 25
        assert settings.endpoint == "http://ledger.invalid:9000"
        assert get_ledger_settings() is settings


@pytest.mark.unit
class TestLoggingSettings:
    def test_to_logging_kwargs(self):
        settings = LoggingSettings(level="DEBUG", json_logs=True, service_name="svc")

        kwargs = settings.to_logging_kwargs()

        assert kwargs["log_level"] == "DEBUG"
        assert kwargs["json_logs"] is True
        assert kwargs["service_name"] == "svc"
        assert kwargs["file_path"] is None


@pytest.mark.unit
def test_unified_settings_compose_domains():
    settings = get_settings()

    assert settings.environment == "test"
    assert settings.ledger.endpoint == "http://ledger.invalid:9000"
    assert settings.graphql.default_page_size <= settings.graphql.max_page_size
