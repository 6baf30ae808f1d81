"""Tests for CosmosDbFactory, configuration and response diagnostics."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from azure.cosmos.exceptions import CosmosHttpResponseError

from cosmos_data import CosmosDbConfig, CosmosDbFactory, ResponseDiagnostics
from cosmos_data.core.cosmos_factory import USER_AGENT_SUFFIX
from cosmos_data.core.diagnostics import make_response_hook
from cosmos_data.exceptions import (
    ConfigurationError,
    CosmosAccessError,
    DocumentAlreadyExistsError,
    ThrottledError,
    translate_cosmos_error,
)

pytestmark = pytest.mark.unit

FACTORY_MODULE = "cosmos_data.core.cosmos_factory"


class TestCosmosDbConfig:
    def test_reads_prefixed_environment(self, monkeypatch):
        monkeypatch.setenv("COSMOSDB_URI", "https://account.documents.azure.com:443/")
        monkeypatch.setenv("COSMOSDB_DATABASE", "people")
        monkeypatch.setenv("COSMOSDB_MAX_ITEM_COUNT", "50")

        config = CosmosDbConfig(_env_file=None)

        assert config.uri == "https://account.documents.azure.com:443/"
        assert config.database == "people"
        assert config.max_item_count == 50
        assert config.allow_telemetry is True

    def test_defaults(self, monkeypatch):
        for name in ("COSMOSDB_URI", "COSMOSDB_KEY", "COSMOSDB_DATABASE"):
            monkeypatch.delenv(name, raising=False)

        config = CosmosDbConfig(_env_file=None)

        assert config.uri is None
        assert config.key is None
        assert config.database == "cosmosdata"
        assert config.auto_create_database is True


class TestCosmosDbFactory:
    def test_rejects_missing_config(self, cosmos_config):
        with pytest.raises(ValueError):
            CosmosDbFactory(None)
        with pytest.raises(ValueError):
            CosmosDbFactory(cosmos_config.model_copy(update={"database": ""}))

    def test_client_uses_key(self, cosmos_config):
        with patch(f"{FACTORY_MODULE}.CosmosClient") as client_cls:
            factory = CosmosDbFactory(cosmos_config)

            client = factory.client

            assert client is client_cls.return_value
            assert factory.client is client
            client_cls.assert_called_once_with(
                url="https://localhost:8081/", credential="cHJpbWFyeQ==", user_agent_suffix=USER_AGENT_SUFFIX
            )
        assert factory.database_name == "testdb"
        assert not factory.uses_managed_identity

    def test_client_options(self, cosmos_config):
        config = cosmos_config.model_copy(
            update={"consistency_level": "Session", "connection_timeout": 30, "allow_telemetry": False}
        )
        with patch(f"{FACTORY_MODULE}.CosmosClient") as client_cls:
            CosmosDbFactory(config).client

        kwargs = client_cls.call_args.kwargs
        assert kwargs["consistency_level"] == "Session"
        assert kwargs["connection_timeout"] == 30
        assert "user_agent_suffix" not in kwargs
        assert "user_agent" not in kwargs

    def test_managed_identity_without_key(self, cosmos_config):
        config = cosmos_config.model_copy(update={"key": None})
        with (
            patch(f"{FACTORY_MODULE}.CosmosClient") as client_cls,
            patch(f"{FACTORY_MODULE}.DefaultAzureCredential") as credential_cls,
        ):
            factory = CosmosDbFactory(config)
            factory.client

        assert factory.uses_managed_identity
        assert client_cls.call_args.kwargs["credential"] is credential_cls.return_value

    def test_missing_uri(self, cosmos_config):
        factory = CosmosDbFactory(cosmos_config.model_copy(update={"uri": None}))

        with pytest.raises(ConfigurationError):
            factory.client

    def test_switch_keys_rebuilds_client(self, cosmos_config):
        with patch(f"{FACTORY_MODULE}.CosmosClient") as client_cls:
            factory = CosmosDbFactory(cosmos_config)
            factory.client

            factory.switch_to_secondary_key()
            factory.client
            factory.switch_to_primary_key()
            factory.client

        credentials = [c.kwargs["credential"] for c in client_cls.call_args_list]
        assert credentials == ["cHJpbWFyeQ==", "c2Vjb25kYXJ5", "cHJpbWFyeQ=="]

    def test_switch_key_closes_dropped_client(self, cosmos_config):
        with patch(f"{FACTORY_MODULE}.CosmosClient", side_effect=lambda **kwargs: MagicMock()):
            factory = CosmosDbFactory(cosmos_config)
            first = factory.client

            factory.switch_to_secondary_key()
            second = factory.client

        assert first is not second
        first.close.assert_called_once_with()
        second.close.assert_not_called()

    def test_close_releases_client_and_credential(self, cosmos_config):
        config = cosmos_config.model_copy(update={"key": None})
        with (
            patch(f"{FACTORY_MODULE}.CosmosClient") as client_cls,
            patch(f"{FACTORY_MODULE}.DefaultAzureCredential") as credential_cls,
        ):
            factory = CosmosDbFactory(config)
            factory.client
            factory.close()
            factory.close()

        client_cls.return_value.close.assert_called_once_with()
        credential_cls.return_value.close.assert_called_once_with()

    def test_switch_to_unconfigured_secondary_key(self, cosmos_config):
        factory = CosmosDbFactory(cosmos_config.model_copy(update={"secondary_key": None}))

        with pytest.raises(ConfigurationError):
            factory.switch_to_secondary_key()

    def test_switch_to_empty_key(self, cosmos_config):
        with pytest.raises(ConfigurationError):
            CosmosDbFactory(cosmos_config).switch_key("")

    def test_request_and_query_kwargs(self, cosmos_config):
        config = cosmos_config.model_copy(update={"populate_query_metrics": True, "max_item_count": 25})

        factory = CosmosDbFactory(config)

        assert factory.request_kwargs() == {}
        assert factory.query_kwargs() == {"populate_query_metrics": True, "max_item_count": 25}

    def test_diagnostics_processor_adds_response_hook(self, cosmos_config):
        factory = CosmosDbFactory(cosmos_config, response_diagnostics_processor=lambda diagnostics: None)

        assert callable(factory.request_kwargs()["response_hook"])

    @pytest.mark.asyncio
    async def test_aclose_closes_current_and_retired_clients(self, cosmos_config):
        with patch(f"{FACTORY_MODULE}.AsyncCosmosClient", side_effect=lambda **kwargs: MagicMock(close=AsyncMock())):
            factory = CosmosDbFactory(cosmos_config)
            first = factory.async_client
            factory.switch_to_secondary_key()
            second = factory.async_client

        assert first is not second
        await factory.aclose()

        first.close.assert_awaited_once()
        second.close.assert_awaited_once()


class TestResponseDiagnostics:
    def test_from_headers(self):
        diagnostics = ResponseDiagnostics.from_headers(
            {
                "x-ms-request-charge": "2.83",
                "x-ms-activity-id": "a1",
                "x-ms-session-token": "0:1#2",
                "x-ms-item-count": "3",
            }
        )

        assert diagnostics == ResponseDiagnostics(
            request_charge=2.83, activity_id="a1", session_token="0:1#2", item_count=3
        )

    def test_header_names_are_case_insensitive(self):
        diagnostics = ResponseDiagnostics.from_headers({"X-MS-Request-Charge": "4.5", "x-ms-item-count": "0"})

        assert diagnostics.request_charge == 4.5
        assert diagnostics.item_count == 0
        assert diagnostics.activity_id is None

    def test_missing_headers(self):
        assert ResponseDiagnostics.from_headers(None) == ResponseDiagnostics(request_charge=0.0)

    def test_hook_forwards_to_processor(self):
        received = []
        hook = make_response_hook(received.append)

        hook({"x-ms-request-charge": "1"}, None)

        assert received == [ResponseDiagnostics(request_charge=1.0)]

    def test_processor_errors_do_not_propagate(self):
        processor = MagicMock(side_effect=RuntimeError("boom"))

        make_response_hook(processor)({}, None)

        processor.assert_called_once()


class TestErrorTranslation:
    @pytest.mark.parametrize(
        ("status_code", "error_cls"),
        [(409, DocumentAlreadyExistsError), (429, ThrottledError), (503, CosmosAccessError)],
    )
    def test_status_codes(self, status_code, error_cls):
        error = translate_cosmos_error(CosmosHttpResponseError(status_code=status_code, message="x"), "Op failed")

        assert type(error) is error_cls
        assert error.status_code == status_code
        assert str(error).startswith("Op failed: ")

    def test_configuration_error_is_value_error(self):
        assert issubclass(ConfigurationError, ValueError)
