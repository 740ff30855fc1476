# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""Tests for WsapiConfig."""

import dataclasses

import pytest

from Rally.Wsapi.core.config import WsapiConfig


class TestWsapiConfig:
    def test_default_values(self):
        config = WsapiConfig()
        assert config.server == "https://rally1.rallydev.com"
        assert config.api_version == "v2.0"
        assert config.api_key is None
        assert config.request_options == {}
        assert config.http_timeout is None
        assert config.max_workers is None
        assert config.logger_name == "Rally.Wsapi"

    def test_immutability(self):
        config = WsapiConfig()
        with pytest.raises(dataclasses.FrozenInstanceError):
            config.server = "http://other"

    def test_from_env_defaults(self):
        config = WsapiConfig.from_env({})
        assert config == WsapiConfig()

    def test_from_env_reads_rally_variables(self):
        config = WsapiConfig.from_env(
            {
                "RALLY_SERVER": "http://www.acme.com",
                "RALLY_API_VERSION": "v3.0",
                "RALLY_API_KEY": "_secret",
                "RALLY_HTTP_TIMEOUT": "2.5",
                "RALLY_MAX_WORKERS": "8",
                "RALLY_LOG_LEVEL": "DEBUG",
            }
        )
        assert config.server == "http://www.acme.com"
        assert config.api_version == "v3.0"
        assert config.api_key == "_secret"
        assert config.http_timeout == 2.5
        assert config.max_workers == 8
        assert config.log_level == "DEBUG"

    def test_from_env_uses_os_environ(self, monkeypatch):
        monkeypatch.setenv("RALLY_SERVER", "http://env.example")
        monkeypatch.delenv("RALLY_API_VERSION", raising=False)
        config = WsapiConfig.from_env()
        assert config.server == "http://env.example"
        assert config.api_version == "v2.0"

    def test_integration_headers_always_name_library(self):
        headers = WsapiConfig().integration_headers()
        assert list(headers) == ["X-RallyIntegrationLibrary"]
        assert headers["X-RallyIntegrationLibrary"].startswith("Rally.Wsapi ")

    def test_integration_headers(self):
        config = WsapiConfig(integration_name="Sync", integration_vendor="Acme", integration_version="2.1")
        headers = config.integration_headers()
        assert headers["X-RallyIntegrationName"] == "Sync"
        assert headers["X-RallyIntegrationVendor"] == "Acme"
        assert headers["X-RallyIntegrationVersion"] == "2.1"
