# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

from ..common.constants import (
    DEFAULT_API_VERSION,
    DEFAULT_SERVER,
    HEADER_INTEGRATION_LIBRARY,
    HEADER_INTEGRATION_NAME,
    HEADER_INTEGRATION_VENDOR,
    HEADER_INTEGRATION_VERSION,
    LIBRARY_NAME,
    LIBRARY_VERSION,
)


@dataclass(frozen=True)
class WsapiConfig:
    """
    Configuration settings for Rally WSAPI client operations.

    :param server: Rally server root, for example ``"https://rally1.rallydev.com"``.
    :type server: str
    :param api_version: WSAPI version segment, for example ``"v2.0"``.
    :type api_version: str
    :param api_key: Rally API key sent in the ``zsessionid`` header. Optional.
    :type api_key: str or None
    :param request_options: Default transport options merged into every call
        (``headers``, ``timeout``, ``auth``, ...).
    :type request_options: dict
    :param http_timeout: Request timeout in seconds (default: method-dependent).
    :type http_timeout: float or None
    :param max_workers: Size of the worker pool running HTTP calls (default: 4).
    :type max_workers: int or None
    :param integration_name: Value of the ``X-RallyIntegrationName`` header.
    :type integration_name: str or None
    :param integration_vendor: Value of the ``X-RallyIntegrationVendor`` header.
    :type integration_vendor: str or None
    :param integration_version: Value of the ``X-RallyIntegrationVersion`` header.
    :type integration_version: str or None
    :param enable_logging: Whether to log each HTTP call (default: True).
    :type enable_logging: bool
    :param log_level: Level applied to the client logger when logging is enabled.
    :type log_level: str
    :param logger_name: Name of the client logger.
    :type logger_name: str
    """
    server: str = DEFAULT_SERVER
    api_version: str = DEFAULT_API_VERSION
    api_key: Optional[str] = None
    request_options: Mapping[str, Any] = field(default_factory=dict)

    # HTTP configuration
    http_timeout: Optional[float] = None
    max_workers: Optional[int] = None

    # Integration headers
    integration_name: Optional[str] = None
    integration_vendor: Optional[str] = None
    integration_version: Optional[str] = None

    # Logging configuration
    enable_logging: bool = True
    log_level: str = "WARNING"
    logger_name: str = LIBRARY_NAME

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "WsapiConfig":
        """
        Create a configuration instance from ``RALLY_*`` environment variables.

        Recognised variables: ``RALLY_SERVER``, ``RALLY_API_VERSION``,
        ``RALLY_API_KEY``, ``RALLY_HTTP_TIMEOUT``, ``RALLY_MAX_WORKERS`` and
        ``RALLY_LOG_LEVEL``. Unset variables fall back to the defaults.

        :param environ: Mapping to read instead of :data:`os.environ`.
        :type environ: dict or None
        :return: Configuration instance.
        :rtype: ~Rally.Wsapi.core.config.WsapiConfig
        """
        env = os.environ if environ is None else environ
        timeout = env.get("RALLY_HTTP_TIMEOUT")
        workers = env.get("RALLY_MAX_WORKERS")
        return cls(
            server=env.get("RALLY_SERVER") or DEFAULT_SERVER,
            api_version=env.get("RALLY_API_VERSION") or DEFAULT_API_VERSION,
            api_key=env.get("RALLY_API_KEY") or None,
            http_timeout=float(timeout) if timeout else None,  # Method-dependent defaults in _HttpTransport
            max_workers=int(workers) if workers else None,  # Will default to 4 in _HttpTransport
            log_level=env.get("RALLY_LOG_LEVEL") or "WARNING",
        )

    def integration_headers(self) -> Dict[str, str]:
        """Headers identifying the calling integration to the service."""
        headers = {HEADER_INTEGRATION_LIBRARY: f"{LIBRARY_NAME} {LIBRARY_VERSION}"}
        if self.integration_name:
            headers[HEADER_INTEGRATION_NAME] = self.integration_name
        if self.integration_vendor:
            headers[HEADER_INTEGRATION_VENDOR] = self.integration_vendor
        if self.integration_version:
            headers[HEADER_INTEGRATION_VERSION] = self.integration_version
        return headers
