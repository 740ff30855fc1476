# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Shared pytest fixtures and configuration for Rally WSAPI tests.

This module provides common test fixtures, fake transports, and configuration
that can be used across all test modules.
"""

import pytest

from Rally.Wsapi.core.config import WsapiConfig
from tests.unit.test_helpers import FakeTransport


@pytest.fixture
def test_config():
    """Test configuration with safe defaults."""
    return WsapiConfig(
        server="http://www.acme.com",
        api_version="v3.0",
        http_timeout=5,
        max_workers=1,
    )


@pytest.fixture
def fake_transport():
    """Transport double with no queued responses; calls stay pending."""
    return FakeTransport()


@pytest.fixture
def sample_ref():
    """Standard full object reference."""
    return "https://rally1.rallydev.com/slm/webservice/v2.0/defect/1234"
