# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Core infrastructure components for the Rally WSAPI client.

This module contains configuration, the HTTP transport, request logging and
error types.
"""

from .config import WsapiConfig
from .errors import HttpError, RequestError, ValidationError, WsapiError

__all__ = [
    "WsapiConfig",
    "WsapiError",
    "HttpError",
    "RequestError",
    "ValidationError",
]
