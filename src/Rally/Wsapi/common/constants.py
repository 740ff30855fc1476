# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Constants for the Rally Web Services API (WSAPI).

Envelope field names are an exact contract with the service and must not be
renamed.
"""

DEFAULT_SERVER = "https://rally1.rallydev.com"
DEFAULT_API_VERSION = "v2.0"

WSAPI_PATH = "/slm/webservice/"
SECURITY_AUTHORIZE_PATH = "/security/authorize"

# Response envelope keys
ENVELOPE_RESULT = "Result"
ENVELOPE_OPERATION_RESULT = "OperationResult"
ENVELOPE_KEYS = (ENVELOPE_RESULT, ENVELOPE_OPERATION_RESULT)

FIELD_ERRORS = "Errors"
FIELD_WARNINGS = "Warnings"
FIELD_SECURITY_TOKEN = "SecurityToken"

# Query-string parameter carrying the security token on mutating calls
SECURITY_TOKEN_PARAM = "key"

# Authentication and integration headers
HEADER_API_KEY = "zsessionid"
HEADER_INTEGRATION_NAME = "X-RallyIntegrationName"
HEADER_INTEGRATION_VENDOR = "X-RallyIntegrationVendor"
HEADER_INTEGRATION_VERSION = "X-RallyIntegrationVersion"
HEADER_INTEGRATION_LIBRARY = "X-RallyIntegrationLibrary"

LIBRARY_NAME = "Rally.Wsapi"
LIBRARY_VERSION = "0.1.0"
