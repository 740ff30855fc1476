# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""Error subcode constants used by :mod:`Rally.Wsapi.core.errors`."""

# HTTP subcode constants
HTTP_400 = "http_400"
HTTP_401 = "http_401"
HTTP_403 = "http_403"
HTTP_404 = "http_404"
HTTP_409 = "http_409"
HTTP_429 = "http_429"
HTTP_500 = "http_500"
HTTP_502 = "http_502"
HTTP_503 = "http_503"
HTTP_504 = "http_504"

TRANSIENT_STATUS = {429, 502, 503, 504}

# Request subcodes
REQUEST_TRANSPORT_FAILED = "request_transport_failed"
REQUEST_SERVICE_ERRORS = "request_service_errors"
REQUEST_MISSING_ENVELOPE = "request_missing_envelope"

# Validation subcodes
VALIDATION_SERVER_EMPTY = "validation_server_empty"
VALIDATION_API_VERSION_EMPTY = "validation_api_version_empty"
VALIDATION_UNSUPPORTED_VERB = "validation_unsupported_verb"
VALIDATION_REF_EMPTY = "validation_ref_empty"


def _http_subcode(status_code: int) -> str:
    """Map an HTTP status code to its ``http_<status>`` subcode."""
    return f"http_{status_code}"


def _is_transient_status(status_code: int) -> bool:
    return status_code in TRANSIENT_STATUS
