# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

from Rally.Wsapi.core._error_codes import (
    HTTP_404,
    HTTP_503,
    REQUEST_SERVICE_ERRORS,
    REQUEST_TRANSPORT_FAILED,
    _http_subcode,
    _is_transient_status,
)
from Rally.Wsapi.core.errors import HttpError, RequestError, ValidationError, WsapiError


def test_request_error_keeps_error_list_identity():
    errors = ["Not authorized", "Bad ref"]
    err = RequestError(errors, warnings=["W"])
    assert err.errors is errors
    assert err.warnings == ["W"]
    assert err.message == "Not authorized; Bad ref"
    assert err.code == "request_error"
    assert err.subcode == REQUEST_SERVICE_ERRORS
    assert err.source == "server"
    assert isinstance(err, WsapiError)


def test_request_error_transport_source():
    err = RequestError([ConnectionError("refused")], subcode=REQUEST_TRANSPORT_FAILED)
    assert err.source == "client"
    assert err.details["errors"] == ["refused"]


def test_request_error_transient_from_http_error():
    http_error = HttpError("busy", status_code=503, is_transient=True, subcode=HTTP_503)
    assert RequestError([http_error]).is_transient is True
    assert RequestError(["plain"]).is_transient is False


def test_request_error_empty_list_message():
    assert RequestError([]).message == "Request failed"


def test_http_error_to_dict():
    err = HttpError("missing", status_code=404, subcode=HTTP_404, body_excerpt="<html>")
    d = err.to_dict()
    assert d["code"] == "http_error"
    assert d["subcode"] == HTTP_404
    assert d["status_code"] == 404
    assert d["source"] == "server"
    assert d["details"] == {"body_excerpt": "<html>"}
    assert d["timestamp"]


def test_validation_error():
    err = ValidationError("server is required.", subcode="validation_server_empty")
    assert err.code == "validation_error"
    assert err.source == "client"
    assert str(err) == "server is required."


def test_subcode_helpers():
    assert _http_subcode(418) == "http_418"
    assert _is_transient_status(429) is True
    assert _is_transient_status(500) is False
