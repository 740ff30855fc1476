# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Request layer for the Rally Web Services API (WSAPI).

:class:`Request` turns the four verbs into HTTP calls against the versioned
WSAPI endpoint, unwraps the ``Result`` / ``OperationResult`` envelope and
reports failures through a :class:`concurrent.futures.Future`. Every operation
also accepts an optional ``callback(errors, result)`` which is attached to that
same future, so callers may use either style (or both).

Mutating verbs (``post``, ``put``, ``delete``) first fetch a security token
from ``/security/authorize`` and send it as the ``key`` query parameter.
"""

from __future__ import annotations

from concurrent.futures import Future
from typing import Any, Callable, Dict, List, Mapping, Optional

from .common.constants import (
    ENVELOPE_KEYS,
    FIELD_ERRORS,
    FIELD_SECURITY_TOKEN,
    FIELD_WARNINGS,
    SECURITY_AUTHORIZE_PATH,
    SECURITY_TOKEN_PARAM,
    WSAPI_PATH,
)
from .core._error_codes import (
    REQUEST_MISSING_ENVELOPE,
    REQUEST_TRANSPORT_FAILED,
    VALIDATION_API_VERSION_EMPTY,
    VALIDATION_SERVER_EMPTY,
    VALIDATION_UNSUPPORTED_VERB,
    _http_subcode,
    _is_transient_status,
)
from .core._http import _HttpTransport
from .core.config import WsapiConfig
from .core.errors import HttpError, RequestError, ValidationError
from .core.telemetry import TelemetryManager

Callback = Callable[[Optional[List[Any]], Optional[Dict[str, Any]]], None]

# Verb token -> transport operation
_TRANSPORT_OPERATIONS = {
    "get": "get",
    "put": "put",
    "post": "post",
    "del": "delete",
}


def _attach_callback(future: Future, callback: Callback) -> None:
    """Deliver the future's outcome to a ``callback(errors, result)``."""

    def _notify(f: Future) -> None:
        error = f.exception()
        if error is None:
            callback(None, f.result())
        else:
            callback(getattr(error, "errors", [error]), None)

    future.add_done_callback(_notify)


def _relay(source: Future, target: Future) -> None:
    error = source.exception()
    if error is None:
        target.set_result(source.result())
    else:
        target.set_exception(error)


def _unwrap(body: Any) -> Optional[Dict[str, Any]]:
    """Return the ``Result`` or ``OperationResult`` payload of a decoded body."""
    if not isinstance(body, Mapping):
        return None
    for key in ENVELOPE_KEYS:
        payload = body.get(key)
        if isinstance(payload, dict):
            return payload
    return None


class Request:
    """
    WSAPI request client.

    :param config: Server, API version and default transport options.
        Defaults to :meth:`WsapiConfig() <Rally.Wsapi.core.config.WsapiConfig>`.
    :type config: ~Rally.Wsapi.core.config.WsapiConfig or None
    :param transport: Transport to issue HTTP calls through. It must provide
        ``defaults(options)`` returning the transport used for calls, which in
        turn provides ``get``, ``put``, ``post`` and ``delete`` taking
        ``(options, done)``. Defaults to a requests-based transport.

    :raises ~Rally.Wsapi.core.errors.ValidationError: If ``server`` or
        ``api_version`` is empty.

    Example::

        with Request(WsapiConfig(request_options={"headers": {"zsessionid": key}})) as rr:
            rr.get({"url": "/defect", "qs": {"fetch": "Name"}}).result()

            def done(errors, result):
                ...

            rr.put({"url": "/defect/create", "json": {"Defect": {"Name": "Broken"}}}, done)
    """

    def __init__(self, config: Optional[WsapiConfig] = None, transport: Optional[Any] = None) -> None:
        self._config = config or WsapiConfig()
        server = self._config.server
        if not server:
            raise ValidationError("server is required.", subcode=VALIDATION_SERVER_EMPTY)
        api_version = self._config.api_version
        if not api_version:
            raise ValidationError("api_version is required.", subcode=VALIDATION_API_VERSION_EMPTY)
        self.wsapi_url = f"{server}{WSAPI_PATH}{api_version}"
        self._telemetry = TelemetryManager(self._config)
        if transport is None:
            transport = _HttpTransport(
                timeout=self._config.http_timeout,
                max_workers=self._config.max_workers,
                telemetry=self._telemetry,
            )
        self.http_request = transport.defaults(dict(self._config.request_options))

    def __enter__(self) -> "Request":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def close(self) -> None:
        """Release the transport's session and worker threads. Safe to call multiple times."""
        close = getattr(self.http_request, "close", None)
        if callable(close):
            close()

    def _url(self, url: str) -> str:
        if "://" in url:
            return url
        return self.wsapi_url + url

    def do_request(self, verb: str, options: Mapping[str, Any], callback: Optional[Callback] = None) -> Future:
        """
        Issue one HTTP call and unwrap its response envelope.

        The future resolves with the ``Result`` or ``OperationResult`` payload
        (warnings included). It rejects with
        :class:`~Rally.Wsapi.core.errors.RequestError` when the transport fails
        (``errors`` is ``[error]``, or the error itself when it is already a
        list), when the envelope's ``Errors`` is non-empty (``errors`` is that
        list, unchanged), or when the response carries no envelope at all.

        :param verb: One of ``"get"``, ``"put"``, ``"post"`` or ``"del"``.
        :type verb: :class:`str`
        :param options: Transport options. ``url`` is relative to :attr:`wsapi_url`
            unless it is absolute.
        :type options: :class:`dict`
        :param callback: Optional ``callback(errors, result)``; exactly one of
            the two arguments is not ``None``.
        :return: Future of the envelope payload.
        :rtype: :class:`concurrent.futures.Future`
        :raises ~Rally.Wsapi.core.errors.ValidationError: If ``verb`` is unknown.
        """
        operation = _TRANSPORT_OPERATIONS.get(verb)
        if operation is None:
            raise ValidationError(f"Unsupported verb: {verb!r}", subcode=VALIDATION_UNSUPPORTED_VERB)

        future: Future = Future()
        if callback is not None:
            _attach_callback(future, callback)

        request_options = dict(options)
        request_options["url"] = self._url(options.get("url") or "")

        def _done(error: Any, response: Any, body: Any) -> None:
            if error is not None:
                errors = error if isinstance(error, list) else [error]
                future.set_exception(RequestError(errors, subcode=REQUEST_TRANSPORT_FAILED))
                return
            status_code = getattr(response, "status_code", None)
            payload = _unwrap(body)
            if payload is None:
                future.set_exception(
                    RequestError(
                        [self._http_error(status_code, body)],
                        subcode=REQUEST_MISSING_ENVELOPE,
                        status_code=status_code,
                    )
                )
                return
            if payload.get(FIELD_ERRORS):
                future.set_exception(
                    RequestError(payload[FIELD_ERRORS], warnings=payload.get(FIELD_WARNINGS), status_code=status_code)
                )
                return
            future.set_result(payload)

        getattr(self.http_request, operation)(request_options, _done)
        return future

    def do_secured_request(
        self, verb: str, options: Mapping[str, Any], callback: Optional[Callback] = None
    ) -> Future:
        """
        Fetch a security token, then issue ``verb`` with the token attached.

        The token is read from the ``/security/authorize`` response and sent
        as ``qs["key"]``; other ``qs`` entries are kept and ``options`` itself
        is not modified. If the token fetch fails the call fails with the
        same error and ``verb`` is never issued. Otherwise the outcome of
        ``verb`` is relayed unchanged. No token is reused across calls.

        :param verb: One of ``"put"``, ``"post"`` or ``"del"``.
        :type verb: :class:`str`
        :param options: Transport options for the mutating call.
        :type options: :class:`dict`
        :param callback: Optional ``callback(errors, result)``.
        :return: Future of the mutating call's envelope payload.
        :rtype: :class:`concurrent.futures.Future`
        """
        if verb not in _TRANSPORT_OPERATIONS:
            raise ValidationError(f"Unsupported verb: {verb!r}", subcode=VALIDATION_UNSUPPORTED_VERB)

        future: Future = Future()
        if callback is not None:
            _attach_callback(future, callback)

        def _on_token(token_future: Future) -> None:
            error = token_future.exception()
            if error is not None:
                self._telemetry.debug(f"security token request failed; {verb} not issued")
                future.set_exception(error)
                return
            token = token_future.result().get(FIELD_SECURITY_TOKEN)
            secured_options = dict(options)
            qs = dict(options.get("qs") or {})
            qs[SECURITY_TOKEN_PARAM] = token
            secured_options["qs"] = qs
            self._telemetry.debug(f"security token acquired; issuing {verb}")
            try:
                pending = self.do_request(verb, secured_options)
            except Exception as e:
                # Runs inside a done-callback, where a raise would be lost
                future.set_exception(e)
                return
            pending.add_done_callback(lambda f: _relay(f, future))

        self.do_request("get", {"url": SECURITY_AUTHORIZE_PATH}).add_done_callback(_on_token)
        return future

    def get(self, options: Mapping[str, Any], callback: Optional[Callback] = None) -> Future:
        return self.do_request("get", options, callback)

    def post(self, options: Mapping[str, Any], callback: Optional[Callback] = None) -> Future:
        return self.do_secured_request("post", options, callback)

    def put(self, options: Mapping[str, Any], callback: Optional[Callback] = None) -> Future:
        return self.do_secured_request("put", options, callback)

    def delete(self, options: Mapping[str, Any], callback: Optional[Callback] = None) -> Future:
        return self.do_secured_request("del", options, callback)

    @staticmethod
    def _http_error(status_code: Optional[int], body: Any) -> HttpError:
        status = status_code or 0
        excerpt = body if isinstance(body, str) else (repr(body) if body is not None else "")
        return HttpError(
            f"Response (status={status}) did not contain a WSAPI envelope",
            status_code=status,
            is_transient=_is_transient_status(status),
            subcode=_http_subcode(status),
            body_excerpt=excerpt[:200],
        )


def create_request(options: Optional[Mapping[str, Any]] = None, *, transport: Optional[Any] = None, **kwargs: Any) -> Request:
    """
    Build a :class:`Request` from an options mapping.

    Recognised options are ``server``, ``api_version`` (or ``apiVersion``) and
    ``request_options`` (or ``requestOptions``). Missing values use the
    :class:`~Rally.Wsapi.core.config.WsapiConfig` defaults.

    Example::

        rr = create_request({"server": "http://www.acme.com", "apiVersion": "v3.0"})
        rr.wsapi_url  # 'http://www.acme.com/slm/webservice/v3.0'
    """
    merged: Dict[str, Any] = dict(options or {})
    merged.update(kwargs)
    config_kwargs: Dict[str, Any] = {}
    if merged.get("server") is not None:
        config_kwargs["server"] = merged["server"]
    api_version = merged.get("api_version", merged.get("apiVersion"))
    if api_version is not None:
        config_kwargs["api_version"] = api_version
    request_options = merged.get("request_options", merged.get("requestOptions"))
    if request_options is not None:
        config_kwargs["request_options"] = request_options
    return Request(WsapiConfig(**config_kwargs), transport=transport)


__all__ = ["Request", "create_request"]
