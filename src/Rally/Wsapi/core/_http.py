# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
HTTP transport with default options, timeout handling, and session support.

This module provides :class:`~Rally.Wsapi.core._http._HttpTransport`, a wrapper
around the requests library that exposes one operation per HTTP verb. Each
operation accepts an options mapping and a completion callback, runs the call
on a worker pool, and reports ``done(error, response, body)`` where ``body`` is
the decoded JSON document (or the raw text when the response is not JSON).
"""

from __future__ import annotations

import copy
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable, Dict, Mapping, Optional

import requests

from .telemetry import TelemetryManager

Done = Callable[[Any, Optional[requests.Response], Any], None]

# Transport options forwarded to ``requests`` as-is
_PASSTHROUGH_OPTIONS = (
    "headers",
    "timeout",
    "auth",
    "data",
    "files",
    "cookies",
    "proxies",
    "verify",
    "cert",
    "allow_redirects",
)


def merge_options(defaults: Mapping[str, Any], options: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Merge call options over default options.

    ``headers`` and ``qs`` are merged key by key; every other key in ``options``
    replaces the default. Neither input is modified.
    """
    merged: Dict[str, Any] = dict(defaults)
    for key, value in options.items():
        if key in ("headers", "qs") and isinstance(value, Mapping) and isinstance(merged.get(key), Mapping):
            combined = dict(merged[key])
            combined.update(value)
            merged[key] = combined
        else:
            merged[key] = value
    return merged


class _TransportPool:
    """Session and worker pool shared by a transport and its derived copies."""

    def __init__(self, max_workers: int, session: Optional[requests.Session]) -> None:
        self._max_workers = max_workers
        self._session = session
        self._owns_session = session is None
        self._executor: Optional[ThreadPoolExecutor] = None
        self._closed = False
        self._drained = False
        self._lock = threading.Lock()

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def session(self) -> requests.Session:
        with self._lock:
            if self._session is None:
                if self._drained:
                    raise RuntimeError("Transport is closed.")
                self._session = requests.Session()
                self._owns_session = True
            return self._session

    def submit(self, fn: Callable[..., Any], *args: Any) -> Future:
        with self._lock:
            if self._closed:
                raise RuntimeError("Transport is closed.")
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=self._max_workers, thread_name_prefix="rally-wsapi"
                )
            executor = self._executor
        return executor.submit(fn, *args)

    def close(self) -> None:
        with self._lock:
            self._closed = True
            executor, self._executor = self._executor, None
        if executor is not None:
            executor.shutdown(wait=True)
        # In-flight calls still use the session until the pool has drained
        with self._lock:
            self._drained = True
            session = self._session if self._owns_session else None
            if self._owns_session:
                self._session = None
        if session is not None:
            session.close()


class _HttpTransport:
    """
    HTTP transport exposing ``get``, ``put``, ``post`` and ``delete`` operations.

    Every operation takes an options mapping with at least ``url``, plus
    optional ``qs`` (query string), ``json`` (request body) and any of the
    ``requests`` keyword arguments ``headers``, ``timeout``, ``auth`` and so
    on. Unknown keys are ignored. The operation returns immediately; ``done``
    is invoked from a worker thread once the call completes.

    :param defaults: Options merged under every call's options.
    :type defaults: :class:`dict` | None
    :param timeout: Default request timeout in seconds. If None, uses per-method defaults.
    :type timeout: :class:`float` | None
    :param max_workers: Number of worker threads running HTTP calls. Default is 4.
    :type max_workers: :class:`int` | None
    :param session: Optional requests.Session for connection reuse. When omitted,
        a session is created on first use and closed by :meth:`close`.
    :type session: :class:`requests.Session` | None
    :param telemetry: Logger wrapper used to report each call.
    :type telemetry: ~Rally.Wsapi.core.telemetry.TelemetryManager | None
    """

    def __init__(
        self,
        defaults: Optional[Mapping[str, Any]] = None,
        timeout: Optional[float] = None,
        max_workers: Optional[int] = None,
        session: Optional[requests.Session] = None,
        telemetry: Optional[TelemetryManager] = None,
    ) -> None:
        self._defaults: Dict[str, Any] = dict(defaults or {})
        self.default_timeout: Optional[float] = timeout
        self._pool = _TransportPool(max_workers if max_workers is not None else 4, session)
        self._telemetry = telemetry or TelemetryManager()

    @property
    def default_options(self) -> Dict[str, Any]:
        return dict(self._defaults)

    def defaults(self, options: Optional[Mapping[str, Any]] = None) -> "_HttpTransport":
        """
        Return a transport applying ``options`` as defaults to every call.

        The derived transport shares this transport's session and worker pool.

        :param options: Default options layered over the current defaults.
        :type options: :class:`dict` | None
        :rtype: ~Rally.Wsapi.core._http._HttpTransport
        """
        derived = copy.copy(self)
        derived._defaults = merge_options(self._defaults, options or {})
        return derived

    def get(self, options: Mapping[str, Any], done: Done) -> Future:
        return self._submit("GET", options, done)

    def put(self, options: Mapping[str, Any], done: Done) -> Future:
        return self._submit("PUT", options, done)

    def post(self, options: Mapping[str, Any], done: Done) -> Future:
        return self._submit("POST", options, done)

    def delete(self, options: Mapping[str, Any], done: Done) -> Future:
        return self._submit("DELETE", options, done)

    def close(self) -> None:
        """
        Close the transport and release resources.

        Waits for in-flight calls, then closes the session if this transport
        created it. Safe to call multiple times.
        """
        self._pool.close()

    def _submit(self, method: str, options: Mapping[str, Any], done: Done) -> Future:
        merged = merge_options(self._defaults, options)
        return self._pool.submit(self._execute, method, merged, done)

    def _execute(self, method: str, options: Dict[str, Any], done: Done) -> None:
        url = options.get("url")
        ctx = self._telemetry.start_request(f"wsapi.{method.lower()}", method, url or "")
        try:
            response = self._request(method, url, **self._request_kwargs(options))
            body = self._decode(response)
        except Exception as e:
            # Includes requests' own ValueError/TypeError for malformed options
            self._telemetry.record_error(ctx, e)
            done(e, None, None)
            return
        self._telemetry.record_response(ctx, response.status_code)
        done(None, response, body)

    def _request(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        """
        Execute a single HTTP request with timeout management.

        Applies default timeouts based on HTTP method (120s for POST/DELETE, 10s for others)
        unless the call or the transport specifies one.

        :param method: HTTP method (GET, POST, PUT, DELETE).
        :type method: :class:`str`
        :param url: Target URL for the request.
        :type url: :class:`str`
        :param kwargs: Additional arguments passed to ``session.request()``.
        :return: HTTP response object.
        :rtype: :class:`requests.Response`
        :raises requests.exceptions.RequestException: If the request fails.
        """
        if "timeout" not in kwargs:
            if self.default_timeout is not None:
                kwargs["timeout"] = self.default_timeout
            else:
                m = (method or "").lower()
                kwargs["timeout"] = 120 if m in ("post", "delete") else 10
        return self._pool.session.request(method, url, **kwargs)

    @staticmethod
    def _request_kwargs(options: Mapping[str, Any]) -> Dict[str, Any]:
        kwargs: Dict[str, Any] = {k: options[k] for k in _PASSTHROUGH_OPTIONS if k in options}
        if options.get("qs"):
            kwargs["params"] = dict(options["qs"])
        if "json" in options:
            kwargs["json"] = options["json"]
        elif "body" in options:
            body = options["body"]
            if isinstance(body, (dict, list)):
                kwargs["json"] = body
            else:
                kwargs["data"] = body
        return kwargs

    @staticmethod
    def _decode(response: requests.Response) -> Any:
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return response.text
