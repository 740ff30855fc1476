# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

from __future__ import annotations

import dataclasses
from concurrent.futures import Future
from typing import Any, Callable, Dict, Iterable, Mapping, Optional, Union

from .common.constants import HEADER_API_KEY
from .core._http import merge_options
from .core.config import WsapiConfig
from .request import Callback, Request
from .utils._pandas import results_to_dataframe
from .utils.refs import Ref, ref_path, type_from_ref

Fetch = Union[bool, str, Iterable[str], None]


def _fetch_param(fetch: Fetch) -> Optional[str]:
    if fetch is None:
        return None
    if fetch is True or fetch is False:
        return "true" if fetch else "false"
    if isinstance(fetch, str):
        return fetch
    return ",".join(fetch)


def _query_string(**params: Any) -> Dict[str, Any]:
    return {k: v for k, v in params.items() if v is not None}


class RallyClient:
    """
    High-level client for the Rally Web Services API.

    Wraps a :class:`~Rally.Wsapi.request.Request` configured with API key
    authentication and integration headers, and adds record helpers on top of
    its four verbs. Every helper returns a :class:`concurrent.futures.Future`
    and also accepts an optional ``callback(errors, result)``.

    **Context Manager Support (Recommended)**::

        with RallyClient(api_key="_abc123") as client:
            created = client.create("defect", {"Name": "Login fails"}).result()
            ref = created["Object"]["_ref"]
            client.update(ref, {"State": "Open"}).result()
            client.delete(ref).result()
        # Worker threads and HTTP session released

    :param server: Rally server, for example ``"https://rally1.rallydev.com"``.
        Overrides ``config.server``.
    :type server: :class:`str` or None
    :param api_key: Rally API key. Overrides ``config.api_key``.
    :type api_key: :class:`str` or None
    :param config: Optional configuration. If not provided, it is loaded from
        :meth:`~Rally.Wsapi.core.config.WsapiConfig.from_env`.
    :type config: ~Rally.Wsapi.core.config.WsapiConfig or None
    :param transport: Optional transport passed to the underlying request client.

    .. note::
        The underlying request client is created lazily on first use.
    """

    def __init__(
        self,
        server: Optional[str] = None,
        api_key: Optional[str] = None,
        config: Optional[WsapiConfig] = None,
        transport: Optional[Any] = None,
    ) -> None:
        base = config or WsapiConfig.from_env()
        overrides: Dict[str, Any] = {}
        if server:
            overrides["server"] = server
        if api_key:
            overrides["api_key"] = api_key
        self._config = dataclasses.replace(base, **overrides) if overrides else base
        self._transport = transport
        self._request: Optional[Request] = None

    def __enter__(self) -> "RallyClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def close(self) -> None:
        """Close the underlying request client. Safe to call multiple times."""
        if self._request is not None:
            self._request.close()
            self._request = None

    @property
    def config(self) -> WsapiConfig:
        return self._config

    @property
    def request(self) -> Request:
        """The lazily-created :class:`~Rally.Wsapi.request.Request`."""
        if self._request is None:
            headers = self._config.integration_headers()
            if self._config.api_key:
                headers[HEADER_API_KEY] = self._config.api_key
            request_options = merge_options({"headers": headers}, self._config.request_options)
            self._request = Request(
                dataclasses.replace(self._config, request_options=request_options),
                transport=self._transport,
            )
        return self._request

    # ------------------------------- records -------------------------------

    def create(
        self, type: str, data: Mapping[str, Any], fetch: Fetch = None, callback: Optional[Callback] = None
    ) -> Future:
        """
        Create an object of ``type`` (e.g. ``"defect"``).

        The future resolves with the ``OperationResult`` payload; the new
        object is under ``Object``.
        """
        type_path = ref_path(type)
        return self.request.post(
            {
                "url": f"{type_path}/create",
                "json": {type_path.rsplit("/", 1)[-1]: dict(data)},
                "qs": _query_string(fetch=_fetch_param(fetch)),
            },
            callback,
        )

    def get(self, ref: Ref, fetch: Fetch = None, callback: Optional[Callback] = None) -> Future:
        """Read the object at ``ref``; the payload is the ``Result`` envelope content."""
        return self.request.get(
            {"url": ref_path(ref), "qs": _query_string(fetch=_fetch_param(fetch))},
            callback,
        )

    def update(
        self, ref: Ref, data: Mapping[str, Any], fetch: Fetch = None, callback: Optional[Callback] = None
    ) -> Future:
        """Update the object at ``ref`` with the fields in ``data``."""
        object_type = type_from_ref(ref).rsplit("/", 1)[-1]
        return self.request.post(
            {
                "url": ref_path(ref),
                "json": {object_type: dict(data)},
                "qs": _query_string(fetch=_fetch_param(fetch)),
            },
            callback,
        )

    def delete(self, ref: Ref, callback: Optional[Callback] = None) -> Future:
        """Delete the object at ``ref``."""
        return self.request.delete({"url": ref_path(ref)}, callback)

    def query(
        self,
        type: str,
        query: Optional[str] = None,
        fetch: Fetch = None,
        order: Optional[str] = None,
        callback: Optional[Callback] = None,
        **params: Any,
    ) -> Future:
        """
        Query objects of ``type``.

        :param query: WSAPI query expression, e.g. ``'(State = "Open")'``.
        :param fetch: Fields to fetch: ``True``, a comma-separated string or a list.
        :param order: Sort expression, e.g. ``"CreationDate DESC"``.
        :param params: Additional query-string parameters (``pagesize``,
            ``start``, ``workspace``, ``project``, ...).
        :return: Future of the ``Result`` payload, with matches under ``Results``.
        """
        qs = _query_string(query=query, fetch=_fetch_param(fetch), order=order, **params)
        return self.request.get({"url": ref_path(type), "qs": qs}, callback)

    def query_dataframe(self, type: str, **kwargs: Any) -> Future:
        """Run :meth:`query` and resolve with its ``Results`` as a :class:`pandas.DataFrame`."""
        return _then(self.query(type, **kwargs), results_to_dataframe)


def _then(source: Future, fn: Callable[[Any], Any]) -> Future:
    """Return a future resolving with ``fn(result)`` once ``source`` succeeds."""
    target: Future = Future()

    def _done(f: Future) -> None:
        error = f.exception()
        if error is not None:
            target.set_exception(error)
            return
        try:
            target.set_result(fn(f.result()))
        except Exception as e:
            target.set_exception(e)

    source.add_done_callback(_done)
    return target


__all__ = ["RallyClient"]
