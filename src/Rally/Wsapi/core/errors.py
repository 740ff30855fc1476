# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Structured errors for the Rally WSAPI client.

:class:`RequestError` is what every failed call rejects its future with. Its
:attr:`~RequestError.errors` attribute holds the exact error list delivered to
callbacks: the envelope's ``Errors`` sequence for service failures, or a
single-element list wrapping the transport failure.
"""

from __future__ import annotations

import datetime as _dt
from typing import Any, Dict, List, Optional

from ._error_codes import REQUEST_SERVICE_ERRORS, REQUEST_TRANSPORT_FAILED


class WsapiError(Exception):
    """Base structured error for the Rally WSAPI client."""

    def __init__(
        self,
        message: str,
        *,
        code: str,
        subcode: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
        source: Optional[str] = None,
        is_transient: bool = False,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.subcode = subcode
        self.status_code = status_code
        self.details = details or {}
        self.source = source or "client"
        self.is_transient = is_transient
        self.timestamp = _dt.datetime.now(_dt.timezone.utc).isoformat()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "message": self.message,
            "code": self.code,
            "subcode": self.subcode,
            "status_code": self.status_code,
            "details": self.details,
            "source": self.source,
            "is_transient": self.is_transient,
            "timestamp": self.timestamp,
        }

    def __repr__(self) -> str:  # pragma: no cover
        return f"{self.__class__.__name__}(code={self.code!r}, subcode={self.subcode!r}, message={self.message!r})"


class ValidationError(WsapiError):
    def __init__(self, message: str, *, subcode: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="validation_error", subcode=subcode, details=details, source="client")


class HttpError(WsapiError):
    """An HTTP response that did not carry a WSAPI envelope."""

    def __init__(
        self,
        message: str,
        status_code: int,
        is_transient: bool = False,
        subcode: Optional[str] = None,
        body_excerpt: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        d = details or {}
        if body_excerpt is not None:
            d["body_excerpt"] = body_excerpt
        super().__init__(
            message,
            code="http_error",
            subcode=subcode,
            status_code=status_code,
            details=d,
            source="server",
            is_transient=is_transient,
        )


class RequestError(WsapiError):
    """
    A failed WSAPI call.

    :param errors: The error list, passed through verbatim (never copied).
    :type errors: :class:`list`
    :param warnings: Envelope warnings accompanying the failure, if any.
    :type warnings: :class:`list` or None
    """

    def __init__(
        self,
        errors: List[Any],
        *,
        warnings: Optional[List[Any]] = None,
        subcode: Optional[str] = None,
        status_code: Optional[int] = None,
    ) -> None:
        message = "; ".join(str(e) for e in errors) or "Request failed"
        super().__init__(
            message,
            code="request_error",
            subcode=subcode or REQUEST_SERVICE_ERRORS,
            status_code=status_code,
            details={"errors": [str(e) for e in errors]},
            source="client" if subcode == REQUEST_TRANSPORT_FAILED else "server",
            is_transient=any(getattr(e, "is_transient", False) for e in errors),
        )
        self.errors = errors
        self.warnings = warnings or []


__all__ = ["WsapiError", "HttpError", "ValidationError", "RequestError"]
