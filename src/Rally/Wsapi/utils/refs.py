# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""Helpers for WSAPI object references (``_ref`` values)."""

from __future__ import annotations

import re
from typing import Any, Mapping, Union

from ..core._error_codes import VALIDATION_REF_EMPTY
from ..core.errors import ValidationError

# ".../slm/webservice/v2.0/defect/1234" -> "/defect/1234"
_WSAPI_REF_RE = re.compile(r"/slm/webservice/[^/]+(/.*)$")

Ref = Union[str, Mapping[str, Any]]


def ref_path(ref: Ref) -> str:
    """
    Return the path of a reference relative to the WSAPI endpoint.

    Accepts a full ref URL, a relative ref (``"/defect/1234"`` or
    ``"defect/1234"``) or an object carrying a ``_ref`` key. Any query string
    is dropped.

    :raises ~Rally.Wsapi.core.errors.ValidationError: If the reference is empty.
    """
    if isinstance(ref, Mapping):
        ref = ref.get("_ref") or ""
    value = (ref or "").strip().split("?", 1)[0].rstrip("/")
    if not value:
        raise ValidationError("ref is required.", subcode=VALIDATION_REF_EMPTY)
    m = _WSAPI_REF_RE.search(value)
    if m:
        return m.group(1)
    return value if value.startswith("/") else f"/{value}"


def type_from_ref(ref: Ref) -> str:
    """
    Return the object type of a reference.

    ``"/defect/1234"`` gives ``"defect"`` and ``"/portfolioitem/feature/1234"``
    gives ``"portfolioitem/feature"``.
    """
    segments = ref_path(ref).lstrip("/").split("/")
    return "/".join(segments[:-1]) if len(segments) > 1 else segments[0]
