# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""Internal pandas helpers"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping

import pandas as pd


def strip_metadata_keys(record: Mapping[str, Any]) -> Dict[str, Any]:
    """Remove WSAPI metadata keys (keys starting with ``_``, such as ``_ref``) from a record dict."""
    return {k: v for k, v in record.items() if not k.startswith("_")}


def _flatten_reference(value: Any) -> Any:
    # Nested objects come back as {"_ref": ..., "_refObjectName": ...}
    if isinstance(value, Mapping) and "_ref" in value:
        return value.get("_refObjectName") or value.get("_ref")
    return value


def results_to_dataframe(payload: Mapping[str, Any], keep_metadata: bool = False) -> pd.DataFrame:
    """Convert the ``Results`` of a query payload to a DataFrame.

    :param payload: A query ``Result`` payload.
    :param keep_metadata: When False (default), ``_``-prefixed keys are dropped,
        except ``_ref`` which is kept as the first column when present.
    """
    rows: List[Dict[str, Any]] = []
    for record in payload.get("Results") or []:
        row = dict(record) if keep_metadata else strip_metadata_keys(record)
        row = {k: _flatten_reference(v) for k, v in row.items()}
        if not keep_metadata and "_ref" in record:
            row = {"_ref": record["_ref"], **row}
        rows.append(row)
    return pd.DataFrame(rows)
