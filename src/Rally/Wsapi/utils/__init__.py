# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Utilities for the Rally WSAPI client.

This module contains object reference helpers and the pandas adapter.
"""

from .refs import ref_path, type_from_ref

__all__ = ["ref_path", "type_from_ref"]
