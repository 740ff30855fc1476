# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Common constants for the Rally WSAPI client.

This module contains wire names and paths shared across the client.
"""

__all__ = []
