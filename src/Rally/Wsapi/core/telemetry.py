# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Request logging for the Rally WSAPI client.

Each HTTP call made by the transport is timed and reported through the
standard :mod:`logging` module under the configured logger name.
"""

from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass, field
from typing import Any, Optional

from .config import WsapiConfig


@dataclass
class RequestContext:
    """Context for a single HTTP call."""

    method: str  # GET, POST, PUT, DELETE
    url: str
    operation: str  # e.g. "wsapi.get", "wsapi.put"
    client_request_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    start_time: float = field(default_factory=time.perf_counter)

    @property
    def elapsed_ms(self) -> float:
        return (time.perf_counter() - self.start_time) * 1000


class TelemetryManager:
    """Logs HTTP calls for the WSAPI client.

    This class is internal and not part of the public API.
    """

    def __init__(self, config: Optional[WsapiConfig] = None) -> None:
        self._config = config or WsapiConfig()
        self._logger: Optional[logging.Logger] = None
        if self._config.enable_logging:
            self._logger = logging.getLogger(self._config.logger_name)
            self._logger.setLevel(getattr(logging, self._config.log_level.upper()))

    @property
    def logger(self) -> Optional[logging.Logger]:
        return self._logger

    def start_request(self, operation: str, method: str, url: str) -> RequestContext:
        ctx = RequestContext(method=method.upper(), url=url.split("?", 1)[0], operation=operation)
        if self._logger:
            self._logger.debug(
                f"{ctx.operation} {ctx.method} {ctx.url} started",
                extra={"client_request_id": ctx.client_request_id},
            )
        return ctx

    def record_response(self, ctx: RequestContext, status_code: int) -> None:
        """Log a completed HTTP call; statuses of 400 and above log as warnings."""
        if not self._logger:
            return
        level = logging.WARNING if status_code >= 400 else logging.DEBUG
        self._logger.log(
            level,
            f"{ctx.operation} {ctx.method} {status_code} {ctx.elapsed_ms:.1f}ms",
            extra={"client_request_id": ctx.client_request_id},
        )

    def record_error(self, ctx: RequestContext, error: Any) -> None:
        """Log a failed HTTP call by error type only; messages may embed the query string."""
        if not self._logger:
            return
        self._logger.warning(
            f"{ctx.operation} {ctx.method} {ctx.url} failed after {ctx.elapsed_ms:.1f}ms: {type(error).__name__}",
            extra={"client_request_id": ctx.client_request_id},
        )

    def debug(self, message: str) -> None:
        if self._logger:
            self._logger.debug(message)
