"""Utilities shared by pagesmith components."""

from __future__ import annotations

import logging
import os
import threading
import time
from typing import Callable

from ..exceptions import OperationCancelledError

_LOG_LEVEL_ENV = "PAGESMITH_LOG_LEVEL"


def get_logger(name: str) -> logging.Logger:
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        logger.propagate = False
        level = os.getenv(_LOG_LEVEL_ENV)
        if level:
            logger.setLevel(level.strip().upper())
    return logger


def format_file_size(size_bytes: float) -> str:
    """
    Format file size in human-readable format.

    Args:
        size_bytes: File size in bytes

    Returns:
        Formatted string (e.g., "1.5 MB", "500.0 B")
    """
    for unit in ["B", "KB", "MB", "GB", "TB"]:
        if size_bytes < 1024.0:
            return f"{size_bytes:.1f} {unit}"
        size_bytes /= 1024.0
    return f"{size_bytes:.1f} PB"


class CancellationToken:
    """Caller-owned cancellation signal with an optional deadline.

    The engine polls :meth:`raise_if_cancelled` between pages, ranges and
    images. A token may be shared between threads.
    """

    def __init__(
        self,
        timeout: float | None = None,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._event = threading.Event()
        self._clock = clock
        self._deadline = clock() + timeout if timeout is not None else None

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        if self._event.is_set():
            return True
        return self._deadline is not None and self._clock() >= self._deadline

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise OperationCancelledError("Operation was cancelled by the caller")
        if self._deadline is not None and self._clock() >= self._deadline:
            raise OperationCancelledError("Operation exceeded its deadline")


def check_cancelled(token: CancellationToken | None) -> None:
    if token is not None:
        token.raise_if_cancelled()


__all__ = ["get_logger", "format_file_size", "CancellationToken", "check_cancelled"]
