"""
Custom exceptions for pagesmith.

Fatal errors (:class:`DecodeError`, :class:`EncodeError`) abort the whole
operation. :class:`ElementError` describes a single image or page decoration
that failed and was skipped; it is logged by the caller rather than raised to
the user.
"""

from __future__ import annotations


class PageSmithError(Exception):
    """Base exception for all pagesmith errors."""

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.default_message)
        self.message = message or self.default_message

    @property
    def default_message(self) -> str:
        return "An unknown document assembly error occurred."


class DecodeError(PageSmithError):
    """Raised when an input buffer is malformed or unsupported."""

    @property
    def default_message(self) -> str:
        return "Invalid or corrupted document."


class EncodeError(PageSmithError):
    """Raised when an output document cannot be serialized."""

    @property
    def default_message(self) -> str:
        return "Failed to serialize the output document."


class RangeError(PageSmithError):
    """Raised when page range parameters cannot produce any range."""

    @property
    def default_message(self) -> str:
        return "Invalid page range specification."


class ElementError(PageSmithError):
    """Raised when a single image or page element cannot be processed."""

    def __init__(self, message: str = "", *, index: int | None = None) -> None:
        super().__init__(message)
        self.index = index

    @property
    def default_message(self) -> str:
        return "Failed to process document element."


class InvalidOptionsError(PageSmithError, ValueError):
    """Raised when an options struct violates its invariants."""

    @property
    def default_message(self) -> str:
        return "Invalid operation options."


class BuildStateError(PageSmithError):
    """Raised when a builder step is called out of order."""

    @property
    def default_message(self) -> str:
        return "Document builder step called in the wrong state."


class OperationCancelledError(PageSmithError):
    """Raised when a cancellation token fires or its deadline passes."""

    @property
    def default_message(self) -> str:
        return "Operation was cancelled."


__all__ = [
    "PageSmithError",
    "DecodeError",
    "EncodeError",
    "RangeError",
    "ElementError",
    "InvalidOptionsError",
    "BuildStateError",
    "OperationCancelledError",
]
