from __future__ import annotations

from typing import Optional


class FlashmapError(Exception):
    """Base exception for flashmap errors."""


class FormatError(FlashmapError):
    """Raised when image bytes are malformed or exceed the address space."""

    def __init__(
        self, message: str, offset: Optional[int] = None, line: Optional[int] = None
    ):
        if offset is not None:
            message = f"{message} (at byte offset {offset})"
        super().__init__(message)
        self.offset = offset
        self.line = line


class OverlapError(FlashmapError):
    """Raised when a range overlaps another range of the same image."""

    def __init__(self, message: str, address: Optional[int] = None):
        super().__init__(message)
        self.address = address


class DuplicateKeyError(FlashmapError):
    """Raised when an image key is already present in the store."""
