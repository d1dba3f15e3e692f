"""Exceptions raised by the recommendation extractor."""
from __future__ import annotations

from typing import Any


class RecExtractError(Exception):
    """Base class for extractor errors."""


class UnsupportedFileTypeError(RecExtractError):
    def __init__(self, name: str) -> None:
        super().__init__(f"Unsupported file type: {name}")
        self.name = name


class TextExtractionError(RecExtractError):
    """No usable text could be recovered from a document."""

    def __init__(self, message: str, meta: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.meta: dict[str, Any] = meta or {}
