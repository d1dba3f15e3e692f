"""Repair recommendation extractor package."""
from __future__ import annotations

from . import acquire, assemble, normalize, parser, pipeline, renderer
from .assemble import ExtractedRecord, extract_records
from .errors import RecExtractError, TextExtractionError, UnsupportedFileTypeError
from .normalize import normalize_priority, normalize_status
from .parser import Candidate, extract_candidates
from .pipeline import ExtractionReport, import_document, import_upload

__all__ = [
    "acquire",
    "assemble",
    "normalize",
    "parser",
    "pipeline",
    "renderer",
    "Candidate",
    "ExtractedRecord",
    "ExtractionReport",
    "RecExtractError",
    "TextExtractionError",
    "UnsupportedFileTypeError",
    "extract_candidates",
    "extract_records",
    "import_document",
    "import_upload",
    "normalize_priority",
    "normalize_status",
]
