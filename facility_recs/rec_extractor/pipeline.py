"""End-to-end import of a single document into review records."""
from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .acquire import AcquiredText, acquire_bytes, acquire_text
from .assemble import ExtractedRecord, build_import_response, extract_records

logger = logging.getLogger(__name__)


@dataclass
class ExtractionReport:
    """Records extracted from one document along with acquisition metadata."""

    file: str
    source_type: str
    records: list[ExtractedRecord]
    meta: dict[str, Any] = field(default_factory=dict)

    @property
    def strategy(self) -> str:
        return self.records[0].strategy if self.records else "none"

    def to_response(self) -> dict[str, Any]:
        return build_import_response(self.records)

    def to_dict(self) -> dict[str, Any]:
        return {
            "file": self.file,
            "source_type": self.source_type,
            "strategy": self.strategy,
            "meta": self.meta,
            **self.to_response(),
        }


def build_report(
    acquired: AcquiredText, name: str, *, timestamp_ms: int | None = None
) -> ExtractionReport:
    records = extract_records(acquired.text, timestamp_ms=timestamp_ms)
    logger.info(
        "Extracted %d recommendation(s) from %s using %s",
        len(records),
        name,
        records[0].strategy,
    )
    return ExtractionReport(
        file=str(acquired.meta.get("file", name)),
        source_type=acquired.source_type,
        records=records,
        meta=acquired.meta,
    )


def import_document(
    path: str | Path,
    *,
    min_pdf_chars: int | None = None,
    pdf_backends: Iterable[str] | None = None,
    timestamp_ms: int | None = None,
) -> ExtractionReport:
    acquired = acquire_text(path, min_pdf_chars=min_pdf_chars, pdf_backends=pdf_backends)
    return build_report(acquired, Path(path).name, timestamp_ms=timestamp_ms)


def import_upload(
    data: bytes,
    *,
    filename: str | None = None,
    content_type: str | None = None,
    min_pdf_chars: int | None = None,
    pdf_backends: Iterable[str] | None = None,
    timestamp_ms: int | None = None,
) -> ExtractionReport:
    acquired = acquire_bytes(
        data,
        filename=filename,
        content_type=content_type,
        min_pdf_chars=min_pdf_chars,
        pdf_backends=pdf_backends,
    )
    return build_report(acquired, filename or "upload", timestamp_ms=timestamp_ms)
