"""Assembly of reviewed-ready records from extraction candidates."""
from __future__ import annotations

import time
from collections.abc import Iterable, Sequence
from dataclasses import asdict, dataclass
from typing import Any

from .normalize import normalize_priority, normalize_status
from .parser import Candidate, extract_candidates


@dataclass
class ExtractedRecord:
    id: str
    title: str
    description: str
    priority: str
    status: str
    due_date: str | None = None
    inspection_date: str | None = None
    recommendation_number: str | None = None
    area: str | None = None
    remarks: str | None = None
    section: str | None = None
    strategy: str = "fallback"

    def to_dict(self) -> dict[str, object]:
        data = asdict(self)
        if self.recommendation_number is None:
            data.pop("recommendation_number")
        return data


def now_ms() -> int:
    return int(time.time() * 1000)


def synthetic_id(timestamp_ms: int, index: int) -> str:
    """Build a list key for a candidate; never used as a persisted identifier."""
    return f"temp-{timestamp_ms}-{index}"


def assemble_record(candidate: Candidate, timestamp_ms: int, index: int) -> ExtractedRecord:
    return ExtractedRecord(
        id=synthetic_id(timestamp_ms, index),
        title=candidate.title,
        description=candidate.description or "",
        priority=normalize_priority(candidate.priority),
        status=normalize_status(candidate.status),
        recommendation_number=candidate.recommendation_number,
        area=candidate.area,
        remarks=candidate.remarks,
        section=candidate.section,
        strategy=candidate.strategy,
    )


def assemble_records(
    candidates: Iterable[Candidate], *, timestamp_ms: int | None = None
) -> list[ExtractedRecord]:
    stamp = now_ms() if timestamp_ms is None else timestamp_ms
    return [
        assemble_record(candidate, stamp, index)
        for index, candidate in enumerate(candidates)
    ]


def extract_records(text: str, *, timestamp_ms: int | None = None) -> list[ExtractedRecord]:
    return assemble_records(extract_candidates(text), timestamp_ms=timestamp_ms)


def build_import_response(records: Sequence[ExtractedRecord]) -> dict[str, Any]:
    return {
        "success": True,
        "imported": len(records),
        "records": [record.to_dict() for record in records],
    }
