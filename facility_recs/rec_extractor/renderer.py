"""Rendering utilities for the extraction review summary."""
from __future__ import annotations

from collections import Counter
from collections.abc import Sequence
from datetime import UTC, datetime
from pathlib import Path

from .assemble import ExtractedRecord
from .pipeline import ExtractionReport


def render_review(reports: Sequence[ExtractionReport], output_path: Path | None = None) -> str:
    status_counts: Counter[str] = Counter()
    strategy_counts: Counter[str] = Counter()
    total = 0
    for report in reports:
        strategy_counts[report.strategy] += 1
        for record in report.records:
            status_counts[record.status] += 1
            total += 1
    now = datetime.now(UTC).replace(microsecond=0).isoformat()
    lines = ["# Extracted Repair Recommendations", "", f"_Generated: {now}_", ""]
    lines.append(f"**Documents:** {len(reports)}")
    lines.append("")
    lines.append(f"**Candidates:** {total}")
    lines.append("")
    if status_counts:
        status_summary = ", ".join(
            f"{status} ({count})" for status, count in sorted(status_counts.items())
        )
        lines.append(f"**By status:** {status_summary}")
        lines.append("")
    if strategy_counts:
        strategy_summary = ", ".join(
            f"{strategy} ({count})" for strategy, count in sorted(strategy_counts.items())
        )
        lines.append(f"**By strategy:** {strategy_summary}")
        lines.append("")
    for report in reports:
        lines.append(f"## {escape_cell(report.file)}")
        lines.append("")
        lines.append(f"Source: {report.source_type}, strategy: {report.strategy}")
        lines.append("")
        lines.append("| # | Title | Status | Priority | Rec. Number | Section | Area/Component |")
        lines.append("| --- | --- | --- | --- | --- | --- | --- |")
        for index, record in enumerate(report.records, start=1):
            lines.append(format_record_row(index, record))
        lines.append("")
    content = "\n".join(lines)
    if output_path is not None:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(content, encoding="utf-8")
    return content


def format_record_row(index: int, record: ExtractedRecord) -> str:
    return (
        "| "
        f"{index} | {escape_cell(record.title)} | {record.status} | {record.priority} | "
        f"{record.recommendation_number or ''} | {record.section or ''} | "
        f"{escape_cell(record.area or '')} |"
    )


def escape_cell(value: str) -> str:
    return value.replace("|", "\\|").replace("\n", "<br>")

