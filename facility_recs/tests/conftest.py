from __future__ import annotations

import csv
from collections.abc import Callable
from pathlib import Path

import pytest

INSPECTION_ROWS = [
    ["Section", "Area/Component", "Repair Recommendation", "Status"],
    ["M35-A", "Roof flashing", "Replace damaged flashing around chimney", "Pending"],
    ["M35-B", "Gutters", "Clean debris from north gutters", "Approved"],
]


def _pdf_escape(value: str) -> str:
    return value.replace("\\", "\\\\").replace("(", "\\(").replace(")", "\\)")


def build_pdf(lines: list[str]) -> bytes:
    """Assemble a single-page PDF drawing ``lines`` in Helvetica."""
    operations = ["BT", "/F1 12 Tf", "14 TL", "72 720 Td"]
    for index, line in enumerate(lines):
        if index:
            operations.append("T*")
        operations.append(f"({_pdf_escape(line)}) Tj")
    operations.append("ET")
    content = "\n".join(operations)
    objects = [
        "<< /Type /Catalog /Pages 2 0 R >>",
        "<< /Type /Pages /Kids [3 0 R] /Count 1 >>",
        "<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] /Contents 4 0 R "
        "/Resources << /Font << /F1 5 0 R >> >> >>",
        f"<< /Length {len(content.encode('latin-1'))} >>\nstream\n{content}\nendstream",
        "<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>",
    ]
    output = bytearray(b"%PDF-1.4\n")
    offsets = []
    for number, body in enumerate(objects, start=1):
        offsets.append(len(output))
        output.extend(f"{number} 0 obj\n{body}\nendobj\n".encode("latin-1"))
    xref_offset = len(output)
    output.extend(f"xref\n0 {len(objects) + 1}\n".encode("latin-1"))
    output.extend(b"0000000000 65535 f \n")
    for offset in offsets:
        output.extend(f"{offset:010d} 00000 n \n".encode("latin-1"))
    output.extend(
        (
            f"trailer\n<< /Size {len(objects) + 1} /Root 1 0 R >>\n"
            f"startxref\n{xref_offset}\n%%EOF\n"
        ).encode("latin-1")
    )
    return bytes(output)


@pytest.fixture()
def make_pdf(tmp_path: Path) -> Callable[[str, list[str]], Path]:
    def factory(name: str, lines: list[str]) -> Path:
        path = tmp_path / name
        path.write_bytes(build_pdf(lines))
        return path

    return factory


@pytest.fixture()
def inspection_csv(tmp_path: Path) -> Path:
    path = tmp_path / "inspection.csv"
    with path.open("w", encoding="utf-8", newline="") as fh:
        csv.writer(fh).writerows(INSPECTION_ROWS)
    return path


@pytest.fixture()
def inspection_xlsx(tmp_path: Path) -> Path:
    from openpyxl import Workbook

    workbook = Workbook()
    worksheet = workbook.active
    worksheet.title = "Recommendations"
    for row in INSPECTION_ROWS:
        worksheet.append(row)
    path = tmp_path / "inspection.xlsx"
    workbook.save(path)
    return path
