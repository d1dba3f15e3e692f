"""Text acquisition from uploaded inspection documents."""
from __future__ import annotations

import csv
import logging
import os
import tempfile
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from bs4 import BeautifulSoup
from docx import Document
from openpyxl import load_workbook

from .errors import TextExtractionError, UnsupportedFileTypeError

logger = logging.getLogger(__name__)

DEFAULT_PDF_BACKENDS = [
    "pypdf",
    "pdfminer",
    "pikepdf+pypdf",
    "pikepdf+pdfminer",
]
DEFAULT_MIN_PDF_CHARS = 200
CELL_SEPARATOR = " | "

SOURCE_TYPES: dict[str, str] = {
    ".pdf": "pdf",
    ".xlsx": "spreadsheet",
    ".xlsm": "spreadsheet",
    ".csv": "csv",
    ".txt": "text",
    ".docx": "docx",
    ".html": "html",
    ".htm": "html",
}

CONTENT_TYPES: dict[str, str] = {
    "application/pdf": ".pdf",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet": ".xlsx",
    "application/vnd.ms-excel.sheet.macroenabled.12": ".xlsm",
    "text/csv": ".csv",
    "text/plain": ".txt",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": ".docx",
    "text/html": ".html",
}


@dataclass
class AcquiredText:
    """Plain text recovered from a document, plus decoder metadata."""

    text: str
    source_type: str
    meta: dict[str, Any] = field(default_factory=dict)


def resolve_pdf_backends(prefer_backends: Iterable[str] | None = None) -> list[str]:
    if prefer_backends:
        order = [backend.strip() for backend in prefer_backends if backend and backend.strip()]
    else:
        env_value = os.environ.get("REC_EXTRACT_PDF_BACKENDS", "")
        order = [backend.strip() for backend in env_value.split(",") if backend.strip()]
    return list(dict.fromkeys(order)) or list(DEFAULT_PDF_BACKENDS)


def resolve_min_pdf_chars(value: int | None = None) -> int:
    if value is not None:
        return max(value, 0)
    env_value = os.environ.get("REC_EXTRACT_MIN_PDF_CHARS")
    if env_value:
        try:
            return max(int(env_value), 0)
        except ValueError:
            logger.debug("Invalid REC_EXTRACT_MIN_PDF_CHARS value: %s", env_value)
    return DEFAULT_MIN_PDF_CHARS


def source_type_for(name: str) -> str:
    suffix = Path(name).suffix.lower()
    try:
        return SOURCE_TYPES[suffix]
    except KeyError:
        raise UnsupportedFileTypeError(name) from None


# PDF


def extract_pdf_text(
    path: str | Path,
    *,
    min_chars: int | None = None,
    prefer_backends: Iterable[str] | None = None,
) -> tuple[str, dict[str, Any]]:
    """Extract PDF text by trying each backend in order.

    Stops at the first backend yielding at least ``min_chars`` characters and
    otherwise keeps the longest text seen. Returns ``""`` when no backend
    produced any text; the metadata records which backend won and why the
    others were passed over.
    """
    pdf_path = Path(path)
    threshold = resolve_min_pdf_chars(min_chars)
    try:
        byte_size = pdf_path.stat().st_size
    except OSError:
        byte_size = 0

    best_text = ""
    best_backend = "none"
    best_repaired = False
    warnings: list[str] = []
    last_error: str | None = None

    with tempfile.TemporaryDirectory(prefix="rec_extract_pdf_") as tmp_dir:
        repaired_path: Path | None = None
        repair_error: str | None = None
        for backend_name in resolve_pdf_backends(prefer_backends):
            repaired = backend_name.startswith("pikepdf+")
            base_backend = backend_name.split("+", 1)[-1]
            target_path = pdf_path
            if repaired:
                if repaired_path is None and repair_error is None:
                    try:
                        repaired_path = _repair_pdf_with_pikepdf(pdf_path, Path(tmp_dir))
                    except Exception as exc:  # pragma: no cover - pikepdf optional
                        repair_error = str(exc)
                        logger.debug("pikepdf repair failed for %s: %s", pdf_path, exc)
                if repaired_path is None:
                    last_error = repair_error
                    warnings.append(f"{backend_name}: pikepdf repair failed: {repair_error}")
                    continue
                target_path = repaired_path

            try:
                text = _extract_with_backend(base_backend, target_path, warnings)
            except Exception as exc:
                last_error = str(exc)
                warnings.append(f"{backend_name}: {exc}")
                logger.debug("PDF backend %s failed for %s: %s", backend_name, pdf_path, exc)
                continue

            if not text.strip():
                warnings.append(f"{backend_name}: extracted text empty")
                continue
            if len(text) > len(best_text):
                best_text, best_backend, best_repaired = text, backend_name, repaired
            if len(text) >= threshold:
                break
            warnings.append(
                f"{backend_name}: extracted text shorter than min_chars ({len(text)} < {threshold})"
            )

    meta: dict[str, Any] = {
        "backend": best_backend,
        "bytes": byte_size,
        "chars": len(best_text),
        "warnings": list(dict.fromkeys(warnings)),
        "repaired": best_repaired,
        "error": None if best_text else last_error,
    }
    if not best_text and not last_error:
        meta["warnings"].append("no backend produced text")
    return best_text, meta


def _extract_with_backend(backend: str, path: Path, warnings: list[str]) -> str:
    if backend == "pypdf":
        return _extract_with_pypdf(path, warnings)
    if backend == "pdfminer":
        return _extract_with_pdfminer(path)
    raise RuntimeError(f"unknown backend: {backend}")


def _extract_with_pypdf(path: Path, warnings: list[str]) -> str:
    try:
        from pypdf import PdfReader
    except ImportError as exc:  # pragma: no cover - optional dependency
        raise RuntimeError("pypdf is not installed") from exc

    # The page tree is read lazily, so a broken /Kids only surfaces here.
    try:
        reader = PdfReader(str(path))
        page_list = list(reader.pages)
    except Exception as exc:
        raise RuntimeError(str(exc)) from exc

    pages: list[str] = []
    for page_number, page in enumerate(page_list, start=1):
        try:
            pages.append(page.extract_text() or "")
        except Exception as exc:  # pragma: no cover - depends on document
            warnings.append(f"pypdf: page {page_number}: {exc}")
    return "\n".join(pages)


def _extract_with_pdfminer(path: Path) -> str:
    try:
        from pdfminer.high_level import extract_text
    except ImportError as exc:  # pragma: no cover - optional dependency
        raise RuntimeError("pdfminer.six is not installed") from exc

    try:
        return extract_text(str(path)) or ""
    except Exception as exc:  # pragma: no cover - upstream errors vary
        raise RuntimeError(str(exc)) from exc


def _repair_pdf_with_pikepdf(source: Path, temp_dir: Path) -> Path:
    try:
        from pikepdf import Pdf
    except ImportError as exc:  # pragma: no cover - optional dependency
        raise RuntimeError("pikepdf is not installed") from exc

    repaired_path = temp_dir / "repaired.pdf"
    try:
        with Pdf.open(str(source)) as pdf:
            pdf.save(str(repaired_path))
    except Exception as exc:  # pragma: no cover - upstream errors vary
        raise RuntimeError(str(exc)) from exc
    return repaired_path


# Spreadsheets and tables


def join_cells(values: Iterable[Any]) -> str:
    cells = ["" if value is None else str(value).strip() for value in values]
    while cells and not cells[-1]:
        cells.pop()
    return CELL_SEPARATOR.join(cells)


def extract_spreadsheet_text(path: str | Path) -> str:
    """Flatten every worksheet into one line per non-empty row."""
    workbook = load_workbook(str(path), read_only=True, data_only=True)
    try:
        sheets: list[str] = []
        for worksheet in workbook.worksheets:
            rows = [join_cells(row) for row in worksheet.iter_rows(values_only=True)]
            content = "\n".join(row for row in rows if row.strip(" |"))
            if content:
                sheets.append(content)
    finally:
        workbook.close()
    return "\n\n".join(sheets)


def extract_csv_text(path: str | Path) -> str:
    with Path(path).open("r", encoding="utf-8-sig", errors="ignore", newline="") as fh:
        rows = [join_cells(row) for row in csv.reader(fh)]
    return "\n".join(row for row in rows if row.strip(" |"))


# Word processing and markup


def extract_docx_text(path: str | Path) -> str:
    document = Document(str(path))
    lines = [paragraph.text for paragraph in document.paragraphs]
    for table in document.tables:
        for row in table.rows:
            lines.append(join_cells(cell.text for cell in row.cells))
    return "\n".join(lines)


def extract_html_text(text: str) -> str:
    soup = BeautifulSoup(text, "lxml")
    for tag in soup(["script", "style"]):
        tag.decompose()
    return soup.get_text("\n", strip=True)


def read_plain_text(path: str | Path) -> str:
    raw = Path(path).read_bytes()
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError:
        return raw.decode("latin-1", errors="ignore")


def acquire_text(
    path: str | Path,
    *,
    min_pdf_chars: int | None = None,
    pdf_backends: Iterable[str] | None = None,
) -> AcquiredText:
    """Recover plain text from ``path`` or raise :class:`TextExtractionError`."""
    file_path = Path(path)
    source_type = source_type_for(file_path.name)
    meta: dict[str, Any] = {"file": file_path.name}
    try:
        if source_type == "pdf":
            text, pdf_meta = extract_pdf_text(
                file_path, min_chars=min_pdf_chars, prefer_backends=pdf_backends
            )
            meta.update(pdf_meta)
        elif source_type == "spreadsheet":
            text = extract_spreadsheet_text(file_path)
        elif source_type == "csv":
            text = extract_csv_text(file_path)
        elif source_type == "docx":
            text = extract_docx_text(file_path)
        elif source_type == "html":
            text = extract_html_text(read_plain_text(file_path))
        else:
            text = read_plain_text(file_path)
    except OSError as exc:
        raise TextExtractionError(f"Failed to read {file_path.name}: {exc}", meta) from exc
    except Exception as exc:
        logger.debug("Decoder failed for %s", file_path, exc_info=True)
        meta["error"] = str(exc)
        raise TextExtractionError(f"Failed to decode {file_path.name}: {exc}", meta) from exc

    meta.setdefault("chars", len(text))
    if not text.strip():
        raise TextExtractionError(f"No text could be extracted from {file_path.name}", meta)
    logger.debug("Acquired %d characters from %s (%s)", len(text), file_path.name, source_type)
    return AcquiredText(text=text, source_type=source_type, meta=meta)


def acquire_bytes(
    data: bytes,
    *,
    filename: str | None = None,
    content_type: str | None = None,
    min_pdf_chars: int | None = None,
    pdf_backends: Iterable[str] | None = None,
) -> AcquiredText:
    """Recover text from an upload body identified by name or MIME type."""
    suffix = Path(filename).suffix.lower() if filename else ""
    if suffix not in SOURCE_TYPES and content_type:
        suffix = CONTENT_TYPES.get(content_type.split(";", 1)[0].strip().lower(), suffix)
    if suffix not in SOURCE_TYPES:
        raise UnsupportedFileTypeError(filename or content_type or "<unknown>")
    with tempfile.TemporaryDirectory(prefix="rec_extract_upload_") as tmp_dir:
        upload_path = Path(tmp_dir) / f"upload{suffix}"
        upload_path.write_bytes(data)
        acquired = acquire_text(
            upload_path, min_pdf_chars=min_pdf_chars, pdf_backends=pdf_backends
        )
    acquired.meta["file"] = filename or upload_path.name
    return acquired
