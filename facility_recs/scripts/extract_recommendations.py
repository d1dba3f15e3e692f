#!/usr/bin/env python3
"""CLI entrypoint for the repair recommendation extractor."""
from __future__ import annotations

import argparse
import json
import logging
import sys
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from facility_recs.rec_extractor import acquire, pipeline, renderer
from facility_recs.rec_extractor.errors import RecExtractError
from facility_recs.rec_extractor.pipeline import ExtractionReport

logger = logging.getLogger("facility_recs.rec_extractor.cli")


def configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="[%(levelname)s] %(message)s",
    )


def resolve_inputs(values: Iterable[str]) -> list[Path]:
    paths = []
    for value in values:
        path = Path(value).expanduser().resolve()
        if not path.is_file():
            raise SystemExit(f"Input file not found: {path}")
        paths.append(path)
    return paths


def run_imports(args: argparse.Namespace) -> tuple[list[ExtractionReport], int]:
    pdf_backends = parse_backend_list(getattr(args, "pdf_backends", None))
    reports: list[ExtractionReport] = []
    failures = 0
    for path in resolve_inputs(args.files):
        try:
            reports.append(
                pipeline.import_document(
                    path,
                    min_pdf_chars=args.min_pdf_chars,
                    pdf_backends=pdf_backends,
                )
            )
        except RecExtractError as exc:
            failures += 1
            logger.error("%s: %s", path.name, exc)
    return reports, failures


def command_extract(args: argparse.Namespace) -> int:
    reports, failures = run_imports(args)
    if args.format == "jsonl":
        lines = [json.dumps(report.to_dict(), ensure_ascii=False) for report in reports]
        emit("\n".join(lines) + ("\n" if lines else ""), args.output)
    elif len(reports) == 1 and not failures:
        emit(json.dumps(reports[0].to_response(), indent=2, ensure_ascii=False) + "\n", args.output)
    else:
        payload = [report.to_dict() for report in reports]
        emit(json.dumps(payload, indent=2, ensure_ascii=False) + "\n", args.output)
    return 1 if failures else 0


def command_text(args: argparse.Namespace) -> int:
    path = resolve_inputs([args.file])[0]
    pdf_backends = parse_backend_list(getattr(args, "pdf_backends", None))
    try:
        acquired = acquire.acquire_text(
            path, min_pdf_chars=args.min_pdf_chars, pdf_backends=pdf_backends
        )
    except RecExtractError as exc:
        logger.error("%s: %s", path.name, exc)
        return 1
    logger.debug("Metadata: %s", acquired.meta)
    emit(acquired.text, args.output)
    return 0


def command_render(args: argparse.Namespace) -> int:
    reports, failures = run_imports(args)
    output_path = Path(args.output).expanduser().resolve() if args.output else None
    content = renderer.render_review(reports, output_path)
    if output_path is None:
        sys.stdout.write(content + "\n")
    else:
        logger.info("Review written to %s (%d characters)", output_path, len(content))
    return 1 if failures else 0


def command_check(args: argparse.Namespace) -> int:
    pdf_backends = parse_backend_list(getattr(args, "pdf_backends", None))
    rows: list[tuple[str, str, str, str, str, str]] = []
    failures = 0
    for path in resolve_inputs(args.files):
        try:
            report = pipeline.import_document(
                path, min_pdf_chars=args.min_pdf_chars, pdf_backends=pdf_backends
            )
        except RecExtractError as exc:
            failures += 1
            meta: dict[str, Any] = getattr(exc, "meta", {}) or {}
            backend = str(meta.get("backend", "-"))
            rows.append((path.name, "error", backend, str(meta.get("chars", 0)), "-", "-"))
            logger.debug("%s: %s", path.name, exc)
            continue
        rows.append(
            (
                path.name,
                report.source_type,
                str(report.meta.get("backend", "-")),
                str(report.meta.get("chars", 0)),
                str(len(report.records)),
                report.strategy,
            )
        )
    print_status_table(rows)
    return 1 if failures else 0


def emit(content: str, output: str | None) -> None:
    if not output:
        sys.stdout.write(content)
        return
    path = Path(output).expanduser().resolve()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    logger.info("Wrote %s", path)


def print_status_table(rows: list[tuple[str, str, str, str, str, str]]) -> None:
    print(
        "File".ljust(40),
        "Source".ljust(12),
        "Backend".ljust(18),
        "Chars".ljust(8),
        "Records".ljust(8),
        "Strategy",
    )
    print("-" * 100)
    for name, source, backend, chars, count, strategy in rows:
        print(
            name.ljust(40),
            source.ljust(12),
            backend.ljust(18),
            chars.ljust(8),
            count.ljust(8),
            strategy,
        )


def parse_backend_list(value: str | None) -> list[str] | None:
    if not value:
        return None
    parts = [entry.strip() for entry in value.split(",") if entry.strip()]
    return parts or None


def add_decoder_options(parser_obj: argparse.ArgumentParser) -> None:
    parser_obj.add_argument(
        "--pdf-backends",
        help="Comma-separated PDF extraction backend order (overrides REC_EXTRACT_PDF_BACKENDS)",
    )
    parser_obj.add_argument(
        "--min-pdf-chars",
        type=int,
        help="Characters a PDF backend must yield to stop the cascade "
        "(overrides REC_EXTRACT_MIN_PDF_CHARS)",
    )


def build_parser() -> argparse.ArgumentParser:
    parser_obj = argparse.ArgumentParser(description="Extract repair recommendations from documents")
    parser_obj.add_argument("--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser_obj.add_subparsers(dest="command")

    extract_parser = subparsers.add_parser("extract", help="Extract candidate records as JSON")
    extract_parser.add_argument("files", nargs="+", help="PDF, Excel, CSV, DOCX, HTML or text files")
    extract_parser.add_argument("--output", help="Write output to this path instead of stdout")
    extract_parser.add_argument("--format", choices=["json", "jsonl"], default="json")
    add_decoder_options(extract_parser)
    extract_parser.set_defaults(func=command_extract)

    text_parser = subparsers.add_parser("text", help="Print the text recovered from a document")
    text_parser.add_argument("file")
    text_parser.add_argument("--output", help="Write output to this path instead of stdout")
    add_decoder_options(text_parser)
    text_parser.set_defaults(func=command_text)

    render_parser = subparsers.add_parser("render", help="Render a Markdown review table")
    render_parser.add_argument("files", nargs="+")
    render_parser.add_argument("--output", help="Write the review to this path instead of stdout")
    add_decoder_options(render_parser)
    render_parser.set_defaults(func=command_render)

    check_parser = subparsers.add_parser("check", help="Dry-run status table per document")
    check_parser.add_argument("files", nargs="+")
    add_decoder_options(check_parser)
    check_parser.set_defaults(func=command_check)

    return parser_obj


def main(argv: list[str] | None = None) -> int:
    parser_obj = build_parser()
    args = parser_obj.parse_args(argv)
    if not getattr(args, "command", None):
        parser_obj.print_help()
        return 0
    configure_logging(args.verbose)
    return int(args.func(args))


if __name__ == "__main__":
    sys.exit(main())
