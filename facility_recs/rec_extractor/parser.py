"""Heuristic extraction of repair recommendation candidates from document text."""
from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from .normalize import DEFAULT_STATUS, limit_length, normalize_status
from .patterns import (
    ACTION_VERB_RE,
    BULLET_RE,
    LINE_SPLIT_RE,
    LIST_PREFIX_PATTERNS,
    NUMBERED_RE,
    PARAGRAPH_KEYWORD_RE,
    PARAGRAPH_SPLIT_RE,
    REC_NUMBER_RE,
    RECOMMENDATION_HEADERS,
    SECTION_MARKER_RE,
    STATUS_KEYWORD_RE,
)

logger = logging.getLogger(__name__)

MIN_SECTION_CHARS = 10
MIN_TITLE_CHARS = 10
SECTION_TITLE_WORDS = 5
SECTION_TITLE_LENGTH = 60
MAX_TITLE_LENGTH = 200
HEADER_MAX_CHARS = 50
FALLBACK_DESCRIPTION_CHARS = 2000
FALLBACK_TITLE = "Imported from document"


@dataclass(frozen=True)
class SectionMarker:
    """A section code such as ``M35-A`` and where it sits in the text."""

    code: str
    start: int
    end: int


@dataclass
class Candidate:
    """A proposed recommendation awaiting review."""

    title: str
    description: str = ""
    recommendation_number: str | None = None
    area: str | None = None
    status: str = DEFAULT_STATUS
    remarks: str | None = None
    section: str | None = None
    strategy: str = "fallback"
    priority: str | None = None


Strategy = Callable[[str], list[Candidate]]


def squash(value: str) -> str:
    """Collapse whitespace and spreadsheet cell separators into single spaces."""
    return " ".join(value.replace("|", " ").split())


def strip_list_prefix(line: str) -> str:
    stripped = line.strip()
    for pattern in LIST_PREFIX_PATTERNS:
        stripped = pattern.sub("", stripped, count=1)
    return stripped.strip()


def is_list_item(line: str) -> bool:
    return bool(BULLET_RE.match(line) or NUMBERED_RE.match(line))


def find_rec_number(text: str) -> str | None:
    match = REC_NUMBER_RE.search(text)
    return match.group(0) if match else None


def remove_rec_number(text: str) -> str:
    return REC_NUMBER_RE.sub("", text, count=1).strip()


def iter_lines(text: str) -> Iterable[str]:
    for raw_line in LINE_SPLIT_RE.split(text):
        stripped = raw_line.strip()
        if stripped:
            yield stripped


# Section markers


def find_section_markers(text: str) -> list[SectionMarker]:
    return [
        SectionMarker(
            code=f"{match.group('prefix')}-{match.group('suffix')}",
            start=match.start(),
            end=match.end(),
        )
        for match in SECTION_MARKER_RE.finditer(text)
    ]


def split_status(content: str) -> tuple[str, str]:
    """Split trailing status annotation from section content.

    The keyword must be followed only by text on its own line. The rightmost
    such keyword wins; at equal positions the longer keyword wins.
    """
    selected = None
    for match in STATUS_KEYWORD_RE.finditer(content):
        if "\n" in content[match.end():].rstrip():
            continue
        selected = match
    if selected is None:
        return content, ""
    return content[: selected.start()].strip(), content[selected.start():].strip()


def split_area(main_content: str) -> tuple[str, str]:
    match = ACTION_VERB_RE.search(main_content)
    if match is None:
        return "", main_content.strip()
    return main_content[: match.start()].strip(), main_content[match.start():].strip()


def section_title(recommendation: str, area: str, code: str) -> str:
    source = recommendation or area
    title = limit_length(" ".join(source.split()[:SECTION_TITLE_WORDS]), SECTION_TITLE_LENGTH)
    if len(title) < 3:
        return f"{code} Recommendation"
    return title


def build_section_candidate(marker: SectionMarker, section_text: str, content: str) -> Candidate:
    main_content, status_text = split_status(content)
    area, recommendation = split_area(main_content)
    area = squash(area)
    recommendation = squash(recommendation)
    status_text = squash(status_text)
    title = section_title(recommendation, area, marker.code)
    parts = [f"Section: {marker.code}"]
    if area and area != title:
        parts.append(f"Area/Component: {area}")
    if recommendation:
        parts.append(f"Repair Recommendation: {recommendation}")
    if status_text:
        parts.append(f"Status: {status_text}")
    return Candidate(
        title=title,
        description="\n".join(parts),
        recommendation_number=find_rec_number(section_text),
        area=area,
        status=normalize_status(status_text),
        remarks="",
        section=marker.code,
        strategy="sections",
    )


def parse_sections(text: str) -> list[Candidate]:
    markers = find_section_markers(text)
    logger.debug("Found %d section markers", len(markers))
    candidates: list[Candidate] = []
    for index, marker in enumerate(markers):
        end = markers[index + 1].start if index + 1 < len(markers) else len(text)
        content = text[marker.end:end].strip()
        if len(content) < MIN_SECTION_CHARS:
            logger.debug("Skipping section %s: %d characters", marker.code, len(content))
            continue
        section_text = text[marker.start:end]
        candidates.append(build_section_candidate(marker, section_text, content))
    return candidates


# Bulleted recommendations list


def is_recommendations_header(line: str) -> bool:
    upper = line.upper()
    return "REPAIR RECOMMENDATION" in upper or upper in RECOMMENDATION_HEADERS


def looks_like_section_header(line: str) -> bool:
    if len(line) >= HEADER_MAX_CHARS or is_list_item(line):
        return False
    return any(char.isalpha() for char in line) and line == line.upper()


def parse_bulleted(text: str) -> list[Candidate]:
    lines = list(iter_lines(text))
    start = next(
        (index + 1 for index, line in enumerate(lines) if is_recommendations_header(line)),
        None,
    )
    if start is None:
        return []
    candidates: list[Candidate] = []
    for line in lines[start:]:
        if looks_like_section_header(line):
            break
        if not is_list_item(line):
            continue
        title = strip_list_prefix(line)
        rec_number = find_rec_number(title)
        if rec_number:
            title = remove_rec_number(title)
        title = " ".join(title.split())
        if len(title) >= MIN_TITLE_CHARS:
            candidates.append(
                Candidate(
                    title=limit_length(title, MAX_TITLE_LENGTH),
                    recommendation_number=rec_number,
                    strategy="bulleted",
                )
            )
    return candidates


# Paragraphs


def paragraph_qualifies(paragraph: str, first_line: str) -> bool:
    return bool(
        PARAGRAPH_KEYWORD_RE.search(paragraph)
        or REC_NUMBER_RE.search(paragraph)
        or is_list_item(first_line)
    )


def parse_paragraphs(text: str) -> list[Candidate]:
    candidates: list[Candidate] = []
    for raw_paragraph in PARAGRAPH_SPLIT_RE.split(text):
        paragraph = raw_paragraph.strip()
        lines = list(iter_lines(paragraph))
        if not lines:
            continue
        first, rest = lines[0], lines[1:]
        if not paragraph_qualifies(paragraph, first):
            continue
        title = strip_list_prefix(first)
        rec_number = find_rec_number(paragraph)
        if rec_number:
            title = remove_rec_number(title) or title
        title = " ".join(title.split())
        if len(title) < MIN_TITLE_CHARS:
            continue
        candidates.append(
            Candidate(
                title=limit_length(title, MAX_TITLE_LENGTH),
                description=" ".join(rest),
                recommendation_number=rec_number,
                strategy="paragraphs",
            )
        )
    return candidates


# Catch-all


def parse_fallback(text: str) -> list[Candidate]:
    title = next((line for line in iter_lines(text) if len(line) > MIN_TITLE_CHARS), FALLBACK_TITLE)
    return [
        Candidate(
            title=limit_length(title, MAX_TITLE_LENGTH),
            description=text[:FALLBACK_DESCRIPTION_CHARS],
            strategy="fallback",
        )
    ]


STRATEGIES: tuple[tuple[str, Strategy], ...] = (
    ("sections", parse_sections),
    ("bulleted", parse_bulleted),
    ("paragraphs", parse_paragraphs),
)


def extract_candidates(text: str) -> list[Candidate]:
    """Run the strategy chain and return the first non-empty result.

    Falls back to a single catch-all candidate, so the result is never empty.
    """
    for name, strategy in STRATEGIES:
        candidates = strategy(text)
        if candidates:
            logger.debug("Strategy %s produced %d candidates", name, len(candidates))
            return candidates
        logger.debug("Strategy %s produced no candidates", name)
    return parse_fallback(text)
