from __future__ import annotations

import pytest

from facility_recs.rec_extractor import parser
from facility_recs.rec_extractor.normalize import STATUSES
from facility_recs.rec_extractor.parser import extract_candidates

INSPECTION_TEXT = """M35-A Roof flashing Replace damaged flashing around chimney 2024-03-0001 Pending
M35-B Gutters Clean debris from north gutters Approved
M35-C Boiler room Inspect relief valve Not Approved
M35 - D Parking lot Seal cracks in asphalt Deferred"""

BULLETED_TEXT = """FACILITY INSPECTION REPORT
Building 12

REPAIR RECOMMENDATIONS
- Replace cracked skylight panel over lobby
• Repair 2024-05-0012 water damaged ceiling tiles
3. Clean condensate drain line
(4) Seal penetrations at roof curb
a) Fix
Notes regarding scheduling follow.
SIGNATURES
- Inspector signed the report here"""

PARAGRAPH_TEXT = """Site visit summary for the annex.

1. Handrail on east stair is loose
Anchor bolts are missing at the landing.

General housekeeping was acceptable.

Item 2023-11-0042 noted in prior report
Carried forward without change."""


def test_single_section_splits_area_recommendation_and_status() -> None:
    candidates = extract_candidates(
        "M35-A Roof flashing Replace damaged flashing around chimney Pending"
    )
    assert len(candidates) == 1
    candidate = candidates[0]
    assert candidate.area == "Roof flashing"
    assert candidate.title.startswith("Replace damaged flashing around chimney")
    assert candidate.status == "pending_approval"
    assert candidate.section == "M35-A"
    assert candidate.strategy == "sections"
    assert candidate.recommendation_number is None
    assert candidate.description.splitlines() == [
        "Section: M35-A",
        "Area/Component: Roof flashing",
        "Repair Recommendation: Replace damaged flashing around chimney",
        "Status: Pending",
    ]


def test_sections_keep_document_order_and_codes() -> None:
    candidates = extract_candidates(INSPECTION_TEXT)
    assert [candidate.section for candidate in candidates] == ["M35-A", "M35-B", "M35-C", "M35-D"]
    assert [candidate.status for candidate in candidates] == [
        "pending_approval",
        "approved",
        "not_approved",
        "deferred",
    ]
    for candidate in candidates:
        assert f"Section: {candidate.section}" in candidate.description.splitlines()
    assert candidates[0].recommendation_number == "2024-03-0001"
    assert candidates[0].title == "Replace damaged flashing around chimney"
    assert candidates[1].title == "Clean debris from north gutters"
    assert candidates[3].area == "Parking lot"
    assert candidates[3].title == "Seal cracks in asphalt"


def test_not_approved_wins_over_earlier_approved() -> None:
    text = "M40-B Fire door Approved hardware kit Replace closer arm Not Approved"
    candidate = extract_candidates(text)[0]
    assert candidate.status == "not_approved"
    assert "Status: Not Approved" in candidate.description
    assert candidate.area == "Fire door Approved hardware kit"
    assert candidate.title == "Replace closer arm"


def test_cannot_approve_in_status_is_not_approved() -> None:
    text = "M5-A Roof Replace shingles Approved by tenant, owner cannot approve budget"
    candidate = extract_candidates(text)[0]
    assert candidate.status == "not_approved"
    assert candidate.title == "Replace shingles"


def test_status_must_close_the_section() -> None:
    text = "M8-C Approved contractor list\nReplace exhaust fan belt in mechanical room"
    candidate = extract_candidates(text)[0]
    assert candidate.status == "pending_approval"
    assert "Status:" not in candidate.description
    assert candidate.area == "Approved contractor list"
    assert candidate.title == "Replace exhaust fan belt in"


def test_first_occurring_action_verb_wins() -> None:
    candidate = extract_candidates("M7-A Exterior wall Seal and then Replace caulking Pending")[0]
    assert candidate.area == "Exterior wall"
    assert candidate.title == "Seal and then Replace caulking"


def test_short_sections_are_skipped() -> None:
    candidates = extract_candidates("M1-A short M1-B Tighten loose bolts on guardrail Pending")
    assert [candidate.section for candidate in candidates] == ["M1-B"]
    assert candidates[0].title == "Tighten loose bolts on guardrail"


def test_long_title_is_truncated() -> None:
    text = (
        "M2-A Roofing Replace extraordinarily-deteriorated weatherproofing "
        "membrane-assemblies everywhere immediately Pending"
    )
    title = extract_candidates(text)[0].title
    assert len(title) == 60
    assert title.endswith("...")
    assert title.startswith("Replace extraordinarily-deteriorated")


def test_section_without_verb_uses_whole_content() -> None:
    candidate = extract_candidates("M3-A Miscellaneous items noted during walkthrough Pending")[0]
    assert candidate.area == ""
    assert candidate.title == "Miscellaneous items noted during walkthrough"
    assert not any(line.startswith("Area/Component") for line in candidate.description.splitlines())


def test_section_with_only_status_gets_fallback_title() -> None:
    candidate = extract_candidates("M4-A Pending review")[0]
    assert candidate.title == "M4-A Recommendation"
    assert candidate.status == "pending_approval"


def test_spreadsheet_separators_are_dropped() -> None:
    text = "M35-A | Roof flashing | Replace damaged flashing around chimney | Pending"
    candidate = extract_candidates(text)[0]
    assert candidate.area == "Roof flashing"
    assert candidate.title == "Replace damaged flashing around chimney"


def test_find_section_markers_normalizes_spacing() -> None:
    markers = parser.find_section_markers("intro M12 - B text M3-C more")
    assert [marker.code for marker in markers] == ["M12-B", "M3-C"]
    assert markers[0].start < markers[1].start


def test_bulleted_section_collects_list_items() -> None:
    candidates = extract_candidates(BULLETED_TEXT)
    assert [candidate.title for candidate in candidates] == [
        "Replace cracked skylight panel over lobby",
        "Repair water damaged ceiling tiles",
        "Clean condensate drain line",
        "Seal penetrations at roof curb",
    ]
    assert candidates[1].recommendation_number == "2024-05-0012"
    assert all(candidate.strategy == "bulleted" for candidate in candidates)


def test_bulleted_requires_header() -> None:
    assert parser.parse_bulleted("- Replace cracked skylight panel over lobby") == []


def test_paragraph_strategy_recommend_sentence() -> None:
    text = "We recommend repairing the east stairwell handrail immediately."
    candidates = extract_candidates(text)
    assert len(candidates) == 1
    assert candidates[0].title == text
    assert candidates[0].strategy == "paragraphs"


def test_paragraph_strategy_numbered_and_numbers() -> None:
    candidates = extract_candidates(PARAGRAPH_TEXT)
    assert [candidate.title for candidate in candidates] == [
        "Handrail on east stair is loose",
        "Item noted in prior report",
    ]
    assert candidates[0].description == "Anchor bolts are missing at the landing."
    assert candidates[1].recommendation_number == "2023-11-0042"
    assert candidates[1].description == "Carried forward without change."


def test_catch_all_uses_first_long_line() -> None:
    text = "Routine walkthrough completed, nothing to report."
    candidates = extract_candidates(text)
    assert len(candidates) == 1
    assert candidates[0].title == text
    assert candidates[0].description == text
    assert candidates[0].strategy == "fallback"


def test_catch_all_placeholder_and_description_limit() -> None:
    text = "ok\n" + "x " * 1500
    candidate = parser.parse_fallback("ok\nfine")[0]
    assert candidate.title == parser.FALLBACK_TITLE
    assert len(parser.parse_fallback(text)[0].description) == 2000


@pytest.mark.parametrize(
    "text",
    [
        "",
        "   ",
        "ok",
        INSPECTION_TEXT,
        BULLETED_TEXT,
        PARAGRAPH_TEXT,
        "M9-Z",
        "Approved Not Approved Pending",
        "REPAIR RECOMMENDATIONS\nNOTHING",
    ],
)
def test_candidates_always_satisfy_invariants(text: str) -> None:
    candidates = extract_candidates(text)
    assert candidates
    for candidate in candidates:
        assert len(candidate.title) >= 3
        assert candidate.status in STATUSES
