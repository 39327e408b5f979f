"""Content rules shared by both builders.

Omission rules for people lines, the narrative-vs-blocks exclusion and the
signature/footer content live here so the two renderings cannot drift apart.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from datetime import date

from eventreport_gen.models.report import ChiefGuest, EventReport, FacultyCoordinator, StudentCoordinator

IMAGE_PLACEHOLDER = "[Image could not be loaded]"
RULE_TEXT = "_" * 48
RULE_COLOR = "d1d5db"


def render_narrative(report: EventReport) -> bool:
    """Narrative text only appears in documents without content blocks."""
    return bool(report.generated_content) and not report.content_blocks


def faculty_line(c: FacultyCoordinator) -> str:
    s = c.name
    if c.designation:
        s += f", {c.designation}"
    if c.email:
        s += f" ({c.email})"
    return s


def student_line(c: StudentCoordinator) -> str:
    s = c.name
    if c.roll_no:
        s += f" ({c.roll_no})"
    if c.contact:
        s += f" - {c.contact}"
    return s


def guest_line(g: ChiefGuest) -> str:
    return ", ".join(x for x in (g.name, g.designation, g.affiliation) if x)


def named(items):
    """Entries without a name are not rendered."""
    return [x for x in items if x.name]


def format_long_date(d: date) -> str:
    return f"{d:%A}, {d.day:02d} {d:%B} {d.year}"


def format_short_date(d: date) -> str:
    return f"{d.day:02d} {d:%B} {d.year}"


def date_range(start: date, end: date | None, fmt: Callable[[date], str], sep: str) -> str:
    if end is not None and end != start:
        return f"{fmt(start)}{sep}{fmt(end)}"
    return fmt(start)


def signature_columns(report: EventReport) -> list[tuple[str, str]]:
    first = named(report.faculty_coordinators)
    return [
        ("Event Coordinator", first[0].name if first else ""),
        ("Head of Department", report.organized_by or "Department"),
    ]


def non_blank_lines(text: str) -> list[str]:
    return [line.strip() for line in text.split("\n") if line.strip()]


_NON_ALNUM_RE = re.compile(r"[^a-z0-9]+", re.IGNORECASE)


def sanitize_title(title: str) -> str:
    return _NON_ALNUM_RE.sub("_", title).lower()


def format_kb(size: int) -> str:
    return f"{size / 1024:.1f}KB"
