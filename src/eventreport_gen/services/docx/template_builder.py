from __future__ import annotations

import logging
from datetime import date

from eventreport_gen.config import Settings, settings
from eventreport_gen.errors import ResourceLoadError
from eventreport_gen.models.logos import LogoRegistry
from eventreport_gen.models.report import EventReport
from eventreport_gen.services.docx.blocks import BlockRenderer
from eventreport_gen.services.docx.rules import (
    date_range,
    faculty_line,
    format_long_date,
    guest_line,
    named,
    render_narrative,
    signature_columns,
    student_line,
)
from eventreport_gen.services.docx.style import TEMPLATE_STYLE, RunStyle
from eventreport_gen.services.docx.types import (
    Alignment,
    Block,
    DocumentNode,
    PageSetup,
    ParagraphNode,
    Run,
    TableCellNode,
    TableNode,
    TableRowNode,
    TextRun,
)
from eventreport_gen.services.resources.loader import ResourceLoader

logger = logging.getLogger(__name__)

LOGO_PX = 120
ATTENDANCE_PX = (500, 600)
NOT_SPECIFIED = "Not specified"

_TITLE = RunStyle(size=22, color="1f2937", bold=True)
_SECTION = RunStyle(size=24, color="1f2937", bold=True)
_BODY = RunStyle(size=22, color="374151")
_LABEL = RunStyle(size=22, color="374151", bold=True)
_ENTRY = RunStyle(size=20, color="4b5563")
_CELL = RunStyle()
_CELL_LABEL = RunStyle(bold=True)
_MUTED_ITALIC = RunStyle(size=18, color="6b7280", italic=True)


def _heading(text: str, run_style: RunStyle = _SECTION, *, before: int = 400, after: int = 200) -> ParagraphNode:
    return ParagraphNode(
        runs=[run_style.run(text)],
        space_before=before,
        space_after=after,
        style="Heading 1",
    )


def _centered(run: Run, *, before: int = 0, after: int = 0) -> ParagraphNode:
    return ParagraphNode(runs=[run], alignment=Alignment.CENTER, space_before=before, space_after=after)


class TemplateBuilder:
    """Conservative rendering used for both summary and full documents.

    Section order: logos, institution header, title, metadata table, people,
    event details, executive summary, special mentions, attendance, signatures,
    footer.
    """

    style = TEMPLATE_STYLE

    def __init__(
        self,
        loader: ResourceLoader,
        *,
        registry: LogoRegistry | None = None,
        cfg: Settings = settings,
        today: date | None = None,
    ) -> None:
        self.loader = loader
        self.registry = registry if registry is not None else LogoRegistry()
        self.cfg = cfg
        self.today = today
        self.blocks = BlockRenderer(self.style, loader)

    async def build(self, report: EventReport) -> DocumentNode:
        children: list[Block] = []
        children.extend(await self._logos(report))
        children.extend(self._header(report))
        children.append(self._metadata_table(report))
        children.extend(self._people(report))

        if report.content_blocks:
            children.append(_heading("EVENT DETAILS", _TITLE, after=300))
            for i, block in enumerate(report.content_blocks):
                children.extend(await self.blocks.render(block, i))

        if render_narrative(report):
            children.append(_heading("EXECUTIVE SUMMARY"))
            children.append(ParagraphNode(runs=[_BODY.run(report.generated_content)], space_after=300))

        if report.special_mentions:
            children.append(_heading("SPECIAL MENTIONS"))
            children.append(ParagraphNode(runs=[_BODY.run(report.special_mentions)], space_after=300))

        children.extend(await self._attendance(report))
        children.extend(self._signatures(report))
        children.append(self._footer())

        page = PageSetup(margin_top=720, margin_right=720, margin_bottom=720, margin_left=720)
        return DocumentNode(children=children, page=page)

    async def _logos(self, report: EventReport) -> list[Block]:
        for logo_id in report.selected_logos:
            if logo_id not in self.registry:
                logger.warning("unknown logo id skipped: %s", logo_id)

        runs: list[Run] = []
        for logo_id, asset in self.registry.resolve(report.selected_logos):
            if runs:
                runs.append(TextRun("   "))
            try:
                runs.append(await self.blocks.image_run(asset.src, LOGO_PX, LOGO_PX, declared=asset.subtype))
            except ResourceLoadError as e:
                logger.warning("logo %s not loaded: %s", logo_id, e)
                runs.append(RunStyle(size=16, color="6b7280", bold=True).run(f"[{logo_id} Logo]"))
        if not runs:
            return []
        return [ParagraphNode(runs=runs, alignment=Alignment.CENTER, space_after=400)]

    def _header(self, report: EventReport) -> list[Block]:
        out: list[Block] = [
            _centered(_TITLE.run(self.cfg.institution_full_name.upper()), after=100),
            _centered(RunStyle(color="6b7280").run(self.cfg.institution_address), after=300),
            ParagraphNode(
                runs=[RunStyle(size=22, color="1f2937", bold=True, underline=True).run("EVENT REPORT")],
                alignment=Alignment.CENTER,
                space_before=400,
                space_after=200,
                style="Title",
            ),
            _centered(RunStyle(size=22, color="3b82f6", bold=True).run(report.title.upper()), after=100),
        ]
        if report.tagline:
            out.append(_centered(RunStyle(color="6b7280", italic=True).run(f'"{report.tagline}"'), after=300))
        return out

    def _metadata_table(self, report: EventReport) -> TableNode:
        rows: list[tuple[str, str]] = [
            ("Event Date", date_range(report.start_date, report.end_date, format_long_date, " to ")),
            ("Venue", report.effective_venue or NOT_SPECIFIED),
            ("Event Type", report.effective_event_type or NOT_SPECIFIED),
            ("Organized By", report.organized_by or NOT_SPECIFIED),
        ]
        if report.target_audience:
            rows.append(("Target Audience", report.target_audience))
        if report.participant_count:
            rows.append(("No. of Participants", str(report.participant_count)))
        if report.academic_year:
            rows.append(("Academic Year", report.academic_year))

        return TableNode(
            rows=[
                TableRowNode(
                    cells=[
                        TableCellNode(children=[ParagraphNode(runs=[_CELL_LABEL.run(label)])], shading="f3f4f6"),
                        TableCellNode(children=[ParagraphNode(runs=[_CELL.run(value)])]),
                    ]
                )
                for label, value in rows
            ],
            borders=True,
        )

    def _people(self, report: EventReport) -> list[Block]:
        if not report.has_people():
            return []
        out: list[Block] = [_heading("PEOPLE INVOLVED", _TITLE)]

        def section(label: str, lines: list[str]) -> None:
            if not lines:
                return
            out.append(ParagraphNode(runs=[_LABEL.run(label)], space_before=200, space_after=100))
            for i, line in enumerate(lines):
                out.append(ParagraphNode(runs=[_ENTRY.run(f"{i + 1}. {line}")], space_after=50))

        section("Faculty Coordinators:", [faculty_line(c) for c in named(report.faculty_coordinators)])
        section("Student Coordinators:", [student_line(c) for c in named(report.student_coordinators)])
        if report.chief_guest.name:
            out.append(ParagraphNode(runs=[_LABEL.run("Chief Guest/Speaker:")], space_before=200, space_after=100))
            out.append(ParagraphNode(runs=[_ENTRY.run(guest_line(report.chief_guest))], space_after=50))

        for label, value in (("Hosted By: ", report.hosted_by), ("Guests of Honor: ", report.guests_of_honor)):
            if value:
                out.append(
                    ParagraphNode(
                        runs=[_LABEL.run(label), _ENTRY.run(value)],
                        space_before=200,
                        space_after=100,
                    )
                )
        return out

    async def _attendance(self, report: EventReport) -> list[Block]:
        sheet = report.legacy_attendance()
        if sheet is None:
            return []
        out: list[Block] = [_heading("ATTENDANCE SHEET")]
        failed = _centered(_MUTED_ITALIC.run("[Attendance Sheet could not be processed]"), before=200, after=200)

        if not sheet.is_image():
            out.append(
                _centered(
                    RunStyle(size=18, color="3b82f6", bold=True).run(f"[Attendance Sheet: {sheet.display_name}]"),
                    before=200,
                    after=200,
                )
            )
            out.append(
                _centered(
                    RunStyle(size=16, color="6b7280", italic=True).run(
                        "Note: The attendance sheet file has been attached but cannot be displayed inline. "
                        "Please refer to the original file for attendance details."
                    ),
                    after=300,
                )
            )
            return out

        if sheet.source is None:
            logger.warning("attendance sheet %s has no data or url", sheet.display_name)
            out.append(failed)
            return out
        w, h = ATTENDANCE_PX
        try:
            run = await self.blocks.image_run(sheet.source, w, h)
        except ResourceLoadError as e:
            logger.warning("attendance sheet %s not loaded: %s", sheet.display_name, e)
            out.append(failed)
            return out
        out.append(_centered(run, before=200, after=200))
        return out

    def _signatures(self, report: EventReport) -> list[Block]:
        heading = ParagraphNode(
            runs=[_SECTION.run("SIGNATURES")],
            alignment=Alignment.CENTER,
            space_before=600,
            space_after=400,
            page_break_before=True,
        )
        cells = []
        for title, name in signature_columns(report):
            cells.append(
                TableCellNode(
                    children=[
                        _centered(RunStyle(bold=True).run(title)),
                        ParagraphNode(runs=[TextRun("")]),
                        ParagraphNode(runs=[TextRun("")]),
                        ParagraphNode(runs=[TextRun("")]),
                        _centered(TextRun("_________________________")),
                        _centered(RunStyle(size=18).run(name)),
                    ],
                    width_pct=50,
                )
            )
        return [heading, TableNode(rows=[TableRowNode(cells=cells)], borders=False)]

    def _footer(self) -> ParagraphNode:
        today = self.today or date.today()
        text = f"Generated on {format_long_date(today)} | {self.cfg.institution_full_name}"
        return _centered(RunStyle(size=16, color="9ca3af", italic=True).run(text), before=600)
