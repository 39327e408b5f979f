"""Replica rendering: mirrors the live HTML preview of a report.

Spacing values are the preview's CSS spacing at 10 twips per pixel
(mb-8 == 32px == 320 twips); image sizes are the preview's pixel sizes.
"""

from __future__ import annotations

import logging
from datetime import date

from eventreport_gen.config import Settings, settings
from eventreport_gen.errors import ResourceLoadError
from eventreport_gen.models.logos import LogoRegistry
from eventreport_gen.models.report import AttachmentFile, EventReport
from eventreport_gen.services.attachments.extract import AttachmentKind, AttachmentTextExtractor, attachment_kind
from eventreport_gen.services.docx.blocks import BlockRenderer
from eventreport_gen.services.docx.rules import (
    RULE_COLOR,
    RULE_TEXT,
    date_range,
    faculty_line,
    format_kb,
    format_short_date,
    guest_line,
    named,
    non_blank_lines,
    render_narrative,
    signature_columns,
    student_line,
)
from eventreport_gen.services.docx.style import REPLICA_STYLE, RunStyle
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

LOGO_PX = 96
LOGO_GAP = " " * 8
ATTENDANCE_PX = (600, 700)
MISC_IMAGE_PX = (500, 400)

# A4 in twips.
A4_WIDTH, A4_HEIGHT = 11906, 16838

_HEADING = RunStyle(size=28, color="1f2937", bold=True)
_LABEL = RunStyle(color="1f2937", bold=True)
_VALUE = RunStyle(color="374151")
_MUTED = RunStyle(color="6b7280")
_MUTED_ITALIC = RunStyle(color="6b7280", italic=True)
_ERROR = RunStyle(color="ef4444", bold=True)

TRUNCATION_NOTICE = "[Document content truncated for brevity. Full content available in original file.]"
NO_READABLE_CONTENT = "[Unable to extract readable content from this document]"


def rule(*, before: int = 0, after: int = 160) -> ParagraphNode:
    """Horizontal divider line drawn with underscores."""
    return ParagraphNode(
        runs=[TextRun(RULE_TEXT, color=RULE_COLOR)],
        alignment=Alignment.CENTER,
        space_before=before,
        space_after=after,
    )


def _section(text: str, *, before: int = 320, after: int = 160) -> ParagraphNode:
    return ParagraphNode(runs=[_HEADING.run(text)], space_before=before, space_after=after)


def _centered(run: Run, *, before: int = 0, after: int = 0) -> ParagraphNode:
    return ParagraphNode(runs=[run], alignment=Alignment.CENTER, space_before=before, space_after=after)


class ReplicaBuilder:
    style = REPLICA_STYLE

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
        self.extractor = AttachmentTextExtractor(loader)

    async def build(self, report: EventReport) -> DocumentNode:
        children: list[Block] = []
        children.extend(await self._logos(report))
        children.extend(self._header(report))
        children.extend(self._title(report))
        children.extend(self._details(report))
        children.extend(self._people(report))

        if report.content_blocks:
            for i, block in enumerate(report.content_blocks):
                children.extend(await self.blocks.render(block, i))
            children.append(rule(before=240, after=240))

        if render_narrative(report):
            children.append(_section("EXECUTIVE SUMMARY", before=0))
            children.append(
                ParagraphNode(
                    runs=[RunStyle(color="1f2937").run(report.generated_content)],
                    alignment=Alignment.JUSTIFY,
                    space_after=80,
                )
            )

        children.extend(await self._attendance(report))
        children.extend(await self._misc_files(report))
        children.extend(self._signatures(report))
        children.extend(self._footer())
        return DocumentNode(children=children, page=PageSetup(width=A4_WIDTH, height=A4_HEIGHT))

    async def _logos(self, report: EventReport) -> list[Block]:
        runs: list[Run] = []
        for logo_id in report.selected_logos:
            asset = self.registry.get(logo_id)
            if asset is None:
                logger.warning("unknown logo id skipped: %s", logo_id)
                continue
            try:
                img = await self.blocks.image_run(asset.src, LOGO_PX, LOGO_PX, declared=asset.subtype)
            except ResourceLoadError as e:
                logger.warning("logo %s not loaded: %s", logo_id, e)
                continue
            if runs:
                runs.append(RunStyle().run(LOGO_GAP))
            runs.append(img)
        if not runs:
            return []
        return [ParagraphNode(runs=runs, alignment=Alignment.CENTER, space_before=160, space_after=320)]

    def _header(self, report: EventReport) -> list[Block]:
        return [
            _centered(RunStyle(size=36, color="1f2937", bold=True).run(self.cfg.institution_name.upper()), after=40),
            _centered(_MUTED.run(self.cfg.institution_affiliation_line), after=20),
            _centered(_MUTED.run(self.cfg.institution_location_line), after=160),
        ]

    def _title(self, report: EventReport) -> list[Block]:
        out: list[Block] = [
            rule(),
            _centered(RunStyle(size=32, color="1f2937", bold=True).run(report.title.upper()), after=80),
        ]
        if report.tagline:
            out.append(_centered(RunStyle(size=28, color="374151", bold=True).run(report.tagline), after=160))
        out.append(rule())

        runs: list[Run] = []
        if report.effective_event_type:
            runs.append(RunStyle(color="6b7280", bold=True).run(report.effective_event_type))
        if report.organized_by:
            runs.append(_MUTED.run(f"Organized by: {report.organized_by}", breaks=1 if runs else 0))
        if runs:
            out.append(ParagraphNode(runs=runs, alignment=Alignment.CENTER, space_after=320))
        return out

    def _details(self, report: EventReport) -> list[Block]:
        entries = [
            ("DATE & TIME", date_range(report.start_date, report.end_date, format_short_date, " - ")),
            ("VENUE", report.effective_venue),
            ("TARGET AUDIENCE", report.target_audience),
            ("NUMBER OF PARTICIPANTS", str(report.participant_count) if report.participant_count else ""),
            ("ACADEMIC YEAR", report.academic_year),
            ("SEMESTER", report.semester),
        ]
        entries = [(label, value) for label, value in entries if value]

        out: list[Block] = [_section("EVENT DETAILS", after=160)]
        rows: list[TableRowNode] = []
        for i in range(0, len(entries), 2):
            pair = entries[i : i + 2]
            cells = [
                TableCellNode(
                    children=[
                        ParagraphNode(runs=[_LABEL.run(label)], space_after=40),
                        ParagraphNode(runs=[_VALUE.run(value)]),
                    ],
                    width_pct=48,
                    margins=(200, 200, 100, 100),
                )
                for label, value in pair
            ]
            if len(cells) == 1:
                cells.append(TableCellNode(children=[ParagraphNode(runs=[TextRun("")])], width_pct=48))
            rows.append(TableRowNode(cells=cells))
        if rows:
            out.append(TableNode(rows=rows, borders=False))
            out.append(rule(before=240, after=240))
        return out

    def _people(self, report: EventReport) -> list[Block]:
        if not report.has_people():
            return []
        out: list[Block] = [_section("PEOPLE INVOLVED", before=0)]

        def section(label: str, lines: list[str]) -> None:
            if not lines:
                return
            first = len(out) == 1
            out.append(ParagraphNode(runs=[_LABEL.run(label)], space_before=0 if first else 160, space_after=80))
            out.extend(ParagraphNode(runs=[_VALUE.run(line)], space_after=40) for line in lines)

        section("FACULTY COORDINATORS", [faculty_line(c) for c in named(report.faculty_coordinators)])
        section("STUDENT COORDINATORS", [student_line(c) for c in named(report.student_coordinators)])
        if report.chief_guest.name:
            section("CHIEF GUEST", [guest_line(report.chief_guest)])

        out.append(rule(before=160, after=240))
        return out

    async def _attendance(self, report: EventReport) -> list[Block]:
        files = report.attendance_files()
        images = [f for f in files if f.is_image()]
        if len(images) < len(files):
            logger.info("%d non-image attendance file(s) left out", len(files) - len(images))
        if not images:
            return []

        out: list[Block] = [_section("ATTENDANCE SHEET")]
        w, h = ATTENDANCE_PX
        for i, sheet in enumerate(images):
            before = 120 if i == 0 else 240
            try:
                if sheet.source is None:
                    raise ResourceLoadError(sheet.display_name, "attachment has no data or url")
                run = await self.blocks.image_run(sheet.source, w, h)
            except ResourceLoadError as e:
                logger.warning("attendance image %s not loaded: %s", sheet.display_name, e)
                out.append(
                    ParagraphNode(
                        runs=[
                            _ERROR.run("❌ Error processing attendance image"),
                            _MUTED_ITALIC.run(
                                "\nUnable to process this attendance image. Please verify the file is not corrupted."
                            ),
                        ],
                        space_before=before,
                        space_after=160,
                    )
                )
                continue
            out.append(
                ParagraphNode(
                    runs=[run],
                    alignment=Alignment.CENTER,
                    space_before=before,
                    space_after=240,
                    page_break_before=i > 0,
                )
            )
        out.append(rule(before=240, after=240))
        return out

    async def _misc_files(self, report: EventReport) -> list[Block]:
        if not report.miscellaneous_files:
            return []
        out: list[Block] = [
            _section("MISCELLANEOUS FILES"),
            ParagraphNode(
                runs=[_VALUE.run("The following additional files are included with this event report:")],
                space_after=160,
            ),
        ]
        for i, file in enumerate(report.miscellaneous_files):
            out.append(
                ParagraphNode(
                    runs=[_LABEL.run(f"{i + 1}. {file.display_name}")],
                    space_before=240 if i > 0 else 0,
                    space_after=80,
                )
            )
            try:
                out.extend(await self._misc_file_body(file))
            except ResourceLoadError as e:
                logger.warning("miscellaneous file %s not processed: %s", file.display_name, e)
                out.append(
                    ParagraphNode(
                        runs=[
                            _ERROR.run(f"❌ Error processing {file.display_name}"),
                            _MUTED_ITALIC.run("\nUnable to process this file. Please verify the file is not corrupted."),
                        ],
                        space_after=200,
                    )
                )
        out.append(rule(before=240, after=240))
        return out

    async def _misc_file_body(self, file: AttachmentFile) -> list[Block]:
        kind = attachment_kind(file)
        if kind is AttachmentKind.IMAGE:
            if file.source is None:
                raise ResourceLoadError(file.display_name, "attachment has no data or url")
            w, h = MISC_IMAGE_PX
            run = await self.blocks.image_run(file.source, w, h)
            return [
                ParagraphNode(runs=[_MUTED_ITALIC.run("Event Photo/Image")], space_after=80),
                _centered(run, before=120, after=240),
            ]

        if kind is AttachmentKind.WORD:
            out: list[Block] = [ParagraphNode(runs=[_MUTED_ITALIC.run("Document Content")], space_after=80)]
            lines = non_blank_lines(await self.extractor.extract(file))
            if not lines:
                out.append(ParagraphNode(runs=[_MUTED_ITALIC.run(NO_READABLE_CONTENT)], space_after=160))
                return out
            limit = self.cfg.misc_max_paragraphs
            out.extend(ParagraphNode(runs=[_VALUE.run(line)], space_after=120) for line in lines[:limit])
            if len(lines) > limit:
                out.append(ParagraphNode(runs=[_MUTED_ITALIC.run(TRUNCATION_NOTICE)], space_after=160))
            return out

        size = format_kb(file.size)
        if kind is AttachmentKind.PRESENTATION:
            label = "📊 PowerPoint Presentation"
            meta = f"File Size: {size}"
            note = (
                "\nThis PowerPoint presentation contains slides related to the event. "
                "The presentation file has been included as part of this report documentation."
            )
        elif kind is AttachmentKind.PDF:
            label = "📄 PDF Document"
            meta = f"File Size: {size}"
            note = (
                "\nThis PDF document contains additional information related to the event. "
                "The document has been included as part of this report for reference."
            )
        else:
            ext = file.extension.upper()
            label = f"📎 {ext} File"
            meta = f"File Type: {ext} | Size: {size}"
            note = (
                "\nThis file contains additional material related to the event "
                "and has been included as part of this report documentation."
            )
        return [
            ParagraphNode(runs=[_MUTED_ITALIC.run(label)], space_after=80),
            ParagraphNode(runs=[_MUTED.run(meta), _VALUE.run(note)], space_after=200),
        ]

    def _signatures(self, report: EventReport) -> list[Block]:
        cells = [
            TableCellNode(
                children=[
                    ParagraphNode(runs=[TextRun("", breaks=4)], space_before=640),
                    _centered(TextRun("________________________", color="6b7280"), after=80),
                    _centered(_HEADING.run(title), after=40),
                    _centered(_VALUE.run(name)),
                ],
                width_pct=50,
            )
            for title, name in signature_columns(report)
        ]
        return [
            ParagraphNode(runs=[TextRun("", breaks=4)], space_before=640),
            TableNode(rows=[TableRowNode(cells=cells)], borders=False),
        ]

    def _footer(self) -> list[Block]:
        today = self.today or date.today()
        text = f"Report generated on {format_short_date(today)} • {self.cfg.institution_name}"
        return [
            rule(before=320, after=160),
            _centered(RunStyle(size=20, color="9ca3af").run(text)),
        ]
