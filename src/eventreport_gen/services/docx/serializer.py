from __future__ import annotations

from io import BytesIO

from docx import Document
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.oxml import OxmlElement
from docx.oxml.ns import qn
from docx.shared import Emu, Pt, RGBColor, Twips
from docx.table import Table
from docx.text.paragraph import Paragraph

from eventreport_gen.errors import DocumentBuildError
from eventreport_gen.services.docx.types import (
    DEFAULT_FONT,
    Alignment,
    Block,
    DocumentNode,
    ImageRun,
    PageSetup,
    ParagraphNode,
    TableNode,
    TextRun,
)

# CSS pixels at 96 DPI.
EMU_PER_PX = 9525
# US Letter width in twips, the python-docx default page.
_DEFAULT_PAGE_WIDTH = 12240

_ALIGN = {
    Alignment.LEFT: WD_ALIGN_PARAGRAPH.LEFT,
    Alignment.CENTER: WD_ALIGN_PARAGRAPH.CENTER,
    Alignment.RIGHT: WD_ALIGN_PARAGRAPH.RIGHT,
    Alignment.JUSTIFY: WD_ALIGN_PARAGRAPH.JUSTIFY,
}


def serialize(node: DocumentNode) -> bytes:
    """Render the node tree with python-docx and return the .docx bytes.

    Any failure here is fatal for the build and surfaces as DocumentBuildError.
    """
    try:
        doc = Document()
        _setup_document(doc, node.page)
        avail = (node.page.width or _DEFAULT_PAGE_WIDTH) - node.page.margin_left - node.page.margin_right
        for block in node.children:
            _add_block(doc, block, avail_twips=avail)
        buf = BytesIO()
        doc.save(buf)
        return buf.getvalue()
    except Exception as e:
        raise DocumentBuildError(f"document serialization failed: {type(e).__name__}: {e}") from e


def _setup_document(doc, page: PageSetup) -> None:
    normal = doc.styles["Normal"]
    normal.font.name = DEFAULT_FONT
    normal.font.size = Pt(12)
    normal.element.get_or_add_rPr().get_or_add_rFonts().set(qn("w:eastAsia"), DEFAULT_FONT)

    section = doc.sections[0]
    if page.width:
        section.page_width = Twips(page.width)
    if page.height:
        section.page_height = Twips(page.height)
    section.top_margin = Twips(page.margin_top)
    section.right_margin = Twips(page.margin_right)
    section.bottom_margin = Twips(page.margin_bottom)
    section.left_margin = Twips(page.margin_left)


def _add_block(container, block: Block, *, avail_twips: int, paragraph: Paragraph | None = None) -> None:
    # `container` is a Document or a table cell; both expose add_paragraph/add_table.
    if isinstance(block, ParagraphNode):
        p = paragraph if paragraph is not None else container.add_paragraph()
        _fill_paragraph(p, block)
    else:
        _add_table(container, block, avail_twips=avail_twips)


def _fill_paragraph(p: Paragraph, node: ParagraphNode) -> None:
    if node.style:
        try:
            p.style = node.style
        except KeyError:
            # Style missing from the base template; keep Normal.
            pass
    p.alignment = _ALIGN[node.alignment]
    pf = p.paragraph_format
    pf.space_before = Twips(node.space_before)
    pf.space_after = Twips(node.space_after)
    if node.page_break_before:
        pf.page_break_before = True

    for r in node.runs:
        if isinstance(r, ImageRun):
            run = p.add_run()
            run.add_picture(
                BytesIO(r.data),
                width=Emu(r.width_px * EMU_PER_PX),
                height=Emu(r.height_px * EMU_PER_PX),
            )
            continue
        _add_text_run(p, r)


def _add_text_run(p: Paragraph, r: TextRun) -> None:
    run = p.add_run()
    for _ in range(r.breaks):
        run.add_break()
    for i, piece in enumerate(r.text.split("\n")):
        if i:
            run.add_break()
        if piece:
            run.add_text(piece)

    font = run.font
    font.name = r.font
    run._element.get_or_add_rPr().get_or_add_rFonts().set(qn("w:eastAsia"), r.font)
    font.size = Pt(r.size / 2)
    font.bold = r.bold
    font.italic = r.italic
    if r.underline:
        font.underline = True
    font.color.rgb = RGBColor.from_string(r.color.upper())


def _add_table(container, node: TableNode, *, avail_twips: int) -> None:
    cols = node.columns
    if not node.rows or cols == 0:
        return
    table: Table = container.add_table(rows=len(node.rows), cols=cols)
    if node.borders:
        table.style = "Table Grid"
    else:
        _clear_borders(table)
    _set_table_width_pct(table, node.width_pct)

    table_twips = int(avail_twips * node.width_pct / 100.0)
    for r_idx, row in enumerate(node.rows):
        for c_idx in range(cols):
            cell = table.cell(r_idx, c_idx)
            if c_idx >= len(row.cells):
                continue
            cnode = row.cells[c_idx]
            cell_twips = table_twips // cols
            if cnode.width_pct is not None:
                cell_twips = int(table_twips * cnode.width_pct / 100.0)
                cell.width = Twips(cell_twips)
            if cnode.shading:
                _shade_cell(cell, cnode.shading)
            if cnode.margins:
                _set_cell_margins(cell, cnode.margins)

            for i, child in enumerate(cnode.children):
                first = cell.paragraphs[0] if i == 0 and isinstance(child, ParagraphNode) else None
                _add_block(cell, child, avail_twips=cell_twips, paragraph=first)


def _clear_borders(table: Table) -> None:
    tbl_pr = table._tbl.tblPr
    for el in tbl_pr.findall(qn("w:tblBorders")):
        tbl_pr.remove(el)
    borders = OxmlElement("w:tblBorders")
    for edge in ("top", "left", "bottom", "right", "insideH", "insideV"):
        el = OxmlElement(f"w:{edge}")
        el.set(qn("w:val"), "nil")
        borders.append(el)
    tbl_pr.append(borders)


def _set_table_width_pct(table: Table, pct: float) -> None:
    tbl_pr = table._tbl.tblPr
    tbl_w = tbl_pr.find(qn("w:tblW"))
    if tbl_w is None:
        tbl_w = OxmlElement("w:tblW")
        tbl_pr.append(tbl_w)
    # Percentages are stored in fiftieths of a percent.
    tbl_w.set(qn("w:type"), "pct")
    tbl_w.set(qn("w:w"), str(int(pct * 50)))


def _shade_cell(cell, fill: str) -> None:
    shd = OxmlElement("w:shd")
    shd.set(qn("w:val"), "clear")
    shd.set(qn("w:color"), "auto")
    shd.set(qn("w:fill"), fill)
    cell._tc.get_or_add_tcPr().append(shd)


def _set_cell_margins(cell, margins: tuple[int, int, int, int]) -> None:
    top, bottom, left, right = margins
    tc_mar = OxmlElement("w:tcMar")
    for edge, value in (("top", top), ("left", left), ("bottom", bottom), ("right", right)):
        el = OxmlElement(f"w:{edge}")
        el.set(qn("w:w"), str(value))
        el.set(qn("w:type"), "dxa")
        tc_mar.append(el)
    cell._tc.get_or_add_tcPr().append(tc_mar)
