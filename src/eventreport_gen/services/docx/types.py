from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Union

from eventreport_gen.models.logos import ImageSubtype

DEFAULT_FONT = "Times New Roman"


class Alignment(str, Enum):
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"
    JUSTIFY = "justify"


@dataclass(frozen=True)
class TextRun:
    text: str
    bold: bool = False
    italic: bool = False
    underline: bool = False
    # Half-points: 24 == 12pt.
    size: int = 24
    color: str = "000000"
    font: str = DEFAULT_FONT
    # Line breaks emitted before the text.
    breaks: int = 0


@dataclass(frozen=True)
class ImageRun:
    data: bytes = field(repr=False)
    subtype: ImageSubtype
    width_px: int
    height_px: int


Run = Union[TextRun, ImageRun]


@dataclass
class ParagraphNode:
    runs: list[Run] = field(default_factory=list)
    alignment: Alignment = Alignment.LEFT
    # Twips (1/20 pt).
    space_before: int = 0
    space_after: int = 0
    page_break_before: bool = False
    style: str | None = None

    @property
    def text(self) -> str:
        return "".join(r.text for r in self.runs if isinstance(r, TextRun))


@dataclass
class TableCellNode:
    children: list[Block] = field(default_factory=list)
    width_pct: float | None = None
    shading: str | None = None
    # Twips: (top, bottom, left, right).
    margins: tuple[int, int, int, int] | None = None


@dataclass
class TableRowNode:
    cells: list[TableCellNode] = field(default_factory=list)


@dataclass
class TableNode:
    rows: list[TableRowNode] = field(default_factory=list)
    width_pct: float = 100.0
    borders: bool = False

    @property
    def columns(self) -> int:
        return max((len(r.cells) for r in self.rows), default=0)


Block = Union[ParagraphNode, TableNode]


@dataclass
class PageSetup:
    # Twips; None keeps the serializer default (Letter).
    width: int | None = None
    height: int | None = None
    margin_top: int = 1440
    margin_right: int = 1440
    margin_bottom: int = 1440
    margin_left: int = 1440


@dataclass
class DocumentNode:
    children: list[Block] = field(default_factory=list)
    page: PageSetup = field(default_factory=PageSetup)


def iter_paragraphs(blocks: list[Block]):
    """Depth-first walk over every paragraph, including those inside tables."""
    for b in blocks:
        if isinstance(b, ParagraphNode):
            yield b
        else:
            for row in b.rows:
                for cell in row.cells:
                    yield from iter_paragraphs(cell.children)


def iter_images(blocks: list[Block]):
    for p in iter_paragraphs(blocks):
        for r in p.runs:
            if isinstance(r, ImageRun):
                yield r


def document_text(doc: DocumentNode) -> str:
    return "\n".join(p.text for p in iter_paragraphs(doc.children))


def count_nodes(blocks: list[Block]) -> int:
    n = 0
    for b in blocks:
        n += 1
        if isinstance(b, TableNode):
            for row in b.rows:
                for cell in row.cells:
                    n += count_nodes(cell.children)
    return n
