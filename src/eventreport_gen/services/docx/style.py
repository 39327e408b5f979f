"""Styling policies for the two rendering modes.

Sizes are half-points, spacing is twips, image sizes are CSS pixels (the
serializer converts pixels at 96 DPI, i.e. 9525 EMU per pixel).
"""

from __future__ import annotations

from dataclasses import dataclass

from eventreport_gen.services.docx.types import Alignment, TextRun
from eventreport_gen.services.layout.planner import LayoutSizes


@dataclass(frozen=True)
class RunStyle:
    size: int = 24
    color: str = "000000"
    bold: bool = False
    italic: bool = False
    underline: bool = False

    def run(self, text: str, *, breaks: int = 0) -> TextRun:
        return TextRun(
            text=text,
            bold=self.bold,
            italic=self.italic,
            underline=self.underline,
            size=self.size,
            color=self.color,
            breaks=breaks,
        )


@dataclass(frozen=True)
class StylePolicy:
    name: str

    block_title: RunStyle
    block_title_space: tuple[int, int]
    number_block_titles: bool
    block_title_style: str | None

    text: RunStyle
    text_alignment: Alignment
    text_space_after: int
    # True: one paragraph per non-blank line. False: the whole string in one paragraph.
    split_text_lines: bool

    achievement: RunStyle
    achievement_prefix: str

    # (format string with {content}, style) per run.
    quote_runs: tuple[tuple[str, RunStyle], ...]
    quote_alignment: Alignment
    quote_space: tuple[int, int]

    image_sizes: LayoutSizes
    image_space: tuple[int, int]
    placeholder: RunStyle

    caption: RunStyle
    caption_space_after: int
    credit: RunStyle
    credit_space_after: int


TEMPLATE_STYLE = StylePolicy(
    name="template",
    block_title=RunStyle(size=22, color="374151", bold=True),
    block_title_space=(300, 150),
    number_block_titles=False,
    block_title_style="Heading 2",
    text=RunStyle(size=20, color="4b5563"),
    text_alignment=Alignment.LEFT,
    text_space_after=150,
    split_text_lines=True,
    achievement=RunStyle(size=20, color="059669", bold=True),
    achievement_prefix="🏆 ",
    quote_runs=(('"{content}"', RunStyle(size=20, color="3b82f6", italic=True)),),
    quote_alignment=Alignment.CENTER,
    quote_space=(200, 200),
    image_sizes=LayoutSizes(large=(400, 300), narrow_width=300, narrow_height=200, medium=(200, 150)),
    image_space=(150, 150),
    placeholder=RunStyle(size=18, color="6b7280", italic=True),
    caption=RunStyle(size=18, color="6b7280", italic=True),
    caption_space_after=150,
    credit=RunStyle(size=16, color="9ca3af", italic=True),
    credit_space_after=200,
)

REPLICA_STYLE = StylePolicy(
    name="replica",
    block_title=RunStyle(size=28, color="1f2937", bold=True),
    block_title_space=(240, 120),
    number_block_titles=True,
    block_title_style=None,
    text=RunStyle(size=24, color="374151"),
    text_alignment=Alignment.JUSTIFY,
    text_space_after=120,
    split_text_lines=False,
    achievement=RunStyle(size=24, color="374151"),
    achievement_prefix="",
    quote_runs=(
        ("│", RunStyle(size=32, color="9ca3af", bold=True)),
        ("   💬   ", RunStyle(size=28)),
        ('"{content}"', RunStyle(size=28, color="1f2937", bold=True, italic=True)),
    ),
    quote_alignment=Alignment.LEFT,
    quote_space=(120, 120),
    # h-32 row cells, h-48 grid cells, full-width single images in the preview.
    image_sizes=LayoutSizes(large=(500, 350), narrow_width=480, narrow_height=128, medium=(250, 192)),
    image_space=(0, 80),
    placeholder=RunStyle(size=24, color="6b7280", italic=True),
    caption=RunStyle(size=24, color="374151", bold=True),
    caption_space_after=80,
    credit=RunStyle(size=20, color="6b7280"),
    credit_space_after=80,
)
