from __future__ import annotations

import logging
from typing import assert_never

from eventreport_gen.errors import ResourceLoadError
from eventreport_gen.models.report import (
    AchievementBlock,
    ContentBlock,
    ImageBlock,
    LayoutMode,
    QuoteBlock,
    TextBlock,
)
from eventreport_gen.services.docx.rules import IMAGE_PLACEHOLDER, non_blank_lines
from eventreport_gen.services.docx.style import RunStyle, StylePolicy
from eventreport_gen.services.docx.types import (
    Alignment,
    Block,
    ImageRun,
    ParagraphNode,
    Run,
    TableCellNode,
    TableNode,
    TableRowNode,
    TextRun,
)
from eventreport_gen.services.layout.planner import plan
from eventreport_gen.services.resources.loader import ResourceLoader, ResourceRef, describe_ref

logger = logging.getLogger(__name__)


class BlockRenderer:
    """Turn one content block into document nodes under a styling policy.

    Images are fetched one after another in document order. A failed image
    becomes a placeholder run in the paragraph or cell it would have filled.
    """

    def __init__(self, style: StylePolicy, loader: ResourceLoader) -> None:
        self.style = style
        self.loader = loader

    async def render(self, block: ContentBlock, index: int) -> list[Block]:
        nodes: list[Block] = []
        title = self.title(block, index)
        if title is not None:
            nodes.append(title)

        if isinstance(block, TextBlock):
            nodes.extend(self.text(block.content, self.style.text))
        elif isinstance(block, AchievementBlock):
            nodes.extend(self.text(block.content, self.style.achievement, prefix=self.style.achievement_prefix))
        elif isinstance(block, QuoteBlock):
            nodes.extend(self.quote(block.content))
        elif isinstance(block, ImageBlock):
            nodes.extend(await self.image_block(block))
        else:
            assert_never(block)
        return nodes

    def title(self, block: ContentBlock, index: int) -> ParagraphNode | None:
        if not block.title:
            return None
        text = f"{index + 1}. {block.title}" if self.style.number_block_titles else block.title
        before, after = self.style.block_title_space
        return ParagraphNode(
            runs=[self.style.block_title.run(text)],
            space_before=before,
            space_after=after,
            style=self.style.block_title_style,
        )

    def text(self, content: str, run_style: RunStyle, *, prefix: str = "") -> list[ParagraphNode]:
        if not content:
            return []
        if self.style.split_text_lines:
            chunks = non_blank_lines(content)
        else:
            chunks = [content]
        out: list[ParagraphNode] = []
        for i, chunk in enumerate(chunks):
            out.append(
                ParagraphNode(
                    runs=[run_style.run(f"{prefix}{chunk}" if i == 0 else chunk)],
                    alignment=self.style.text_alignment,
                    space_after=self.style.text_space_after,
                )
            )
        return out

    def quote(self, content: str) -> list[ParagraphNode]:
        if not content:
            return []
        runs: list[Run] = [rs.run(fmt.format(content=content)) for fmt, rs in self.style.quote_runs]
        before, after = self.style.quote_space
        return [ParagraphNode(runs=runs, alignment=self.style.quote_alignment, space_before=before, space_after=after)]

    async def image_block(self, block: ImageBlock) -> list[Block]:
        refs = block.effective_images()
        if not refs:
            return []
        nodes = await self.images(refs, block.image_layout)
        if block.caption:
            nodes.append(
                ParagraphNode(
                    runs=[self.style.caption.run(block.caption)],
                    alignment=Alignment.CENTER,
                    space_after=self.style.caption_space_after,
                )
            )
        if block.credit:
            nodes.append(
                ParagraphNode(
                    runs=[self.style.credit.run(f"Photo Credit: {block.credit}")],
                    alignment=Alignment.RIGHT,
                    space_after=self.style.credit_space_after,
                )
            )
        return nodes

    async def images(self, refs: list[ResourceRef], layout: LayoutMode | None) -> list[Block]:
        arrangement = plan(len(refs), layout, self.style.image_sizes)
        w, h = arrangement.cell_width_px, arrangement.cell_height_px

        if not arrangement.tabular:
            before, after = self.style.image_space
            out: list[Block] = []
            for ref in refs:
                run = await self.image_or_placeholder(ref, w, h)
                out.append(ParagraphNode(runs=[run], alignment=Alignment.CENTER, space_before=before, space_after=after))
            return out

        rows: list[TableRowNode] = []
        for slot_row in arrangement.slots():
            cells: list[TableCellNode] = []
            for idx in slot_row:
                if idx is None:
                    para = ParagraphNode(runs=[TextRun("")])
                else:
                    para = ParagraphNode(runs=[await self.image_or_placeholder(refs[idx], w, h)], alignment=Alignment.CENTER)
                cells.append(TableCellNode(children=[para], width_pct=arrangement.cell_width_pct))
            rows.append(TableRowNode(cells=cells))
        return [TableNode(rows=rows, borders=False)]

    async def image_run(self, ref: ResourceRef, width_px: int, height_px: int, declared: str | None = None) -> ImageRun:
        img = await self.loader.load_image(ref, declared)
        return ImageRun(data=img.data, subtype=img.subtype, width_px=width_px, height_px=height_px)

    async def image_or_placeholder(self, ref: ResourceRef, width_px: int, height_px: int) -> Run:
        try:
            return await self.image_run(ref, width_px, height_px)
        except ResourceLoadError as e:
            logger.warning("image skipped (%s): %s", describe_ref(ref), e.reason)
            return self.style.placeholder.run(IMAGE_PLACEHOLDER)
