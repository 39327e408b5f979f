from __future__ import annotations

import logging
from enum import Enum
from io import BytesIO

from docx import Document

from eventreport_gen.errors import ResourceLoadError
from eventreport_gen.models.report import IMAGE_EXTENSIONS, AttachmentFile
from eventreport_gen.services.resources.loader import ResourceLoader, describe_ref

logger = logging.getLogger(__name__)


class AttachmentKind(str, Enum):
    WORD = "word"
    TEXT = "text"
    PDF = "pdf"
    SPREADSHEET = "spreadsheet"
    PRESENTATION = "presentation"
    IMAGE = "image"
    OTHER = "other"


def attachment_kind(file: AttachmentFile) -> AttachmentKind:
    """Classify by declared mimetype first, then by filename extension."""
    mime = file.mimetype.lower()
    ext = file.extension

    if "wordprocessingml" in mime or "msword" in mime or ext in {"doc", "docx"}:
        return AttachmentKind.WORD
    if mime.startswith("text/") or ext == "txt":
        return AttachmentKind.TEXT
    if "pdf" in mime or ext == "pdf":
        return AttachmentKind.PDF
    if "spreadsheet" in mime or "excel" in mime or ext in {"xlsx", "xls"}:
        return AttachmentKind.SPREADSHEET
    if "presentation" in mime or "powerpoint" in mime or ext in {"ppt", "pptx"}:
        return AttachmentKind.PRESENTATION
    if mime.startswith("image/") or ext in IMAGE_EXTENSIONS:
        return AttachmentKind.IMAGE
    return AttachmentKind.OTHER


def extract_docx_text(data: bytes) -> str:
    """Plain text of a .docx: body paragraphs, then table cell text."""
    doc = Document(BytesIO(data))
    lines = [p.text for p in doc.paragraphs]
    for table in doc.tables:
        for row in table.rows:
            for cell in row.cells:
                lines.extend(p.text for p in cell.paragraphs)
    return "\n".join(lines)


def extraction_failed(name: str) -> str:
    return f"[Content extraction failed for: {name}]"


def placeholder_text(file: AttachmentFile, kind: AttachmentKind) -> str:
    name = file.display_name
    if kind is AttachmentKind.PDF:
        return (
            f"[PDF Document: {name}]\n"
            "This PDF document contains the attendance records for the event. "
            "The original file has been referenced in this report."
        )
    if kind is AttachmentKind.SPREADSHEET:
        return (
            f"[Excel Spreadsheet: {name}]\n"
            "This Excel file contains the attendance data for the event. "
            "The original file has been referenced in this report."
        )
    if kind is AttachmentKind.IMAGE:
        return (
            f"[Image File: {name}]\n"
            "This image contains the attendance sheet for the event. "
            "The original file has been referenced in this report."
        )
    return (
        f"[File: {name}]\n"
        f"Content extraction not supported for this file type ({file.mimetype or 'unknown'}). "
        "The original file has been referenced in this report."
    )


class AttachmentTextExtractor:
    """Readable text for an attachment, or a fixed placeholder. Never raises."""

    def __init__(self, loader: ResourceLoader) -> None:
        self._loader = loader

    async def extract(self, file: AttachmentFile) -> str:
        kind = attachment_kind(file)
        if kind not in {AttachmentKind.WORD, AttachmentKind.TEXT}:
            return placeholder_text(file, kind)

        source = file.source
        if source is None:
            logger.warning("attachment %s has no data or url", file.display_name)
            return extraction_failed(file.display_name)
        try:
            data = await self._loader.load_bytes(source)
        except ResourceLoadError as e:
            logger.warning("could not read attachment %s: %s", file.display_name, e)
            return extraction_failed(file.display_name)

        if kind is AttachmentKind.TEXT:
            return data.decode("utf-8", errors="replace")

        try:
            return extract_docx_text(data)
        except Exception as e:
            # python-docx surfaces zip, xml and package errors with unrelated types.
            logger.warning(
                "word extraction failed for %s (%s): %s", file.display_name, describe_ref(source), type(e).__name__
            )
            return extraction_failed(file.display_name)
