from __future__ import annotations

from datetime import date
from enum import Enum
from pathlib import PurePosixPath
from typing import Annotated, Any, Literal, Union
from urllib.parse import urlparse

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, ValidationInfo, field_validator, model_validator
from pydantic.alias_generators import to_camel

from eventreport_gen.config import settings

IMAGE_EXTENSIONS = frozenset({"jpg", "jpeg", "png", "gif", "bmp", "webp"})


def _none_to_empty(v: Any) -> Any:
    if v is None:
        return ""
    if isinstance(v, str):
        return v.strip()
    return v


Text = Annotated[str, BeforeValidator(_none_to_empty)]


def _coerce_date(v: Any) -> Any:
    # Accept "2024-01-15T00:00:00.000Z" as sent by the authoring UI.
    if isinstance(v, str):
        s = v.strip()
        if not s:
            return None
        if len(s) > 10 and s[4] == "-" and s[7] == "-":
            return s[:10]
        return s
    return v


class _Model(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True, alias_generator=to_camel)


class ReportStatus(str, Enum):
    DRAFT = "draft"
    GENERATED = "generated"


class LayoutMode(str, Enum):
    SINGLE = "single"
    ROW = "row"
    GRID = "grid"


class FacultyCoordinator(_Model):
    name: Text = ""
    designation: Text = ""
    email: Text = ""


class StudentCoordinator(_Model):
    name: Text = ""
    roll_no: Text = ""
    contact: Text = ""


class ChiefGuest(_Model):
    name: Text = ""
    designation: Text = ""
    affiliation: Text = ""


class AttachmentFile(_Model):
    """An attendance sheet or miscellaneous file attached to a report.

    Accepts either a resolvable reference (`url`: data URL, http(s) URL or
    site-relative path) or the raw bytes (`data`). When both are present the
    bytes win.
    """

    filename: Text = ""
    original_name: Text = ""
    mimetype: Text = ""
    size: int = Field(default=0, ge=0)
    url: str | None = None
    data: bytes | None = Field(default=None, repr=False)
    description: Text = ""

    @model_validator(mode="after")
    def _fill_size(self) -> AttachmentFile:
        if self.data is not None and not self.size:
            self.size = len(self.data)
        return self

    @property
    def display_name(self) -> str:
        return self.original_name or self.filename or "File"

    @property
    def extension(self) -> str:
        name = self.original_name or self.filename
        if not name and self.url and not self.url.startswith("data:"):
            name = PurePosixPath(urlparse(self.url).path).name
        if "." not in name:
            return ""
        return name.rsplit(".", 1)[1].lower()

    @property
    def source(self) -> bytes | str | None:
        if self.data is not None:
            return self.data
        return self.url

    def is_image(self) -> bool:
        if self.extension:
            return self.extension in IMAGE_EXTENSIONS
        return self.mimetype.lower().startswith("image/")


def _coerce_attachment(v: Any) -> Any:
    if v is None or v == "":
        return None
    if isinstance(v, (bytes, bytearray, memoryview)):
        return {"data": bytes(v)}
    if isinstance(v, str):
        name = "" if v.startswith("data:") else PurePosixPath(urlparse(v).path).name
        return {"url": v, "originalName": name}
    return v


class _BlockBase(_Model):
    id: Text = ""
    title: Text = ""


class TextBlock(_BlockBase):
    type: Literal["text"] = "text"
    content: Text = ""


class AchievementBlock(_BlockBase):
    type: Literal["achievement"] = "achievement"
    content: Text = ""


class QuoteBlock(_BlockBase):
    type: Literal["quote"] = "quote"
    content: Text = ""


class ImageBlock(_BlockBase):
    type: Literal["image"] = "image"
    image_url: str | None = None
    image_urls: list[str] = Field(default_factory=list)
    image_layout: LayoutMode | None = None
    caption: Text = ""
    credit: Text = ""

    @field_validator("image_layout", mode="before")
    @classmethod
    def _known_layout(cls, v: Any) -> Any:
        if isinstance(v, str) and v.strip().lower() in {m.value for m in LayoutMode}:
            return v.strip().lower()
        if isinstance(v, LayoutMode):
            return v
        return None

    @field_validator("image_urls", mode="before")
    @classmethod
    def _drop_blank_urls(cls, v: Any) -> Any:
        if v is None:
            return []
        if isinstance(v, list):
            return [u for u in v if isinstance(u, str) and u.strip()]
        return v

    def effective_images(self) -> list[str]:
        """List form wins over the legacy single reference."""
        if self.image_urls:
            return list(self.image_urls)
        if self.image_url and self.image_url.strip():
            return [self.image_url]
        return []


ContentBlock = Annotated[
    Union[TextBlock, ImageBlock, QuoteBlock, AchievementBlock],
    Field(discriminator="type"),
]

BLOCK_TYPES = frozenset({"text", "image", "quote", "achievement"})


class EventReport(_Model):
    """Aggregate root handed to the document builders. Never mutated by a build."""

    id: Text = ""
    title: str = Field(min_length=1)
    tagline: Text = ""
    selected_logos: list[str] = Field(default_factory=list)

    start_date: Annotated[date, BeforeValidator(_coerce_date)]
    end_date: Annotated[date | None, BeforeValidator(_coerce_date)] = None

    venue: Text = ""
    custom_venue: Text = ""
    event_type: Text = ""
    custom_event_type: Text = ""
    organized_by: Text = ""
    institute: Text = ""
    academic_year: Text = ""
    semester: Text = ""
    target_audience: Text = ""
    participant_count: int | None = Field(default=None, ge=0)

    faculty_coordinators: list[FacultyCoordinator] = Field(default_factory=list)
    # Older reports carry a single coordinator object.
    faculty_coordinator: FacultyCoordinator | None = Field(default=None, exclude=True)
    student_coordinators: list[StudentCoordinator] = Field(default_factory=list)
    chief_guest: ChiefGuest = Field(default_factory=ChiefGuest)

    hosted_by: Text = ""
    guests_of_honor: Text = ""
    special_mentions: Text = ""

    content_blocks: list[ContentBlock] = Field(default_factory=list)
    attendance_sheet: Annotated[AttachmentFile | None, BeforeValidator(_coerce_attachment)] = None
    attendance_sheets: list[AttachmentFile] = Field(default_factory=list)
    miscellaneous_files: list[AttachmentFile] = Field(default_factory=list)

    generated_content: Text = ""
    status: ReportStatus = ReportStatus.DRAFT

    @field_validator("title", mode="before")
    @classmethod
    def _strip_title(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v

    @field_validator("participant_count", mode="before")
    @classmethod
    def _blank_count(cls, v: Any) -> Any:
        if v == "" or v is None:
            return None
        return v

    @field_validator("selected_logos", mode="before")
    @classmethod
    def _institution_logo_first(cls, v: Any, info: ValidationInfo) -> Any:
        # Validation context may name the institution logo; otherwise the configured one.
        institution = (info.context or {}).get("institution_logo_id") or settings.institution_logo_id
        ids = [str(x).strip() for x in (v or []) if str(x).strip()]
        out: list[str] = []
        for logo_id in ids:
            if logo_id not in out:
                out.append(logo_id)
        if institution not in out:
            out.insert(0, institution)
        return out

    @field_validator("content_blocks", mode="before")
    @classmethod
    def _unknown_types_are_text(cls, v: Any) -> Any:
        if v is None:
            return []
        out = []
        for item in v:
            if isinstance(item, dict) and item.get("type") not in BLOCK_TYPES:
                item = {**item, "type": "text"}
            out.append(item)
        return out

    @field_validator("faculty_coordinators", "student_coordinators", "attendance_sheets", "miscellaneous_files", mode="before")
    @classmethod
    def _none_is_empty_list(cls, v: Any) -> Any:
        return [] if v is None else v

    @field_validator("chief_guest", mode="before")
    @classmethod
    def _none_is_empty_guest(cls, v: Any) -> Any:
        return {} if v is None else v

    @model_validator(mode="after")
    def _check(self) -> EventReport:
        if self.end_date is None:
            self.end_date = self.start_date
        if self.end_date < self.start_date:
            raise ValueError(f"end_date {self.end_date} is before start_date {self.start_date}")

        if not self.faculty_coordinators and self.faculty_coordinator and self.faculty_coordinator.name:
            self.faculty_coordinators = [self.faculty_coordinator]

        seen: set[str] = set()
        for i, block in enumerate(self.content_blocks):
            if not block.id:
                block.id = f"block-{i + 1}"
            if block.id in seen:
                raise ValueError(f"duplicate content block id: {block.id!r}")
            seen.add(block.id)
        return self

    @property
    def effective_venue(self) -> str:
        if self.venue == "Custom" and self.custom_venue:
            return self.custom_venue
        return self.venue

    @property
    def effective_event_type(self) -> str:
        if self.event_type == "Custom" and self.custom_event_type:
            return self.custom_event_type
        return self.event_type

    def has_body(self) -> bool:
        return bool(self.content_blocks) or bool(self.generated_content)

    def has_people(self) -> bool:
        """True when at least one named coordinator or a named chief guest is present."""
        return (
            any(c.name for c in self.faculty_coordinators)
            or any(c.name for c in self.student_coordinators)
            or bool(self.chief_guest.name)
        )

    def attendance_files(self) -> list[AttachmentFile]:
        """Multi-file attendance list, falling back to the legacy single sheet."""
        if self.attendance_sheets:
            return list(self.attendance_sheets)
        return [self.attendance_sheet] if self.attendance_sheet is not None else []

    def legacy_attendance(self) -> AttachmentFile | None:
        if self.attendance_sheet is not None:
            return self.attendance_sheet
        return self.attendance_sheets[0] if self.attendance_sheets else None

    def as_summary(self, narrative: str | None = None) -> EventReport:
        """Narrative-only copy: blocks and attachments cleared, narrative set."""
        return self.model_copy(
            update={
                "generated_content": (narrative if narrative is not None else self.generated_content).strip(),
                "content_blocks": [],
                "attendance_sheet": None,
                "attendance_sheets": [],
                "miscellaneous_files": [],
            }
        )
