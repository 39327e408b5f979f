from __future__ import annotations

import base64
import struct
import zlib
from io import BytesIO
from typing import Any

import httpx
from docx import Document
from PIL import Image

from eventreport_gen.config import Settings
from eventreport_gen.models.report import EventReport
from eventreport_gen.services.resources.loader import ResourceLoader


def image_bytes(fmt: str = "PNG", size: tuple[int, int] = (4, 4), color=(200, 30, 30)) -> bytes:
    buf = BytesIO()
    Image.new("RGB", size, color).save(buf, format=fmt)
    return buf.getvalue()


def png_header(width: int, height: int) -> bytes:
    """PNG signature, IHDR and an empty IDAT: enough for Pillow to read the size."""

    def chunk(kind: bytes, body: bytes) -> bytes:
        return struct.pack(">I", len(body)) + kind + body + struct.pack(">I", zlib.crc32(kind + body))

    ihdr = struct.pack(">IIBBBBB", width, height, 8, 2, 0, 0, 0)
    return b"\x89PNG\r\n\x1a\n" + chunk(b"IHDR", ihdr) + chunk(b"IDAT", b"") + chunk(b"IEND", b"")


def data_url(data: bytes, mime: str = "image/png") -> str:
    return f"data:{mime};base64,{base64.b64encode(data).decode('ascii')}"


def png_url() -> str:
    return data_url(image_bytes())


def docx_bytes(lines: list[str]) -> bytes:
    doc = Document()
    for line in lines:
        doc.add_paragraph(line)
    buf = BytesIO()
    doc.save(buf)
    return buf.getvalue()


def clean_settings(**overrides: Any) -> Settings:
    return Settings(_env_file=None, **overrides)


def make_report(**overrides: Any) -> EventReport:
    data: dict[str, Any] = {
        "title": "Robotics Workshop",
        "startDate": "2024-01-15",
        "selectedLogos": ["bvm"],
        "venue": "Seminar Hall",
        "eventType": "Workshop",
        "organizedBy": "Department of Computer Engineering",
    }
    data.update(overrides)
    return EventReport.model_validate(data)


def mock_loader(routes: dict[str, bytes | int] | None = None, **kwargs: Any) -> ResourceLoader:
    """Loader whose remote fetches are answered from `routes` (URL -> body or status)."""
    routes = routes or {}

    def handler(request: httpx.Request) -> httpx.Response:
        hit = routes.get(str(request.url))
        if hit is None:
            return httpx.Response(404)
        if isinstance(hit, int):
            return httpx.Response(hit)
        return httpx.Response(200, content=hit)

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return ResourceLoader(client=client, **kwargs)
