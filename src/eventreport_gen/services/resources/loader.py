from __future__ import annotations

import base64
import binascii
import logging
from dataclasses import dataclass, field
from io import BytesIO
from pathlib import Path, PurePosixPath
from typing import BinaryIO, Union
from urllib.parse import unquote_to_bytes, urljoin, urlparse

import httpx
from PIL import Image, UnidentifiedImageError

from eventreport_gen.config import Settings, settings
from eventreport_gen.errors import ResourceLoadError
from eventreport_gen.models.logos import ImageSubtype

logger = logging.getLogger(__name__)

ResourceRef = Union[str, Path, bytes, bytearray, memoryview, BinaryIO]

DEFAULT_SUBTYPE: ImageSubtype = "png"

_SUBTYPE_ALIASES: dict[str, ImageSubtype] = {
    "png": "png",
    "jpg": "jpg",
    "jpeg": "jpg",
    "gif": "gif",
    "bmp": "bmp",
}
# Pillow format name -> subtype the serializer can embed as-is.
_EMBEDDABLE_FORMATS: dict[str, ImageSubtype] = {
    "PNG": "png",
    "JPEG": "jpg",
    "GIF": "gif",
    "BMP": "bmp",
}


@dataclass(frozen=True)
class LoadedImage:
    data: bytes = field(repr=False)
    subtype: ImageSubtype
    size_px: tuple[int, int] | None = None


def describe_ref(ref: object) -> str:
    """Short human-readable form of a reference for logs and error messages."""
    if isinstance(ref, str):
        if ref.startswith("data:"):
            header = ref.split(",", 1)[0]
            return f"{header},...({len(ref)} chars)"
        return ref
    if isinstance(ref, (bytes, bytearray, memoryview)):
        return f"<{len(ref)} bytes>"
    if isinstance(ref, Path):
        return str(ref)
    name = getattr(ref, "name", None)
    return str(name) if name else f"<{type(ref).__name__}>"


def declared_subtype(ref: object) -> ImageSubtype:
    """Subtype implied by a data-URL mimetype or a file extension (default: png)."""
    ext = ""
    if isinstance(ref, str):
        s = ref.strip()
        if s.startswith("data:image/"):
            mime = s.split(";", 1)[0].split(",", 1)[0].split(":", 1)[1]
            ext = mime.split("/", 1)[1].lower()
        else:
            path = urlparse(s).path if "://" in s else s
            ext = PurePosixPath(path).suffix.lstrip(".").lower()
    elif isinstance(ref, Path):
        ext = ref.suffix.lstrip(".").lower()
    return _SUBTYPE_ALIASES.get(ext, DEFAULT_SUBTYPE)


def sniff_image(data: bytes, *, ref: object = None, declared: str | None = None) -> LoadedImage:
    """Identify an image by its magic bytes.

    Formats the serializer cannot embed are re-encoded to PNG. Raises
    ResourceLoadError when the bytes are not a decodable image.
    """
    try:
        with Image.open(BytesIO(data)) as img:
            fmt = (img.format or "").upper()
            subtype = _EMBEDDABLE_FORMATS.get(fmt)
            if subtype is not None:
                if declared and _SUBTYPE_ALIASES.get(declared, DEFAULT_SUBTYPE) != subtype:
                    logger.debug("image %s declared as %s but is %s", describe_ref(ref), declared, subtype)
                return LoadedImage(data=data, subtype=subtype, size_px=img.size)

            converted = img
            if img.mode not in {"RGB", "RGBA", "L", "LA", "P"}:
                converted = img.convert("RGBA" if "A" in img.mode else "RGB")
            out = BytesIO()
            converted.save(out, format="PNG")
            logger.debug("re-encoded %s image %s to png", fmt or "unknown", describe_ref(ref))
            return LoadedImage(data=out.getvalue(), subtype="png", size_px=img.size)
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
        raise ResourceLoadError(describe_ref(ref), f"not a decodable image ({type(e).__name__})") from e


def _decode_data_url(url: str) -> bytes:
    header, sep, payload = url.partition(",")
    if not sep:
        raise ResourceLoadError(describe_ref(url), "malformed data URL")
    if header.lower().endswith(";base64"):
        try:
            return base64.b64decode("".join(payload.split()))
        except (binascii.Error, ValueError) as e:
            raise ResourceLoadError(describe_ref(url), "invalid base64 payload") from e
    return unquote_to_bytes(payload)


class ResourceLoader:
    """Resolve an image/file reference into bytes.

    One loader serves one build; references are fetched one at a time in the
    order the builder asks for them. Every failure surfaces as
    ResourceLoadError so the caller can substitute a placeholder.
    """

    def __init__(
        self,
        *,
        client: httpx.AsyncClient | None = None,
        timeout_sec: float = 20.0,
        asset_dir: str | Path | None = None,
        base_url: str | None = None,
    ) -> None:
        self._client = client
        self._owns_client = client is None
        self._timeout_sec = timeout_sec
        self._asset_dir = Path(asset_dir).expanduser() if asset_dir else None
        self._base_url = (base_url or "").strip() or None

    @classmethod
    def from_settings(cls, cfg: Settings = settings, *, client: httpx.AsyncClient | None = None) -> ResourceLoader:
        return cls(
            client=client,
            timeout_sec=cfg.fetch_timeout_sec,
            asset_dir=cfg.asset_dir,
            base_url=cfg.asset_base_url,
        )

    async def __aenter__(self) -> ResourceLoader:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout_sec, follow_redirects=True)
        return self._client

    async def load_bytes(self, ref: ResourceRef) -> bytes:
        if isinstance(ref, (bytes, bytearray, memoryview)):
            return bytes(ref)
        if isinstance(ref, Path):
            return self._read_file(ref)
        if isinstance(ref, str):
            s = ref.strip()
            if not s:
                raise ResourceLoadError("<empty>", "empty reference")
            if s.startswith("data:"):
                return _decode_data_url(s)
            scheme = urlparse(s).scheme.lower()
            if scheme in {"http", "https"}:
                return await self._fetch(s)
            return await self._load_relative(s)
        if hasattr(ref, "read"):
            try:
                data = ref.read()
            except OSError as e:
                raise ResourceLoadError(describe_ref(ref), "read failed") from e
            if not isinstance(data, (bytes, bytearray)):
                raise ResourceLoadError(describe_ref(ref), "file handle is not binary")
            return bytes(data)
        raise ResourceLoadError(describe_ref(ref), "unsupported reference type")

    async def load_image(self, ref: ResourceRef, declared: str | None = None) -> LoadedImage:
        data = await self.load_bytes(ref)
        if not data:
            raise ResourceLoadError(describe_ref(ref), "empty image")
        return sniff_image(data, ref=ref, declared=declared or declared_subtype(ref))

    async def _fetch(self, url: str) -> bytes:
        client = self._get_client()
        try:
            r = await client.get(url)
            r.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise ResourceLoadError(url, f"HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise ResourceLoadError(url, f"fetch failed ({type(e).__name__})") from e
        return r.content

    async def _load_relative(self, ref: str) -> bytes:
        p = Path(ref).expanduser()
        if p.is_absolute() and p.is_file():
            return self._read_file(p)
        if self._asset_dir is not None:
            cand = self._asset_dir / ref.lstrip("/")
            if cand.is_file():
                return self._read_file(cand)
        if self._base_url is not None:
            return await self._fetch(urljoin(self._base_url.rstrip("/") + "/", ref.lstrip("/")))
        raise ResourceLoadError(ref, "unresolvable relative reference")

    @staticmethod
    def _read_file(path: Path) -> bytes:
        try:
            return path.read_bytes()
        except OSError as e:
            raise ResourceLoadError(str(path), f"read failed ({type(e).__name__})") from e
