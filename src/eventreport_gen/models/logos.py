from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Literal

ImageSubtype = Literal["png", "jpg", "gif", "bmp"]

INSTITUTION_LOGO_ID = "bvm"


@dataclass(frozen=True)
class LogoAsset:
    src: str
    subtype: ImageSubtype = "png"


DEFAULT_LOGOS: Mapping[str, LogoAsset] = MappingProxyType(
    {
        "bvm": LogoAsset("/BVM Logo-1.png", "png"),
        "cvm": LogoAsset("/CVM Logo.png", "png"),
        "gtu": LogoAsset("/GTU.png", "png"),
        "nss": LogoAsset("/nss.png", "png"),
        "NCC": LogoAsset("/NCC logo.png", "png"),
        "ieee": LogoAsset("/IEEE BVM SB.png", "png"),
        "TRS": LogoAsset("/TRS Logo.jpg", "jpg"),
        "TSA": LogoAsset("/TSA Logo.png", "png"),
        "gdg": LogoAsset("/GDG.png", "png"),
        "gfg": LogoAsset("/GFG Logo.jpg", "jpg"),
        "ML Club": LogoAsset("/ML Club Logo.png", "png"),
        "csi": LogoAsset("/CSI.jpeg", "jpg"),
        "byte": LogoAsset("/BYTE.jpeg", "jpg"),
    }
)


class LogoRegistry(Mapping[str, LogoAsset]):
    """Read-only identifier -> asset table handed to the builders."""

    def __init__(self, assets: Mapping[str, LogoAsset] | None = None) -> None:
        self._assets: Mapping[str, LogoAsset] = MappingProxyType(dict(assets if assets is not None else DEFAULT_LOGOS))

    def __getitem__(self, key: str) -> LogoAsset:
        return self._assets[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._assets)

    def __len__(self) -> int:
        return len(self._assets)

    def resolve(self, logo_ids: list[str]) -> list[tuple[str, LogoAsset]]:
        """Known identifiers in the given order; unknown ones are dropped."""
        return [(i, self._assets[i]) for i in logo_ids if i in self._assets]
