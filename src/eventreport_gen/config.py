from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic.aliases import AliasChoices
from pydantic_settings import BaseSettings, SettingsConfigDict

from eventreport_gen.models.logos import INSTITUTION_LOGO_ID


def _project_root() -> Path | None:
    """Checkout directory holding pyproject.toml, when running from a source tree."""
    for parent in Path(__file__).resolve().parents:
        if (parent / "pyproject.toml").is_file():
            return parent
    return None


def _env_files() -> list[Path]:
    # Later files override earlier ones; missing files are skipped by pydantic-settings.
    dirs = [d for d in (_project_root(), Path.cwd()) if d is not None]
    return [d / name for d in dirs for name in (".env", ".env.local")]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="EVENTREPORT_",
        extra="ignore",
        env_file=_env_files(),
        env_file_encoding="utf-8",
    )

    # Resource loading
    fetch_timeout_sec: float = 20.0
    # Site-relative references (e.g. logo sources like "/GTU.png") resolve against
    # `asset_dir` first, then `asset_base_url`.
    asset_dir: str | None = None
    asset_base_url: str | None = Field(
        default=None,
        validation_alias=AliasChoices("EVENTREPORT_ASSET_BASE_URL", "EVENTREPORT_SITE_ORIGIN"),
    )

    # Miscellaneous word-processor attachments are cut after this many paragraphs.
    misc_max_paragraphs: int = 20

    log_level: str = "INFO"

    # Institution profile (header, footer, mandatory logo)
    institution_logo_id: str = INSTITUTION_LOGO_ID
    institution_name: str = "Birla Vishvakarma Mahavidyalaya"
    institution_full_name: str = "Birla Vishvakarma Mahavidyalaya Engineering College"
    institution_address: str = "V.V.Nagar, Anand-388120, Gujarat, India"
    institution_affiliation_line: str = "Engineering College • Gujarat Technological University"
    institution_location_line: str = "Vallabh Vidyanagar, Anand - 388120"


settings = Settings()
