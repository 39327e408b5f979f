from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml

from eventreport_gen.config import Settings, settings
from eventreport_gen.models.report import EventReport


def load_yaml(path: str | Path) -> Any:
    p = Path(path)
    raw = p.read_text(encoding="utf-8")
    return yaml.safe_load(raw)


def load_json(path: str | Path) -> Any:
    p = Path(path)
    return json.loads(p.read_text(encoding="utf-8"))


def load_report(path: str | Path, cfg: Settings = settings) -> EventReport:
    """Read a report from YAML (.yaml/.yml) or JSON (anything else).

    The institution logo prepended to `selected_logos` comes from `cfg`.
    """
    p = Path(path)
    if p.suffix.lower() in {".yaml", ".yml"}:
        data = load_yaml(p)
    else:
        data = load_json(p)
    return EventReport.model_validate(data or {}, context={"institution_logo_id": cfg.institution_logo_id})
