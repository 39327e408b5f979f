from __future__ import annotations

import logging
from datetime import date
from enum import Enum
from pathlib import Path

from eventreport_gen.config import Settings, settings
from eventreport_gen.models.logos import LogoRegistry
from eventreport_gen.models.report import EventReport, ReportStatus
from eventreport_gen.services.docx.replica_builder import ReplicaBuilder
from eventreport_gen.services.docx.rules import sanitize_title
from eventreport_gen.services.docx.serializer import serialize
from eventreport_gen.services.docx.template_builder import TemplateBuilder
from eventreport_gen.services.docx.types import DocumentNode, count_nodes
from eventreport_gen.services.resources.loader import ResourceLoader

logger = logging.getLogger(__name__)


class BuildMode(str, Enum):
    TEMPLATE = "template"
    REPLICA = "replica"


class ReportVariant(str, Enum):
    FULL = "full"
    SUMMARY = "summary"


async def build_document(
    report: EventReport,
    loader: ResourceLoader,
    *,
    mode: BuildMode = BuildMode.REPLICA,
    registry: LogoRegistry | None = None,
    cfg: Settings = settings,
    today: date | None = None,
) -> DocumentNode:
    """Walk the report and return the node tree, without serializing it."""
    if mode is BuildMode.TEMPLATE:
        builder = TemplateBuilder(loader, registry=registry, cfg=cfg, today=today)
    else:
        builder = ReplicaBuilder(loader, registry=registry, cfg=cfg, today=today)
    return await builder.build(report)


async def build_report_docx(
    report: EventReport,
    *,
    mode: BuildMode = BuildMode.REPLICA,
    variant: ReportVariant = ReportVariant.FULL,
    loader: ResourceLoader | None = None,
    registry: LogoRegistry | None = None,
    cfg: Settings = settings,
    today: date | None = None,
) -> bytes:
    """Build one report into .docx bytes.

    Image and attachment failures degrade to placeholders inside the document.
    Only a serializer failure (DocumentBuildError) escapes.

    The summary variant renders the narrative-only copy of the report
    (`EventReport.as_summary`). When no loader is passed, one is created from
    `cfg` and closed after the build.
    """
    if variant is ReportVariant.SUMMARY:
        report = report.as_summary()
    if report.status is ReportStatus.GENERATED and not report.has_body():
        logger.warning("report %r is marked generated but has no narrative or content blocks", report.title)

    if loader is None:
        async with ResourceLoader.from_settings(cfg) as owned:
            doc = await build_document(report, owned, mode=mode, registry=registry, cfg=cfg, today=today)
    else:
        doc = await build_document(report, loader, mode=mode, registry=registry, cfg=cfg, today=today)

    blob = serialize(doc)
    logger.info(
        "built %s %s document for %r: %d nodes, %d bytes",
        mode.value,
        variant.value,
        report.title,
        count_nodes(doc.children),
        len(blob),
    )
    return blob


def report_filename(title: str, variant: ReportVariant = ReportVariant.FULL) -> str:
    suffix = "_Summary" if variant is ReportVariant.SUMMARY else "_report"
    return f"{sanitize_title(title)}{suffix}.docx"


def save_docx(
    blob: bytes,
    out_dir: str | Path,
    title: str,
    variant: ReportVariant = ReportVariant.FULL,
) -> Path:
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    out_path = out_dir / report_filename(title, variant)
    out_path.write_bytes(blob)
    return out_path
