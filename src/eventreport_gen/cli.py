from pathlib import Path
import asyncio

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from eventreport_gen.config import settings
from eventreport_gen.errors import DocumentBuildError
from eventreport_gen.logging_config import setup_logging
from eventreport_gen.models.logos import LogoRegistry
from eventreport_gen.services.docx.builder import BuildMode, ReportVariant, build_report_docx, save_docx
from eventreport_gen.services.loaders import load_report

app = typer.Typer(add_completion=False)
console = Console()


@app.command()
def build(
    report: Path = typer.Argument(..., exists=True, file_okay=True, dir_okay=False),
    mode: BuildMode = typer.Option(BuildMode.REPLICA, help="replica mirrors the preview; template is the plain layout."),
    out: Path = typer.Option(Path("output")),
    summary: bool = typer.Option(False, help="Narrative-only document (content blocks and attachments left out)."),
    asset_dir: Path | None = typer.Option(None, help="Directory for site-relative references such as logos."),
    log_level: str = typer.Option(settings.log_level),
) -> None:
    """Build a .docx from a report.yaml / report.json."""
    setup_logging(log_level.upper())

    cfg = settings
    if asset_dir is not None:
        cfg = settings.model_copy(update={"asset_dir": str(asset_dir.resolve())})
    elif not cfg.asset_dir:
        # Logos referenced as "/GTU.png" usually sit next to the report file.
        cfg = settings.model_copy(update={"asset_dir": str(report.resolve().parent)})

    try:
        report_obj = load_report(report, cfg)
    except ValidationError as e:
        console.print(f"[red]invalid report[/red] {report}")
        console.print(str(e))
        raise typer.Exit(code=2)

    variant = ReportVariant.SUMMARY if summary else ReportVariant.FULL
    try:
        blob = asyncio.run(build_report_docx(report_obj, mode=mode, variant=variant, cfg=cfg))
    except DocumentBuildError as e:
        console.print(f"[red]build failed[/red] {e}")
        raise typer.Exit(code=1)

    out_path = save_docx(blob, out, report_obj.title, variant)
    console.print(f"[green]OK[/green] wrote {out_path}")


@app.command()
def validate(
    report: Path = typer.Argument(..., exists=True, file_okay=True, dir_okay=False),
) -> None:
    """Validate a report file against the content model."""
    try:
        report_obj = load_report(report)
    except ValidationError as e:
        console.print(f"[red]invalid report[/red] {report}")
        console.print(str(e))
        raise typer.Exit(code=2)
    console.print(f"[green]OK[/green] {report_obj.title!r}: {len(report_obj.content_blocks)} content block(s)")


@app.command()
def logos() -> None:
    """List the known logo identifiers."""
    table = Table("id", "src", "type")
    for logo_id, asset in LogoRegistry().items():
        table.add_row(logo_id, asset.src, asset.subtype)
    console.print(table)


if __name__ == "__main__":
    app()
