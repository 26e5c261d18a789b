from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from . import config
from .models import reset_engine
from .pipeline.export import export_plans
from .pipeline.ingest import load_backup, profile_from_dict, select_plans
from .pipeline.render_pdf import generate_plan_pdf
from .pipeline.render_preview import render_previews
from .storage import export_count, export_filename, list_exports, save_pdf

app = typer.Typer(help="Workout plan PDF exporter")


def _use_out_dir(out: Optional[Path]) -> None:
    if out:
        config.set_out_dir(out)
        reset_engine()


@app.command()
def export(
    backup: Path = typer.Argument(..., help="App backup JSON"),
    plan: Optional[str] = typer.Option(None, "--plan", help="Workout id or name"),
    out: Optional[Path] = typer.Option(None, "--out", help="Output directory"),
    previews: bool = typer.Option(False, "--previews", help="Also render PNG previews"),
) -> None:
    _use_out_dir(out)
    data = load_backup(backup)
    plans = select_plans(data, plan)
    if not plans:
        typer.echo("No workouts to export")
        return
    profile = profile_from_dict(data.get("coachProfile"))
    results = export_plans(plans, profile, previews=previews)
    for result in results["EXPORTED"]:
        typer.echo(f"EXPORTED: {result.pdf_path} ({result.page_count} pages)")
    for plan_id, error in results["FAILED"]:
        typer.echo(f"FAILED: {plan_id}: {error}")
    if results["FAILED"]:
        raise typer.Exit(code=1)


@app.command()
def preview(
    backup: Path = typer.Argument(..., help="App backup JSON"),
    plan: Optional[str] = typer.Option(None, "--plan", help="Workout id or name"),
    out: Optional[Path] = typer.Option(None, "--out", help="Output directory"),
    pages: int = typer.Option(3, "--pages", help="Pages to render"),
) -> None:
    _use_out_dir(out)
    data = load_backup(backup)
    profile = profile_from_dict(data.get("coachProfile"))
    preview_dir = config.OUT_DIR / "preview"
    for item in select_plans(data, plan):
        pdf_path = save_pdf(generate_plan_pdf(item, profile), export_filename(item), base_dir=preview_dir)
        for path in render_previews(pdf_path, preview_dir, max_pages=pages):
            typer.echo(f"PREVIEW: {path}")


@app.command()
def history(
    out: Optional[Path] = typer.Option(None, "--out", help="Output directory"),
    limit: int = typer.Option(10, "--limit", help="Exports to list"),
) -> None:
    _use_out_dir(out)
    typer.echo(f"Exported PDFs: {export_count()}")
    for record in list_exports(limit):
        typer.echo(f"{record.created_at:%Y-%m-%d %H:%M} {record.filename} ({record.page_count} pages)")


if __name__ == "__main__":
    app()
