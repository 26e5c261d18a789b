from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
import logging
from typing import Iterable, List, Optional

from .. import config
from ..models import Plan, StylingProfile
from ..storage import export_filename, record_export, save_pdf
from .render_pdf import generate_plan_pdf
from .render_preview import page_count, render_previews


logger = logging.getLogger(__name__)


@dataclass
class ExportResult:
    plan_id: str
    pdf_path: Path
    page_count: int
    previews: List[Path] = field(default_factory=list)


def export_plan(
    plan: Plan,
    profile: Optional[StylingProfile] = None,
    base_dir: Path | None = None,
    previews: bool = False,
    today: Optional[date] = None,
) -> ExportResult:
    data = generate_plan_pdf(plan, profile, today=today)
    export_path = profile.export_path if profile is not None else None
    pdf_path = save_pdf(data, export_filename(plan), export_path=export_path, base_dir=base_dir)
    pages = page_count(data)

    result = ExportResult(plan_id=plan.id, pdf_path=pdf_path, page_count=pages)
    if previews:
        result.previews = render_previews(pdf_path, pdf_path.parent)

    record_export(plan, pdf_path, pages)
    logger.info("Exported %s (%d pages) to %s", plan.id, pages, pdf_path)
    return result


def export_plans(
    plans: Iterable[Plan],
    profile: Optional[StylingProfile] = None,
    base_dir: Path | None = None,
    previews: bool = False,
) -> dict[str, list]:
    results: dict[str, list] = {"EXPORTED": [], "FAILED": []}
    for plan in plans:
        try:
            result = export_plan(plan, profile, base_dir=base_dir or config.OUT_DIR, previews=previews)
        except Exception as exc:
            logger.exception("Export error for %s", plan.id)
            results["FAILED"].append((plan.id, str(exc)))
            continue
        results["EXPORTED"].append(result)
    return results
