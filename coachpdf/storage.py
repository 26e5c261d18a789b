from __future__ import annotations

from pathlib import Path
from typing import List, Optional

from slugify import slugify
from sqlmodel import func, select

from . import config
from .models import ExportRecord, Plan, get_session, init_db


def export_dir(base_dir: Path | None = None) -> Path:
    path = base_dir or config.OUT_DIR
    path.mkdir(parents=True, exist_ok=True)
    return path


def export_filename(plan: Plan) -> str:
    for candidate in (plan.client_name, plan.name, plan.id):
        slug = slugify(candidate or "")
        if slug:
            return f"{config.FILENAME_PREFIX}-{slug}.pdf"
    return f"{config.FILENAME_PREFIX}.pdf"


def suggested_filename(filename: str, export_path: Optional[str] = None) -> str:
    """
    The export path is only a hint: it becomes a prefix of the file name and
    path separators are flattened, so the file always lands in the output
    folder.
    """
    name = filename
    if export_path and export_path.strip():
        name = f"{export_path.strip().rstrip('/')}/{filename}"
    return name.replace("/", "_").replace("\\", "_").lstrip("._") or filename


def save_pdf(
    data: bytes,
    filename: str,
    export_path: Optional[str] = None,
    base_dir: Path | None = None,
) -> Path:
    path = export_dir(base_dir) / suggested_filename(filename, export_path)
    path.write_bytes(data)
    return path


def record_export(plan: Plan, path: Path, page_count: int) -> ExportRecord:
    init_db()
    record = ExportRecord(
        plan_id=plan.id,
        client_name=plan.client_name,
        filename=path.name,
        path=str(path),
        page_count=page_count,
    )
    with get_session() as session:
        session.add(record)
        session.commit()
        session.refresh(record)
    return record


def export_count() -> int:
    init_db()
    with get_session() as session:
        return int(session.exec(select(func.count()).select_from(ExportRecord)).one())


def list_exports(limit: int = 20) -> List[ExportRecord]:
    init_db()
    with get_session() as session:
        statement = select(ExportRecord).order_by(ExportRecord.created_at.desc(), ExportRecord.id.desc()).limit(limit)
        return list(session.exec(statement))
