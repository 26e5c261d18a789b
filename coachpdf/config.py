from __future__ import annotations

from pathlib import Path
from typing import Dict, List
import json


PACKAGE_DIR = Path(__file__).resolve().parent
OUT_DIR = Path.cwd() / "out"
DB_PATH = OUT_DIR / "coachpdf.db"
STYLE_PRESET_PATH = PACKAGE_DIR / "assets" / "pdf_style.json"

DEFAULT_LINE_COLOR = "#000000"
DEFAULT_TEXT_COLOR = "#4F46E5"

DEFAULT_TITLE = "SCHEDA DI ALLENAMENTO"
WATERMARK_TEXT = "Generato con EasyWorkout Planner"

SECTION_TITLES: Dict[str, str] = {
    "description": "DESCRIZIONE",
    "progression": "PROGRESSIONE SETTIMANALE",
    "dietary_advice": "CONSIGLI DIETISTICI",
    "glossary": "GLOSSARIO ESERCIZI",
}

INFO_LABELS: Dict[str, str] = {
    "level": "LIVELLO:",
    "client": "CLIENTE:",
    "type": "TIPO:",
    "duration": "DURATA:",
}

TABLE_HEADERS: List[str] = ["ESERCIZIO", "SERIE", "REPS", "CARICO", "RECUPERO"]
TABLE_COL_WIDTHS_MM: List[float] = [65, 20, 20, 25, 30]

CONTACT_SEPARATOR = " • "
FILENAME_PREFIX = "scheda"


def load_style_preset() -> dict:
    with STYLE_PRESET_PATH.open("r", encoding="utf-8") as handle:
        return json.load(handle)


def set_out_dir(path: Path) -> None:
    global OUT_DIR, DB_PATH
    OUT_DIR = path
    DB_PATH = OUT_DIR / "coachpdf.db"
