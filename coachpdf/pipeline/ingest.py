from __future__ import annotations

import json
from pathlib import Path
from typing import Any, List, Optional

from ..models import Day, Exercise, GlossaryContent, Plan, StylingProfile, Week


def _opt(data: dict, key: str) -> Optional[str]:
    value = data.get(key)
    if value is None:
        return None
    value = str(value)
    return value if value.strip() else None


def _list(data: dict, key: str) -> List[Any]:
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValueError(f"Field '{key}' must be a list")
    return value


def load_backup(path: Path) -> dict:
    """
    Read a backup file as exported by the app. Only the shape is checked:
    workouts and exerciseGlossary must be lists, coachProfile an object.
    """
    if not path.exists():
        raise FileNotFoundError(f"Backup not found: {path}")
    try:
        with path.open("r", encoding="utf-8") as handle:
            data = json.load(handle)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ValueError("Backup must be a JSON object")
    for key in ("workouts", "clients", "exerciseGlossary"):
        if key in data and data[key] is not None and not isinstance(data[key], list):
            raise ValueError(f"Backup field '{key}' must be a list")
    profile = data.get("coachProfile")
    if profile is not None and not isinstance(profile, dict):
        raise ValueError("Backup field 'coachProfile' must be an object")
    return data


def glossary_from_dict(data: Optional[dict]) -> Optional[GlossaryContent]:
    if not data:
        return None
    return GlossaryContent(
        description=_opt(data, "description"),
        images=tuple(image for image in _list(data, "images") if image),
    )


def exercise_from_dict(data: dict) -> Exercise:
    return Exercise(
        name=str(data.get("name") or ""),
        sets=str(data.get("sets") or ""),
        reps=str(data.get("reps") or ""),
        load=_opt(data, "load"),
        rest=_opt(data, "rest"),
        notes=_opt(data, "notes"),
        glossary_id=_opt(data, "glossaryId"),
        glossary_content=glossary_from_dict(data.get("glossaryContent")),
    )


def day_from_dict(data: dict) -> Day:
    exercises = sorted(_list(data, "exercises"), key=lambda item: item.get("order", 0))
    return Day(
        name=str(data.get("name") or ""),
        exercises=tuple(exercise_from_dict(item) for item in exercises),
        notes=_opt(data, "notes"),
    )


def week_from_dict(data: dict, position: int) -> Week:
    return Week(
        number=int(data.get("number") or position),
        days=tuple(day_from_dict(item) for item in _list(data, "days")),
        name=_opt(data, "name"),
        notes=_opt(data, "notes"),
    )


def plan_from_dict(data: dict) -> Plan:
    if not isinstance(data, dict):
        raise ValueError("Workout must be a JSON object")
    weeks = tuple(week_from_dict(item, index + 1) for index, item in enumerate(_list(data, "weeks")))
    duration = data.get("duration")
    return Plan(
        id=str(data.get("id") or ""),
        name=str(data.get("name") or ""),
        client_name=str(data.get("clientName") or ""),
        workout_type=str(data.get("workoutType") or ""),
        duration=int(duration) if duration else len(weeks),
        weeks=weeks,
        coach_name=_opt(data, "coachName"),
        level=_opt(data, "level"),
        description=_opt(data, "description"),
        dietary_advice=_opt(data, "dietaryAdvice"),
    )


def profile_from_dict(data: Optional[dict]) -> Optional[StylingProfile]:
    if not data:
        return None
    return StylingProfile(
        name=_opt(data, "name"),
        bio=_opt(data, "bio"),
        logo=data.get("logo") or None,
        line_color=_opt(data, "pdfLineColor"),
        text_color=_opt(data, "pdfTextColor"),
        show_watermark=data.get("showWatermark", True) is not False,
        use_workout_name_as_title=bool(data.get("useWorkoutNameAsTitle", False)),
        email=_opt(data, "email"),
        phone=_opt(data, "phone"),
        instagram=_opt(data, "instagram"),
        facebook=_opt(data, "facebook"),
        website=_opt(data, "website"),
        export_path=_opt(data, "exportPath"),
    )


def select_plans(backup: dict, plan_ref: Optional[str] = None) -> List[Plan]:
    plans = [plan_from_dict(item) for item in _list(backup, "workouts")]
    if plan_ref is None:
        return plans
    ref = plan_ref.strip().lower()
    matches = [plan for plan in plans if plan.id.lower() == ref or plan.name.lower() == ref]
    if not matches:
        raise ValueError(f"No workout matches: {plan_ref}")
    return matches
