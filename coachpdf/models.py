from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Tuple, Union

from sqlmodel import Field, SQLModel, create_engine, Session

from . import config


# bytes, a data URL or bare base64, exactly as the app stores images
ImagePayload = Union[bytes, str]


@dataclass(frozen=True)
class GlossaryContent:
    description: Optional[str] = None
    images: Tuple[ImagePayload, ...] = ()


@dataclass(frozen=True)
class Exercise:
    name: str
    sets: str = ""
    reps: str = ""
    load: Optional[str] = None
    rest: Optional[str] = None
    notes: Optional[str] = None
    glossary_id: Optional[str] = None
    glossary_content: Optional[GlossaryContent] = None  # snapshot taken when the exercise was added


@dataclass(frozen=True)
class Day:
    name: str
    exercises: Tuple[Exercise, ...] = ()
    notes: Optional[str] = None


@dataclass(frozen=True)
class Week:
    number: int
    days: Tuple[Day, ...] = ()
    name: Optional[str] = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class Plan:
    id: str
    name: str
    client_name: str
    workout_type: str
    duration: int
    weeks: Tuple[Week, ...] = ()
    coach_name: Optional[str] = None
    level: Optional[str] = None
    description: Optional[str] = None
    dietary_advice: Optional[str] = None


@dataclass(frozen=True)
class StylingProfile:
    name: Optional[str] = None
    bio: Optional[str] = None
    logo: Optional[ImagePayload] = None
    line_color: Optional[str] = None
    text_color: Optional[str] = None
    show_watermark: bool = True
    use_workout_name_as_title: bool = False
    email: Optional[str] = None
    phone: Optional[str] = None
    instagram: Optional[str] = None
    facebook: Optional[str] = None
    website: Optional[str] = None
    export_path: Optional[str] = None


class ExportRecord(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    plan_id: str = Field(index=True)
    client_name: str = ""
    filename: str
    path: str
    page_count: int = 0
    created_at: datetime = Field(default_factory=datetime.utcnow)


engine = create_engine(f"sqlite:///{config.DB_PATH}")


def reset_engine() -> None:
    global engine
    engine = create_engine(f"sqlite:///{config.DB_PATH}")


def init_db() -> None:
    config.OUT_DIR.mkdir(parents=True, exist_ok=True)
    SQLModel.metadata.create_all(engine)


def get_session() -> Session:
    return Session(engine, expire_on_commit=False)
