from __future__ import annotations

from io import BytesIO
from typing import List

import fitz  # PyMuPDF
from PIL import Image

from coachpdf.models import Day, Exercise, GlossaryContent, Plan, StylingProfile, Week


def png_bytes(color: str = "red") -> bytes:
    buffer = BytesIO()
    Image.new("RGB", (8, 6), color).save(buffer, format="PNG")
    return buffer.getvalue()


def page_texts(data: bytes) -> List[str]:
    with fitz.open(stream=data, filetype="pdf") as doc:
        return [page.get_text() for page in doc]


def sample_plan(weeks=None, **overrides) -> Plan:
    if weeks is None:
        weeks = (
            Week(
                number=1,
                days=(
                    Day(
                        name="Giorno 1",
                        exercises=(
                            Exercise(name="Panca piana", sets="4", reps="8", load="60kg", rest="90s"),
                            Exercise(name="Squat", sets="3", reps="10"),
                        ),
                    ),
                ),
            ),
        )
    fields = dict(
        id="w1",
        name="Forza base",
        client_name="Mario Rossi",
        workout_type="Forza e Massa",
        duration=len(weeks) or 4,
        weeks=tuple(weeks),
    )
    fields.update(overrides)
    return Plan(**fields)


def many_exercises(count: int, prefix: str = "Esercizio") -> tuple:
    return tuple(Exercise(name=f"{prefix} {i:02d}", sets="3", reps="10") for i in range(1, count + 1))


def glossary_exercise(name: str, description: str, images=()) -> Exercise:
    return Exercise(
        name=name,
        sets="3",
        reps="10",
        glossary_id=f"g-{name}",
        glossary_content=GlossaryContent(description=description, images=tuple(images)),
    )


def full_profile(**overrides) -> StylingProfile:
    fields = dict(
        name="Luca Bianchi",
        email="luca@example.com",
        phone="333 1234567",
        instagram="luca.fit",
        website="lucafit.it",
        line_color="#FF0000",
        text_color="#00AA00",
    )
    fields.update(overrides)
    return StylingProfile(**fields)
