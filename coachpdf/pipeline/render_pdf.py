from __future__ import annotations

import logging
from datetime import date
from io import BytesIO
from typing import List, Optional, Tuple

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.pdfgen import canvas

from .. import config
from ..config import load_style_preset
from ..models import Day, Exercise, Plan, StylingProfile, Week
from .layout import (
    LayoutContext,
    _hex,
    _s,
    draw_cell,
    draw_image,
    draw_lines,
    draw_rule,
    draw_string,
    ensure_space,
    fit_font_size,
    new_context,
    set_font,
    set_stroke,
    wrap_to_width,
)


logger = logging.getLogger(__name__)

LOGO_SIZE = 30 * mm
SECTION_RESERVE = 30 * mm
WEEK_HEADER_RESERVE = 50 * mm
DAY_HEADER_RESERVE = 30 * mm
GLOSSARY_ENTRY_RESERVE = 30 * mm

TABLE_INDENT = 5 * mm
HEADER_ROW_H = 6 * mm
ROW_H = 8 * mm
CELL_PAD = 2 * mm
CELL_LINE_H = 3.5 * mm
NOTE_LINE_H = 3 * mm

GLOSSARY_IMAGE_W = 80 * mm
GLOSSARY_IMAGE_H = 60 * mm


class PdfRenderError(RuntimeError):
    """Raised when a plan cannot be turned into a complete document."""


def _fonts(style: dict) -> Tuple[str, str, str]:
    return (
        str(_s(style, "font_name", "Helvetica")),
        str(_s(style, "font_bold", "Helvetica-Bold")),
        str(_s(style, "font_italic", "Helvetica-Oblique")),
    )


def _draw_section_title(ctx: LayoutContext, text: str) -> None:
    _, bold, _ = _fonts(ctx.style)
    ensure_space(ctx, SECTION_RESERVE)
    set_font(ctx, bold, float(_s(ctx.style, "section_size", 14)), ctx.accent_color)
    draw_string(ctx, ctx.margin, ctx.y, text)


# -------------------- Header --------------------
def document_title(plan: Plan, profile: Optional[StylingProfile]) -> str:
    if profile is not None and profile.use_workout_name_as_title and (plan.name or "").strip():
        return plan.name.upper()
    return config.DEFAULT_TITLE


def draw_header(ctx: LayoutContext, plan: Plan, profile: Optional[StylingProfile]) -> LayoutContext:
    style = ctx.style
    regular, bold, _ = _fonts(style)
    center = ctx.page_w / 2

    if profile is not None and profile.logo:
        try:
            draw_image(ctx, profile.logo, (ctx.page_w - LOGO_SIZE) / 2, ctx.y, LOGO_SIZE, LOGO_SIZE)
            ctx.y += LOGO_SIZE + 10 * mm
        except Exception:
            logger.warning("Could not add logo to PDF", exc_info=True)

    title = document_title(plan, profile)
    title_max = float(_s(style, "title_max_size", 24))
    title_size = fit_font_size(
        ctx,
        title,
        bold,
        title_max,
        ctx.content_width,
        min_size=float(_s(style, "title_min_size", 12)),
        step=1.0,
    )
    set_font(ctx, bold, title_size, ctx.accent_color)
    draw_string(ctx, center, ctx.y + 10 * mm, title, align="centre")
    # a shrunken title leaves a taller gap below it
    ctx.y += 15 * mm + (title_max - title_size) * mm

    # the title shrinks, the subtitle wraps
    subtitle_size = float(_s(style, "subtitle_size", 14))
    subtitle = f"{plan.workout_type} - {plan.duration} settimane"
    lines = wrap_to_width(ctx, subtitle, ctx.content_width, regular, subtitle_size)
    set_font(ctx, regular, subtitle_size, colors.black)
    if len(lines) == 1:
        draw_string(ctx, center, ctx.y, subtitle, align="centre")
        ctx.y += 15 * mm
    else:
        draw_lines(ctx, lines, center, 6 * mm, align="centre")
        ctx.y += 3 * mm

    coach_name = (profile.name if profile is not None and profile.name else plan.coach_name) or ""
    if coach_name.strip():
        set_font(ctx, regular, float(_s(style, "coach_size", 12)), _hex(_s(style, "coach_gray", "#646464")))
        draw_string(ctx, center, ctx.y, f"Coach: {coach_name}", align="centre")
        ctx.y += 8 * mm

    if profile is not None and profile.bio:
        bio_size = float(_s(style, "bio_size", 10))
        set_font(ctx, regular, bio_size, _hex(_s(style, "bio_gray", "#505050")))
        draw_lines(ctx, wrap_to_width(ctx, profile.bio, ctx.content_width, regular, bio_size), center, 4 * mm, align="centre")
        ctx.y += 5 * mm

    set_stroke(ctx, ctx.line_color, 1)
    draw_rule(ctx, ctx.margin, ctx.page_w - ctx.margin, ctx.y)
    ctx.y += 10 * mm
    return ctx


# -------------------- Info / description --------------------
def draw_plan_info(ctx: LayoutContext, plan: Plan) -> LayoutContext:
    regular, bold, _ = _fonts(ctx.style)
    size = float(_s(ctx.style, "info_size", 12))
    line_h = 5 * mm

    mid = ctx.page_w / 2
    left_val_x = ctx.margin + 25 * mm
    right_val_x = mid + 30 * mm
    left_max_w = max(0.0, mid - left_val_x - 5 * mm)
    right_max_w = max(0.0, (ctx.page_w - ctx.margin) - right_val_x - 5 * mm)

    rows = [
        (config.INFO_LABELS["level"], plan.level or "", config.INFO_LABELS["client"], plan.client_name or ""),
        (config.INFO_LABELS["type"], plan.workout_type or "", config.INFO_LABELS["duration"], f"{plan.duration} settimane"),
    ]
    for left_label, left_value, right_label, right_value in rows:
        left_lines = wrap_to_width(ctx, left_value, left_max_w, regular, size)
        right_lines = wrap_to_width(ctx, right_value, right_max_w, regular, size)
        row_lines = max(len(left_lines), len(right_lines))
        ensure_space(ctx, row_lines * line_h)

        set_font(ctx, bold, size, colors.black)
        draw_string(ctx, ctx.margin, ctx.y, left_label)
        draw_string(ctx, mid, ctx.y, right_label)

        set_font(ctx, regular, size)
        for i, line in enumerate(left_lines):
            draw_string(ctx, left_val_x, ctx.y + i * line_h, line)
        for i, line in enumerate(right_lines):
            draw_string(ctx, right_val_x, ctx.y + i * line_h, line)
        ctx.y += row_lines * line_h + 2 * mm

    return ctx


def draw_text_section(ctx: LayoutContext, title: str, text: str) -> LayoutContext:
    regular, _, _ = _fonts(ctx.style)
    size = float(_s(ctx.style, "body_size", 10))

    _draw_section_title(ctx, title)
    ctx.y += 8 * mm

    set_font(ctx, regular, size, colors.black)
    return draw_lines(ctx, wrap_to_width(ctx, text, ctx.content_width, regular, size), ctx.margin, 5 * mm)


# -------------------- Weekly progression --------------------
def week_title(week: Week) -> str:
    return ((week.name or "").strip() or f"SETTIMANA {week.number}").upper()


def _note_lines(ctx: LayoutContext, exercise: Exercise, width: float) -> List[str]:
    if not exercise.notes:
        return []
    _, _, italic = _fonts(ctx.style)
    size = float(_s(ctx.style, "exercise_note_size", 7))
    return wrap_to_width(ctx, f"Note: {exercise.notes}", width, italic, size)


def _row_height(ctx: LayoutContext, note_lines: List[str]) -> float:
    if not note_lines:
        return ROW_H
    height = ROW_H + (len(note_lines) + 1) * NOTE_LINE_H
    # notes taller than a page keep only the row itself together, the rest flows
    return height if height <= ctx.bottom_limit - ctx.margin else ROW_H


def _draw_exercise_row(ctx: LayoutContext, exercise: Exercise, x0: float, widths: List[float]) -> None:
    regular, _, _ = _fonts(ctx.style)
    size = float(_s(ctx.style, "table_size", 8))
    set_font(ctx, regular, size)

    values = [exercise.name, exercise.sets, exercise.reps, exercise.load, exercise.rest]
    x = x0
    for value, w in zip(values, widths):
        # wrapped text may run past the fixed row height; the cell box stays put
        lines = wrap_to_width(ctx, value or "", w - 2 * CELL_PAD, regular, size)
        for i, line in enumerate(lines):
            draw_string(ctx, x + CELL_PAD, ctx.y + 4 * mm + i * CELL_LINE_H, line)
        draw_cell(ctx, x, ctx.y, w, ROW_H)
        x += w
    ctx.y += ROW_H


def draw_exercise_table(ctx: LayoutContext, exercises: Tuple[Exercise, ...]) -> LayoutContext:
    """
    Bordered five column table, one fixed-height row per exercise with its
    notes underneath. Space for a row and its notes is checked before the row
    is drawn, so rows never straddle a page break. Notes taller than a whole
    page flow on line by line after the row. The header row is only
    drawn once, at the start of the table.
    """
    _, bold, italic = _fonts(ctx.style)
    size = float(_s(ctx.style, "table_size", 8))
    note_size = float(_s(ctx.style, "exercise_note_size", 7))

    widths = [w * mm for w in config.TABLE_COL_WIDTHS_MM]
    x0 = ctx.margin + TABLE_INDENT
    table_w = sum(widths)

    first_notes = _note_lines(ctx, exercises[0], table_w)
    ensure_space(ctx, HEADER_ROW_H + _row_height(ctx, first_notes))

    set_stroke(ctx, ctx.line_color, 0.5)
    set_font(ctx, bold, size, colors.black)
    x = x0
    for label, w in zip(config.TABLE_HEADERS, widths):
        draw_string(ctx, x + CELL_PAD, ctx.y + 4 * mm, label)
        draw_cell(ctx, x, ctx.y, w, HEADER_ROW_H)
        x += w
    ctx.y += HEADER_ROW_H

    for exercise in exercises:
        notes = _note_lines(ctx, exercise, table_w)
        ensure_space(ctx, _row_height(ctx, notes))
        _draw_exercise_row(ctx, exercise, x0, widths)

        if notes:
            set_font(ctx, italic, note_size)
            ctx.y += NOTE_LINE_H
            draw_lines(ctx, notes, x0, NOTE_LINE_H)
            ctx.y += 2 * mm - NOTE_LINE_H

    return ctx


def draw_day(ctx: LayoutContext, day: Day) -> LayoutContext:
    _, bold, italic = _fonts(ctx.style)
    ensure_space(ctx, DAY_HEADER_RESERVE)

    set_font(ctx, bold, float(_s(ctx.style, "day_size", 11)), ctx.accent_color)
    draw_string(ctx, ctx.margin + 5 * mm, ctx.y, day.name or "GIORNO")
    ctx.y += 7 * mm

    if day.notes:
        note_size = float(_s(ctx.style, "day_note_size", 8))
        set_font(ctx, italic, note_size, colors.black)
        lines = wrap_to_width(ctx, day.notes, ctx.content_width - 10 * mm, italic, note_size)
        draw_lines(ctx, lines, ctx.margin + 10 * mm, NOTE_LINE_H)

    if day.exercises:
        draw_exercise_table(ctx, day.exercises)
        ctx.y += 10 * mm
    return ctx


def draw_week(ctx: LayoutContext, week: Week) -> LayoutContext:
    _, bold, italic = _fonts(ctx.style)
    ensure_space(ctx, WEEK_HEADER_RESERVE)

    set_font(ctx, bold, float(_s(ctx.style, "week_size", 12)), colors.black)
    draw_string(ctx, ctx.margin, ctx.y, week_title(week))
    ctx.y += 8 * mm

    if week.notes:
        note_size = float(_s(ctx.style, "week_note_size", 9))
        set_font(ctx, italic, note_size)
        draw_lines(ctx, wrap_to_width(ctx, week.notes, ctx.content_width, italic, note_size), ctx.margin, 4 * mm)

    for day in week.days:
        draw_day(ctx, day)

    ctx.y += 5 * mm
    return ctx


def draw_weekly_progression(ctx: LayoutContext, plan: Plan) -> LayoutContext:
    _draw_section_title(ctx, config.SECTION_TITLES["progression"])
    ctx.y += 10 * mm
    for week in plan.weeks:
        draw_week(ctx, week)
    return ctx


# -------------------- Glossary appendix --------------------
def collect_glossary_exercises(plan: Plan) -> List[Exercise]:
    """
    Exercises carrying a glossary snapshot, one per exercise name. The first
    occurrence wins, so two different exercises sharing a name collapse into
    one entry.
    """
    seen = set()
    out: List[Exercise] = []
    for week in plan.weeks:
        for day in week.days:
            for exercise in day.exercises:
                if exercise.glossary_content is None or exercise.name in seen:
                    continue
                seen.add(exercise.name)
                out.append(exercise)
    return out


def draw_glossary_appendix(ctx: LayoutContext, exercises: List[Exercise]) -> LayoutContext:
    if not exercises:
        return ctx

    regular, bold, _ = _fonts(ctx.style)
    body_size = float(_s(ctx.style, "body_size", 10))

    _draw_section_title(ctx, config.SECTION_TITLES["glossary"])
    ctx.y += 8 * mm

    for exercise in exercises:
        ensure_space(ctx, GLOSSARY_ENTRY_RESERVE)
        set_font(ctx, bold, float(_s(ctx.style, "glossary_name_size", 12)), colors.black)
        draw_string(ctx, ctx.margin, ctx.y, exercise.name)
        ctx.y += 6 * mm

        content = exercise.glossary_content
        if content.description:
            set_font(ctx, regular, body_size)
            lines = wrap_to_width(ctx, content.description, ctx.content_width, regular, body_size)
            draw_lines(ctx, lines, ctx.margin, 5 * mm)
            ctx.y += 5 * mm

        for index, image in enumerate(content.images):
            ensure_space(ctx, GLOSSARY_IMAGE_H)
            try:
                draw_image(ctx, image, ctx.margin, ctx.y, GLOSSARY_IMAGE_W, GLOSSARY_IMAGE_H)
            except Exception:
                logger.warning("Could not add image %d for exercise %s", index + 1, exercise.name, exc_info=True)
                continue
            ctx.y += GLOSSARY_IMAGE_H + 10 * mm

        set_stroke(ctx, _hex(_s(ctx.style, "separator_gray", "#C8C8C8")), 0.5)
        draw_rule(ctx, ctx.margin, ctx.page_w - ctx.margin, ctx.y)
        ctx.y += 10 * mm

    return ctx


# -------------------- Footer --------------------
def _handle(value: str) -> str:
    return value if value.startswith(("@", "http")) else f"@{value}"


def _website(value: str) -> str:
    return value if value.startswith("http") else f"https://{value}"


def contact_line(profile: Optional[StylingProfile]) -> str:
    if profile is None:
        return ""

    def clean(value: Optional[str]) -> str:
        return (value or "").strip()

    parts: List[str] = []
    if clean(profile.email):
        parts.append(f"Email: {clean(profile.email)}")
    if clean(profile.phone):
        parts.append(f"Tel: {clean(profile.phone)}")
    if clean(profile.instagram):
        parts.append(f"Instagram: {_handle(clean(profile.instagram))}")
    if clean(profile.facebook):
        parts.append(f"Facebook: {clean(profile.facebook)}")
    if clean(profile.website):
        parts.append(f"Web: {_website(clean(profile.website))}")
    return config.CONTACT_SEPARATOR.join(parts)


def format_date(value: date) -> str:
    # Italian short date, no zero padding: 5/3/2026
    return f"{value.day}/{value.month}/{value.year}"


def draw_footer(ctx: LayoutContext, profile: Optional[StylingProfile], today: date) -> LayoutContext:
    regular, _, italic = _fonts(ctx.style)
    size = float(_s(ctx.style, "footer_size", 8))
    gray = _hex(_s(ctx.style, "footer_gray", "#969696"))
    footer_y = ctx.page_h - 25 * mm

    contact = contact_line(profile)
    if contact:
        set_font(ctx, regular, size, _hex(_s(ctx.style, "coach_gray", "#646464")))
        for i, line in enumerate(wrap_to_width(ctx, contact, ctx.content_width, regular, size)):
            draw_string(ctx, ctx.page_w / 2, footer_y + i * 3.5 * mm, line, align="centre")

    set_font(ctx, italic, size, gray)
    if profile is None or profile.show_watermark:
        draw_string(ctx, ctx.margin, footer_y + 10 * mm, config.WATERMARK_TEXT)
    draw_string(ctx, ctx.page_w - ctx.margin, footer_y + 10 * mm, format_date(today), align="right")
    return ctx


# -------------------- Document --------------------
def render_plan(
    canv: canvas.Canvas,
    plan: Plan,
    profile: Optional[StylingProfile] = None,
    page_size: Tuple[float, float] = A4,
    today: Optional[date] = None,
) -> LayoutContext:
    style = load_style_preset()
    line_color = _hex(profile.line_color if profile else "", _hex(config.DEFAULT_LINE_COLOR))
    accent_color = _hex(profile.text_color if profile else "", _hex(config.DEFAULT_TEXT_COLOR))
    ctx = new_context(canv, page_size, style, line_color=line_color, accent_color=accent_color)

    draw_header(ctx, plan, profile)
    ctx.y += 10 * mm

    draw_plan_info(ctx, plan)
    ctx.y += 10 * mm

    if plan.description:
        draw_text_section(ctx, config.SECTION_TITLES["description"], plan.description)
        ctx.y += 10 * mm

    draw_weekly_progression(ctx, plan)

    if plan.dietary_advice:
        draw_text_section(ctx, config.SECTION_TITLES["dietary_advice"], plan.dietary_advice)
        ctx.y += 10 * mm

    glossary = collect_glossary_exercises(plan)
    if glossary:
        draw_glossary_appendix(ctx, glossary)

    # only the last page gets the footer
    draw_footer(ctx, profile, today or date.today())
    return ctx


def generate_plan_pdf(
    plan: Plan,
    profile: Optional[StylingProfile] = None,
    page_size: Tuple[float, float] = A4,
    today: Optional[date] = None,
) -> bytes:
    buffer = BytesIO()
    canv = canvas.Canvas(buffer, pagesize=page_size)
    canv.setTitle(document_title(plan, profile))
    try:
        render_plan(canv, plan, profile, page_size=page_size, today=today)
        canv.showPage()
        canv.save()
    except Exception as exc:
        raise PdfRenderError(f"Could not render plan {plan.id!r}: {exc}") from exc
    return buffer.getvalue()
