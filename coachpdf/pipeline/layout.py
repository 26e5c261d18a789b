from __future__ import annotations

import base64
from dataclasses import dataclass, field
from io import BytesIO
from typing import List, Tuple

from reportlab.lib import colors
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from ..models import ImagePayload


def _hex(value: str, default=colors.black) -> colors.Color:
    if not value:
        return default
    try:
        return colors.HexColor("#" + str(value).lstrip("#"))
    except Exception:
        return default


def _s(style: dict, key: str, default):
    return style.get(key, default)


@dataclass
class LayoutContext:
    """
    Page geometry and cursor for one document.

    ``y`` grows downwards from the top edge like a text cursor; the drawing
    helpers below flip it into ReportLab's bottom-up coordinates. Font, fill
    and stroke are remembered so a page break can restore them, since
    ``showPage`` resets the graphics state.
    """

    canv: canvas.Canvas
    page_w: float
    page_h: float
    style: dict
    margin: float = 20 * mm
    bottom_margin: float = 30 * mm
    y: float = 20 * mm
    line_color: colors.Color = field(default_factory=lambda: colors.black)
    accent_color: colors.Color = field(default_factory=lambda: _hex("#4F46E5"))
    font: Tuple[str, float] = ("Helvetica", 10.0)
    fill_color: colors.Color = field(default_factory=lambda: colors.black)
    stroke: Tuple[colors.Color, float] = (colors.black, 1.0)

    @property
    def content_width(self) -> float:
        return self.page_w - 2 * self.margin

    @property
    def bottom_limit(self) -> float:
        return self.page_h - self.bottom_margin

    @property
    def page_number(self) -> int:
        return self.canv.getPageNumber()


def new_context(
    canv: canvas.Canvas,
    page_size: Tuple[float, float],
    style: dict,
    line_color: colors.Color = colors.black,
    accent_color: colors.Color | None = None,
) -> LayoutContext:
    pw, ph = page_size
    margin = float(_s(style, "margin_mm", 20)) * mm
    ctx = LayoutContext(
        canv=canv,
        page_w=pw,
        page_h=ph,
        style=style,
        margin=margin,
        bottom_margin=float(_s(style, "bottom_margin_mm", 30)) * mm,
        y=margin,
        line_color=line_color,
    )
    if accent_color is not None:
        ctx.accent_color = accent_color
    return ctx


# -------------------- Measuring --------------------
def measure_width(ctx: LayoutContext, text: str, font_name: str, font_size: float) -> float:
    return ctx.canv.stringWidth(text, font_name, font_size)


def _break_word(ctx: LayoutContext, word: str, font_name: str, font_size: float, max_width: float) -> List[str]:
    pieces: List[str] = []
    cur = ""
    for ch in word:
        if cur and measure_width(ctx, cur + ch, font_name, font_size) > max_width:
            pieces.append(cur)
            cur = ch
        else:
            cur += ch
    pieces.append(cur)
    return pieces


def _wrap_paragraph(ctx: LayoutContext, text: str, font_name: str, font_size: float, max_width: float) -> List[str]:
    words = text.split()
    if not words:
        return [""]

    lines: List[str] = []
    cur = ""

    for w in words:
        test = f"{cur} {w}" if cur else w
        if measure_width(ctx, test, font_name, font_size) <= max_width:
            cur = test
            continue

        if cur:
            lines.append(cur)
        if measure_width(ctx, w, font_name, font_size) <= max_width:
            cur = w
        else:
            # a single word wider than the box is split by characters
            *full, cur = _break_word(ctx, w, font_name, font_size, max_width)
            lines.extend(full)

    lines.append(cur)
    return lines


def wrap_to_width(ctx: LayoutContext, text: str, max_width: float, font_name: str, font_size: float) -> List[str]:
    """
    Greedy word wrap. Newlines start a new line, runs of whitespace collapse
    to one space, every other character is kept. Any returned line wraps to
    itself again.
    """
    paragraphs = (text or "").splitlines() or [""]
    lines: List[str] = []
    for paragraph in paragraphs:
        lines.extend(_wrap_paragraph(ctx, paragraph, font_name, font_size, max_width))
    return lines


def fit_font_size(
    ctx: LayoutContext,
    text: str,
    font_name: str,
    max_size: float,
    max_width: float,
    min_size: float = 7.0,
    step: float = 0.5,
) -> float:
    """
    Largest size, stepping down from max_size, at which the text fits
    max_width. Never goes below min_size even if the text still overflows.
    """
    size = float(max_size)
    while size > min_size:
        if measure_width(ctx, text, font_name, size) <= max_width:
            return size
        size -= step
    return float(min_size)


# -------------------- Pagination --------------------
def new_page(ctx: LayoutContext) -> LayoutContext:
    ctx.canv.showPage()
    ctx.y = ctx.margin
    font_name, font_size = ctx.font
    ctx.canv.setFont(font_name, font_size)
    ctx.canv.setFillColor(ctx.fill_color)
    stroke_color, line_width = ctx.stroke
    ctx.canv.setStrokeColor(stroke_color)
    ctx.canv.setLineWidth(line_width)
    return ctx


def ensure_space(ctx: LayoutContext, required: float) -> bool:
    if ctx.y + required > ctx.bottom_limit:
        new_page(ctx)
        return True
    return False


# -------------------- Drawing --------------------
def set_font(ctx: LayoutContext, font_name: str, font_size: float, color: colors.Color | None = None) -> None:
    ctx.font = (font_name, float(font_size))
    ctx.canv.setFont(font_name, font_size)
    if color is not None:
        ctx.fill_color = color
        ctx.canv.setFillColor(color)


def set_stroke(ctx: LayoutContext, color: colors.Color, line_width: float) -> None:
    ctx.stroke = (color, float(line_width))
    ctx.canv.setStrokeColor(color)
    ctx.canv.setLineWidth(line_width)


def draw_string(ctx: LayoutContext, x: float, y: float, text: str, align: str = "left") -> None:
    yy = ctx.page_h - y
    if align == "centre":
        ctx.canv.drawCentredString(x, yy, text)
    elif align == "right":
        ctx.canv.drawRightString(x, yy, text)
    else:
        ctx.canv.drawString(x, yy, text)


def draw_lines(ctx: LayoutContext, lines: List[str], x: float, line_h: float, align: str = "left") -> LayoutContext:
    # one baseline per line, breaking pages between lines but never inside one
    for line in lines:
        ensure_space(ctx, line_h)
        draw_string(ctx, x, ctx.y, line, align=align)
        ctx.y += line_h
    return ctx


def draw_rule(ctx: LayoutContext, x1: float, x2: float, y: float) -> None:
    ctx.canv.line(x1, ctx.page_h - y, x2, ctx.page_h - y)


def draw_cell(ctx: LayoutContext, x: float, y: float, w: float, h: float) -> None:
    ctx.canv.rect(x, ctx.page_h - y - h, w, h, stroke=1, fill=0)


def image_reader(payload: ImagePayload) -> ImageReader:
    if isinstance(payload, str):
        data = payload.split(",", 1)[1] if payload.startswith("data:") else payload
        raw = base64.b64decode(data)
    else:
        raw = bytes(payload)
    return ImageReader(BytesIO(raw))


def draw_image(ctx: LayoutContext, payload: ImagePayload, x: float, y: float, w: float, h: float) -> None:
    reader = image_reader(payload)
    ctx.canv.drawImage(reader, x, ctx.page_h - y - h, w, h, preserveAspectRatio=True, mask="auto")
