from __future__ import annotations

from dataclasses import dataclass
from io import BytesIO
from typing import Sequence

from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader, simpleSplit
from reportlab.pdfgen.canvas import Canvas

from .models import COLUMNS, ROWS, Plate
from .qr import make_qr_image


PAGE_SIZE = landscape(A4)


@dataclass(frozen=True)
class RenderOptions:
    game_code: str
    title: str = "PLAYLIST BINGO"
    join_url: str | None = None
    plates_per_page: int = 2
    shade_blank_cells: bool = True


def _fit_lines(
    canvas: Canvas,
    text: str,
    *,
    w: float,
    h: float,
    font_name: str,
    font_size: float,
    min_font_size: float,
    leading_ratio: float = 1.15,
) -> tuple[list[str], float]:
    size = font_size
    lines = simpleSplit(text, font_name, size, w)
    while size > min_font_size and len(lines) * size * leading_ratio > h:
        size -= 0.5
        lines = simpleSplit(text, font_name, size, w)

    max_lines = max(1, int(h // (size * leading_ratio)))
    if len(lines) > max_lines:
        lines = lines[:max_lines]
        last = lines[-1]
        while last and canvas.stringWidth(last + "…", font_name, size) > w:
            last = last[:-1]
        lines[-1] = last + "…"
    return lines, size


def _draw_cell_text(
    canvas: Canvas,
    text: str,
    *,
    x: float,
    y: float,
    w: float,
    h: float,
    font_name: str = "Helvetica",
    font_size: float = 10,
    min_font_size: float = 5.5,
    leading_ratio: float = 1.15,
) -> None:
    if not text.strip():
        return
    lines, size = _fit_lines(
        canvas,
        text,
        w=w,
        h=h,
        font_name=font_name,
        font_size=font_size,
        min_font_size=min_font_size,
        leading_ratio=leading_ratio,
    )
    line_height = size * leading_ratio
    total_h = len(lines) * line_height
    # Baseline of the top line, block centred vertically.
    start_y = y + (h + total_h) / 2 - size
    canvas.setFont(font_name, size)
    for i, line in enumerate(lines):
        canvas.drawCentredString(x + w / 2, start_y - i * line_height, line)


def _draw_plate(
    canvas: Canvas,
    plate: Plate,
    *,
    x: float,
    y: float,
    w: float,
    h: float,
    label: str,
    shade_blank_cells: bool,
) -> None:
    canvas.setFont("Helvetica-Bold", 11)
    canvas.drawString(x, y + h + 5, label)

    cell_w = w / COLUMNS
    cell_h = h / ROWS
    padding = 2

    for r, row in enumerate(plate.grid):
        cy = y + (ROWS - 1 - r) * cell_h  # top row first
        for c, cell in enumerate(row):
            cx = x + c * cell_w
            if not cell.is_filled and shade_blank_cells:
                canvas.setFillGray(0.85)
                canvas.rect(cx, cy, cell_w, cell_h, stroke=0, fill=1)
                canvas.setFillGray(0)
                continue
            _draw_cell_text(
                canvas,
                cell.content,
                x=cx + padding,
                y=cy + padding,
                w=cell_w - 2 * padding,
                h=cell_h - 2 * padding,
            )

    canvas.setStrokeColorRGB(0, 0, 0)
    canvas.setLineWidth(1)
    canvas.rect(x, y, w, h, stroke=1, fill=0)
    for i in range(1, COLUMNS):
        canvas.line(x + i * cell_w, y, x + i * cell_w, y + h)
    for i in range(1, ROWS):
        canvas.line(x, y + i * cell_h, x + w, y + i * cell_h)


def render_plates_pdf(
    plates: Sequence[Plate],
    opts: RenderOptions,
    *,
    labels: Sequence[str] | None = None,
) -> bytes:
    if opts.plates_per_page <= 0:
        raise ValueError("plates_per_page must be > 0")
    if labels is not None and len(labels) != len(plates):
        raise ValueError(f"Expected {len(plates)} labels, got {len(labels)}")

    buf = BytesIO()
    canvas = Canvas(buf, pagesize=PAGE_SIZE)
    page_w, page_h = PAGE_SIZE

    margin_x = 12 * mm
    margin_y = 10 * mm
    header_h = 16 * mm
    footer_h = 26 * mm if opts.join_url else 8 * mm
    label_h = 7 * mm
    gap = 6 * mm

    grid_w = page_w - 2 * margin_x
    slot_h = (page_h - 2 * margin_y - header_h - footer_h - gap * (opts.plates_per_page - 1)) / opts.plates_per_page
    grid_h = slot_h - label_h

    qr_reader = ImageReader(make_qr_image(opts.join_url)) if opts.join_url else None

    def draw_header() -> None:
        top = page_h - margin_y
        canvas.setFont("Helvetica-Bold", 18)
        canvas.drawString(margin_x, top - 18, opts.title)
        canvas.setFont("Helvetica-Bold", 14)
        canvas.drawRightString(page_w - margin_x, top - 18, f"Game code: {opts.game_code}")

    def draw_footer(page_no: int) -> None:
        if qr_reader is not None:
            qr_size = footer_h - 4 * mm
            canvas.drawImage(qr_reader, margin_x, margin_y, width=qr_size, height=qr_size, mask="auto")
            canvas.setFont("Helvetica", 9)
            canvas.drawString(margin_x + qr_size + 4 * mm, margin_y + qr_size / 2, f"Join: {opts.join_url}")
        canvas.setFont("Helvetica", 8)
        canvas.drawRightString(page_w - margin_x, margin_y, f"Page {page_no}")

    page_no = 0
    for start in range(0, len(plates), opts.plates_per_page):
        page_no += 1
        draw_header()
        chunk = plates[start : start + opts.plates_per_page]
        for i, plate in enumerate(chunk):
            index = start + i
            label = labels[index] if labels is not None else f"Plate {index + 1}"
            grid_y = page_h - margin_y - header_h - (i + 1) * slot_h - i * gap
            _draw_plate(
                canvas,
                plate,
                x=margin_x,
                y=grid_y,
                w=grid_w,
                h=grid_h,
                label=label,
                shade_blank_cells=opts.shade_blank_cells,
            )
        draw_footer(page_no)
        canvas.showPage()

    canvas.save()
    return buf.getvalue()
