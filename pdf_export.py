# pdf_export.py - pipecutter ver1.0
#
# This file handles all PDF output:
# - Summary page with stacked tables (stock usage, totals)
# - One page (or more) per solved order with every pattern drawn as a bar
# - Lucida Sans Unicode fonts + optional monospace for numeric alignment
# - Currency formatting

from reportlab.pdfgen import canvas
from reportlab.lib.pagesizes import A4, portrait, landscape
from reportlab.lib.colors import Color, black, white
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont

from typing import Dict, List, Optional, Sequence, Tuple

from costing import GlobalSummary
from io_utils import OrderJob, parse_bool
from models import Pattern, Solution

import os


# ------------------------------------------------------------
# mm -> pt
# ------------------------------------------------------------
def mm_to_pt(mm: float) -> float:
    return mm * 72.0 / 25.4


# ------------------------------------------------------------
# Parse hex RGB like "F00", "FF0000"
# ------------------------------------------------------------
def parse_rgb(hex_str: str) -> Color:
    s = hex_str.strip().lstrip("#")
    if len(s) == 3:
        s = "".join(ch * 2 for ch in s)
    if len(s) != 6:
        return black
    try:
        r = int(s[0:2], 16) / 255
        g = int(s[2:4], 16) / 255
        b = int(s[4:6], 16) / 255
    except ValueError:
        return black
    return Color(r, g, b)


# ------------------------------------------------------------
# FONT LOADING (Lucida Sans Unicode)
# ------------------------------------------------------------
# Lucida Sans Unicode is used when installed, Helvetica otherwise.
# Numeric columns use the builtin Courier.

LUCIDA_NAME = "LucidaSansUnicode_pc"
MONO_NAME = "Courier"

_LUCIDA_PATHS = [
    "/usr/share/fonts/truetype/lucida/LucidaSansUnicode.ttf",
    "/usr/share/fonts/truetype/LucidaSansUnicode.ttf",
    "/Library/Fonts/LucidaSansUnicode.ttf",
    "C:/Windows/Fonts/l_10646.ttf",
    "C:/Windows/Fonts/LSANS.TTF",
]


def register_fonts():
    global LUCIDA_NAME

    if LUCIDA_NAME in pdfmetrics.getRegisteredFontNames():
        return

    lucida_path = next((p for p in _LUCIDA_PATHS if os.path.isfile(p)), None)
    if lucida_path:
        pdfmetrics.registerFont(TTFont(LUCIDA_NAME, lucida_path))
    else:
        LUCIDA_NAME = "Helvetica"


# ------------------------------------------------------------
# WHITE BACKGROUND LABEL
# ------------------------------------------------------------

def draw_label(c: canvas.Canvas, text: str, x_pt: float, y_pt: float,
               font_size: float, color: Color, mono: bool = False):
    """
    Draws a centered label with a white padded background box.
    """
    font = MONO_NAME if mono else LUCIDA_NAME
    c.setFont(font, font_size)

    w = pdfmetrics.stringWidth(text, font, font_size)
    pad = font_size * 0.4
    box_w = w + pad * 2
    box_h = font_size * 1.5

    c.setFillColor(white)
    c.rect(x_pt - box_w / 2, y_pt - box_h / 2, box_w, box_h, fill=1, stroke=0)

    c.setFillColor(color)
    c.drawCentredString(x_pt, y_pt - font_size * 0.45, text)


# ------------------------------------------------------------
# PATTERN BAR
# ------------------------------------------------------------

def draw_pattern_bar(c: canvas.Canvas,
                     pattern: Pattern,
                     x0_pt: float, y_top_pt: float,
                     scale: float, bar_h_pt: float,
                     stock_color: Color, piece_color: Color, offcut_color: Color,
                     font_size: float = 8):
    """
    Stock outline, one outlined segment per cut piece (left to right),
    offcut segment hatched in the offcut colour at the right end.
    """
    stock_w_pt = pattern.source.length * scale
    y_bottom = y_top_pt - bar_h_pt

    # stock length caption left of the bar
    c.setFillColor(stock_color)
    c.setFont(MONO_NAME, font_size)
    caption = f"{pattern.source.length:.2f}"
    tw = pdfmetrics.stringWidth(caption, MONO_NAME, font_size)
    c.drawString(x0_pt - tw - 6, y_bottom + bar_h_pt / 2 - font_size * 0.35, caption)

    # pieces
    x = x0_pt
    c.setStrokeColor(piece_color)
    for p in pattern.pieces:
        w = p.length * scale
        c.rect(x, y_bottom, w, bar_h_pt, stroke=1, fill=0)
        draw_label(c, f"{p.length:.2f}", x + w / 2, y_bottom + bar_h_pt / 2,
                   font_size, piece_color, mono=True)
        x += w

    # offcut
    if pattern.offcut > 0:
        w = pattern.offcut * scale
        c.setStrokeColor(offcut_color)
        c.setFillColor(offcut_color)
        c.rect(x, y_bottom, w, bar_h_pt, stroke=1, fill=0)
        step = mm_to_pt(2)
        hx = x
        while hx < x + w:
            c.line(hx, y_bottom, min(hx + bar_h_pt, x + w), y_bottom + min(bar_h_pt, x + w - hx))
            hx += step

    # stock outline on top
    c.setStrokeColor(stock_color)
    c.setLineWidth(1.5)
    c.rect(x0_pt, y_bottom, stock_w_pt, bar_h_pt, stroke=1, fill=0)
    c.setLineWidth(1)


def draw_order_pages(c: canvas.Canvas,
                     page_w_pt: float, page_h_pt: float,
                     margin_mm: float,
                     solution: Solution,
                     max_stock_length: float,
                     stock_color: Color, piece_color: Color, offcut_color: Color,
                     order_number: int, total_orders: int):
    """
    Draws:
      - Header (customer, totals)
      - One bar per pattern, continued on further pages when needed
    Leaves the last page open; the caller calls showPage().
    """
    margin_pt = mm_to_pt(margin_mm)
    header_h_pt = mm_to_pt(20)
    caption_w_pt = mm_to_pt(20)
    bar_h_pt = mm_to_pt(8)
    gap_pt = mm_to_pt(5)

    usable_w_pt = page_w_pt - 2 * margin_pt - caption_w_pt
    scale = usable_w_pt / max_stock_length if max_stock_length > 0 else 1
    x0_pt = margin_pt + caption_w_pt

    def header(page_label: str) -> float:
        c.setFont(LUCIDA_NAME, 14)
        c.setFillColor(black)
        c.drawString(
            margin_pt, page_h_pt - margin_pt - 12,
            f"{solution.order.customer} (order {order_number}/{total_orders}{page_label})"
        )
        c.setFont(LUCIDA_NAME, 10)
        c.drawString(
            margin_pt, page_h_pt - margin_pt - 28,
            f"Offcuts: {solution.total_offcut:.2f}    Number of Cuttings: {solution.total_pieces}"
            f"    Stock pieces: {len(solution.patterns)}"
        )
        return page_h_pt - margin_pt - header_h_pt

    y = header("")
    for p in solution.patterns:
        if y - bar_h_pt < margin_pt:
            c.showPage()
            y = header(", continued")
        draw_pattern_bar(c, p, x0_pt, y, scale, bar_h_pt,
                         stock_color, piece_color, offcut_color)
        y -= bar_h_pt + gap_pt


# ------------------------------------------------------------
# TABLE DRAWING ENGINE (FULL-WIDTH, STACKED TABLES)
# ------------------------------------------------------------

def draw_table(
    c: canvas.Canvas,
    x0_pt: float, y0_pt: float,
    col_widths: List[float],
    row_height_pt: float,
    data: List[List[str]],
    font_size: float = 10,
    numeric_cols: List[int] = None
):
    """
    Draws a table with a black grid; numeric columns are right aligned in
    monospace. x0_pt, y0_pt = top-left corner of table.
    """

    if numeric_cols is None:
        numeric_cols = []

    for r, row in enumerate(data):
        y_top = y0_pt - r * row_height_pt

        for c_idx, w in enumerate(col_widths):
            x_left = x0_pt + sum(col_widths[:c_idx])

            c.setStrokeColor(black)
            c.setLineWidth(1)
            c.rect(x_left, y_top - row_height_pt, w, row_height_pt, stroke=1, fill=0)

            text = row[c_idx] if row[c_idx] is not None else ""
            font_name = MONO_NAME if c_idx in numeric_cols else LUCIDA_NAME
            c.setFont(font_name, font_size)
            c.setFillColor(black)

            ty = y_top - row_height_pt + (row_height_pt * 0.33)
            if c_idx in numeric_cols:
                tw = pdfmetrics.stringWidth(text, font_name, font_size)
                c.drawString(x_left + w - tw - 3, ty, text)
            else:
                c.drawString(x_left + 3, ty, text)


# ------------------------------------------------------------
# SUMMARY PAGE
# ------------------------------------------------------------

def summary_tables(summary: GlobalSummary) -> Tuple[List[List[str]], List[List[str]]]:
    currency = summary.currency
    stock_data = [["Stock length", "Pieces used", "Total length", "Offcuts", "Cost"]]
    for length, su in summary.stock_usages.items():
        stock_data.append([
            f"{length:.2f}",
            f"{su.pieces_used}",
            f"{su.total_length:.2f}",
            f"{su.total_offcut:.2f}",
            f"{su.cost:.2f} {currency}",
        ])

    totals_data = [
        ["Category", "Value"],
        ["Orders solved", f"{summary.orders_solved}"],
        ["Orders failed", f"{summary.orders_failed}"],
        ["Demand length", f"{summary.total_demand_length:.2f}"],
        ["Stock length", f"{summary.total_stock_length:.2f}"],
        ["Offcuts", f"{summary.total_offcut:.2f}"],
        ["Number of Cuttings", f"{summary.total_cuttings}"],
        ["Utilization", f"{summary.utilization_percent:.1f} %"],
        ["TOTAL", f"{summary.grand_total_cost:.2f} {currency}"],
    ]
    return stock_data, totals_data


def draw_summary_page(
    c: canvas.Canvas,
    page_w_pt: float,
    page_h_pt: float,
    margin_mm: float,
    summary: GlobalSummary
):
    """
    Draws:
      Header
      Table 1: Stock usage per catalog length
      Table 2: Totals
    """
    margin_pt = mm_to_pt(margin_mm)
    y = page_h_pt - margin_pt

    c.setFont(LUCIDA_NAME, 20)
    c.setFillColor(black)
    c.drawString(margin_pt, y, "pipecutter cutting summary")
    y -= mm_to_pt(15)

    table_width = page_w_pt - 2 * margin_pt
    row_h = mm_to_pt(7)

    stock_data, totals_data = summary_tables(summary)

    draw_table(c, margin_pt, y, [table_width / 5] * 5, row_h, stock_data,
               font_size=9, numeric_cols=[0, 1, 2, 3, 4])
    y -= row_h * len(stock_data) + mm_to_pt(10)

    draw_table(c, margin_pt, y, [table_width * 0.4, table_width * 0.6], row_h, totals_data,
               font_size=10, numeric_cols=[1])


# ------------------------------------------------------------
# FINAL PDF GENERATOR
# ------------------------------------------------------------

def generate_pdf(
    output_path: str,
    results: Sequence[Tuple[OrderJob, Optional[Solution]]],
    summary: GlobalSummary,
    max_stock_length: float,
    cfg: Dict[str, str]
):
    """
    Generates the complete PDF:
      - optional summary page
      - order pages for every solved order
    """
    register_fonts()

    gen_summary = parse_bool(cfg.get("generate-summary", "true"))

    stock_color = parse_rgb(cfg.get("stock-color", "000"))
    piece_color = parse_rgb(cfg.get("piece-color", "777"))
    offcut_color = parse_rgb(cfg.get("offcut-color", "F00"))

    margin_mm = float(cfg.get("margin", "10"))

    orientation = (cfg.get("orientation", "h") or "h").lower()
    pagesize = landscape(A4) if orientation == "h" else portrait(A4)
    page_w_pt, page_h_pt = pagesize

    c = canvas.Canvas(output_path, pagesize=pagesize)

    if gen_summary:
        draw_summary_page(c, page_w_pt, page_h_pt, margin_mm, summary)
        c.showPage()

    solved = [s for _, s in results if s]
    for idx, solution in enumerate(solved, start=1):
        draw_order_pages(
            c, page_w_pt, page_h_pt, margin_mm, solution, max_stock_length,
            stock_color, piece_color, offcut_color,
            order_number=idx, total_orders=len(solved)
        )
        c.showPage()

    c.save()
