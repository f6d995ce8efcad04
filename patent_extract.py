from __future__ import annotations

import logging
import warnings
from collections.abc import Iterable
from pathlib import Path

import pdfplumber

from patent_models import EmptyInputError, Line, TextFragment

logging.getLogger("pdfminer").setLevel(logging.ERROR)
warnings.filterwarnings("ignore", module="pdfminer")

logger = logging.getLogger(__name__)

_Y_PRECISION = 2
_MIN_GAP = 4.0
_GAP_FACTOR = 1.5


def chars_to_fragments(chars: list[dict], page_number: int, page_height: float) -> list[TextFragment]:
    """Group page.chars into positioned runs, keeping content-stream order.

    Characters are not sorted: the order in which the PDF draws them is what
    the ordering-based column rule relies on. A run ends when the baseline
    changes or the next character jumps backward or across a wide gap.
    Spaces stay inside the run text so that combining runs reproduces words.
    """
    fragments: list[TextFragment] = []
    current_text = ""
    current_x0 = 0.0
    current_x1 = 0.0
    current_y = 0.0

    def flush() -> None:
        if current_text.strip():
            fragments.append(
                TextFragment(
                    page=page_number,
                    x=current_x0,
                    y=current_y,
                    width=current_x1 - current_x0,
                    text=current_text,
                )
            )

    for c in chars:
        # pdfplumber measures from the top; fragments use the upward PDF axis.
        y = round(page_height - c["bottom"], _Y_PRECISION)
        if current_text:
            gap = c["x0"] - current_x1
            avg_char_width = (current_x1 - current_x0) / len(current_text)
            is_break = (
                y != current_y
                or gap < -avg_char_width
                or gap > max(avg_char_width * _GAP_FACTOR, _MIN_GAP)
            )
            if is_break:
                flush()
                current_text = ""

        if not current_text:
            current_x0 = c["x0"]
            current_y = y
        current_text += c["text"]
        current_x1 = c["x1"]

    if current_text:
        flush()

    return fragments


def extract_fragments(pdf_path: str | Path, start_page: int = 1) -> list[TextFragment]:
    """Return the text fragments of every page from *start_page* onward."""
    fragments: list[TextFragment] = []
    with pdfplumber.open(pdf_path) as pdf:
        for page in pdf.pages:
            if page.page_number < start_page:
                continue
            page_fragments = chars_to_fragments(page.chars, page.page_number, page.height)
            logger.debug("page %d: %d fragments", page.page_number, len(page_fragments))
            fragments.extend(page_fragments)
    return fragments


def combine_fragments(fragments: Iterable[TextFragment | Line]) -> list[Line]:
    """Merge fragments sharing an exact (page, y) into one Line each.

    Text and width accumulate in encounter order and x is taken from the first
    fragment seen for the key. Output order is first-encounter order; no
    sorting happens here.
    """
    by_key: dict[tuple[int, float], Line] = {}
    for frag in fragments:
        key = (frag.page, frag.y)
        line = by_key.get(key)
        if line is None:
            by_key[key] = Line(page=frag.page, x=frag.x, y=frag.y, width=frag.width, text=frag.text)
        else:
            line.text += frag.text
            line.width += frag.width

    if not by_key:
        raise EmptyInputError("no text fragments supplied")

    lines = list(by_key.values())
    logger.debug("combined fragments into %d lines", len(lines))
    return lines
