"""Column layout inference for two-column patent specifications.

Stages, in pipeline order:
  1. find_anchor          – locate where two-column body text begins
  2. assign_columns       – give every body line a document column
  3. split_margin_numbers – cut margin line-numbers (5, 10, ... 65) that
                            extraction merged into body text
  4. sort_reading_order   – (page, column, top-to-bottom)
  5. assign_line_numbers  – running line count within each column
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import replace

from patent_models import (
    ANCHOR_STRATEGIES,
    COLUMN_STRATEGIES,
    AnchoredLine,
    AnchorNotFoundError,
    LayoutConfig,
    Line,
)

logger = logging.getLogger(__name__)

_SHEET_RE = re.compile(r"\bsheet\s+(\d+)\s+of\s+(\d+)\b", re.IGNORECASE)
_BODY_COLUMNS = (1, 3)

_TEXT_FIXUPS: list[tuple[str, str]] = [
    (" ,", ","),
    (" /", "/"),
    (" ' ", "'"),
    (" -", "-"),
    (" . ", ". "),
]


def _margin_number_re(config: LayoutConfig) -> re.Pattern:
    alternatives = "|".join(str(n) for n in sorted(config.margin_numbers, key=lambda n: -len(str(n))))
    return re.compile(rf"(?:^|\s)({alternatives})(?=\s|$)")


def _avg_char_width(line: Line) -> float:
    return line.width / len(line.text) if line.text else 0.0


def find_margin_number(line: Line, config: LayoutConfig) -> tuple[re.Match, float] | None:
    """Return the first margin-number match whose estimated x falls in the gutter.

    Character positions are mapped to x assuming every character in the line
    has the same width. Numerals left of config.margin_min_x or right of
    config.right_column_min_x are taken to be prose.
    """
    avg = _avg_char_width(line)
    for m in _margin_number_re(config).finditer(line.text):
        found_x = line.x + avg * m.start(1)
        if config.margin_min_x < found_x < config.right_column_min_x:
            return m, found_x
    return None


# ---------------------------------------------------------------------------
# Anchor
# ---------------------------------------------------------------------------

def _squash(text: str) -> str:
    return "".join(text.split())


def _find_header_anchor(lines: list[Line], document_id: str, config: LayoutConfig) -> int | None:
    target = _squash(document_id)
    for i in range(len(lines) - 1):
        if _squash(lines[i].text) == target and lines[i + 1].text.strip() == config.column_marker:
            return i
    return None


def _find_sheet_anchor(lines: list[Line]) -> int | None:
    last_sheet_page = None
    for line in lines:
        m = _SHEET_RE.search(line.text)
        if m and m.group(1) == m.group(2):
            last_sheet_page = line.page
    if last_sheet_page is None:
        return None
    for i, line in enumerate(lines):
        if line.page > last_sheet_page:
            return i
    return None


def _find_density_anchor(lines: list[Line], config: LayoutConfig) -> int | None:
    counts: dict[int, int] = {}
    first_index: dict[int, int] = {}
    for i, line in enumerate(lines):
        first_index.setdefault(line.page, i)
        if find_margin_number(line, config) is None:
            continue
        counts[line.page] = counts.get(line.page, 0) + 1
        if counts[line.page] > config.density_min_lines:
            return first_index[line.page]
    return None


def find_anchor(lines: list[Line], document_id: str, config: LayoutConfig | None = None) -> int:
    """Return the index of the line where two-column body text begins.

    Raises AnchorNotFoundError when the configured strategy finds nothing.
    """
    config = config or LayoutConfig()
    strategy = config.anchor_strategy
    if strategy == "header":
        index = _find_header_anchor(lines, document_id, config)
    elif strategy == "sheet":
        index = _find_sheet_anchor(lines)
    elif strategy == "density":
        index = _find_density_anchor(lines, config)
    else:
        raise ValueError(f"unknown anchor strategy {strategy!r}; expected one of {ANCHOR_STRATEGIES}")

    if index is None:
        raise AnchorNotFoundError(document_id, strategy, f"searched {len(lines)} lines")

    logger.debug("anchor for %r at line %d (page %d, strategy=%s)", document_id, index, lines[index].page, strategy)
    return index


# ---------------------------------------------------------------------------
# Columns
# ---------------------------------------------------------------------------

def _anchored(line: Line, column: int = 0) -> AnchoredLine:
    return AnchoredLine(page=line.page, x=line.x, y=line.y, width=line.width, text=line.text, column=column)


def _columns_by_ordering(lines: list[Line], anchor_index: int) -> list[int]:
    """Columns from extraction order: a rise in y on the same page starts a new page column.

    Page columns 1 and 3 are body text; 2 and 4 hold margin numbers and are
    left unassigned.
    """
    columns = [0] * len(lines)
    page_column = 1
    document_column = 1
    for i in range(anchor_index, len(lines)):
        if i > anchor_index:
            prev, line = lines[i - 1], lines[i]
            if line.page == prev.page:
                if line.y > prev.y:
                    page_column += 1
                    if page_column in _BODY_COLUMNS:
                        document_column += 1
            else:
                page_column = 1
                document_column += 1
        if page_column in _BODY_COLUMNS:
            columns[i] = document_column
    return columns


def _columns_by_x(lines: list[Line], anchor_index: int, config: LayoutConfig) -> list[int]:
    """Columns from geometry: left of the gutter, right of it, or in it."""
    columns = [0] * len(lines)
    if anchor_index >= len(lines):
        return columns
    anchor_page = lines[anchor_index].page
    for i in range(anchor_index, len(lines)):
        line = lines[i]
        offset = 2 * (line.page - anchor_page)
        if line.x < config.left_column_max_x:
            columns[i] = offset + 1
        elif line.x > config.right_column_min_x:
            columns[i] = offset + 2
    return columns


def assign_columns(lines: list[Line], anchor_index: int, config: LayoutConfig | None = None) -> list[AnchoredLine]:
    """Return every line as an AnchoredLine; lines before the anchor get column 0."""
    config = config or LayoutConfig()
    if config.column_strategy == "ordering":
        columns = _columns_by_ordering(lines, anchor_index)
    elif config.column_strategy == "x_threshold":
        columns = _columns_by_x(lines, anchor_index, config)
    else:
        raise ValueError(
            f"unknown column strategy {config.column_strategy!r}; expected one of {COLUMN_STRATEGIES}"
        )

    anchored = [_anchored(line, col) for line, col in zip(lines, columns)]
    logger.debug(
        "assigned %d of %d lines to %d columns (strategy=%s)",
        sum(1 for c in columns if c),
        len(lines),
        len({c for c in columns if c}),
        config.column_strategy,
    )
    return anchored


# ---------------------------------------------------------------------------
# Margin numbers
# ---------------------------------------------------------------------------

def split_margin_numbers(lines: list[AnchoredLine], config: LayoutConfig | None = None) -> list[AnchoredLine]:
    """Strip margin numbers merged into body lines, splitting them in two.

    The text before the number keeps the line's column; the text after it
    moves to the next column. Halves that are blank once trimmed are dropped.
    Output order follows input order; callers re-sort afterwards.
    """
    config = config or LayoutConfig()
    result: list[AnchoredLine] = []
    split_count = 0
    for line in lines:
        found = find_margin_number(line, config) if line.column else None
        if found is None:
            result.append(line)
            continue

        m, _ = found
        avg = _avg_char_width(line)
        before = line.text[: m.start(1)]
        after = line.text[m.end(1) :]
        split_count += 1

        if before.strip():
            result.append(
                replace(line, text=before, width=avg * len(before))
            )
        if after.strip():
            result.append(
                replace(
                    line,
                    text=after,
                    x=line.x + avg * m.end(1),
                    width=avg * len(after),
                    column=line.column + 1,
                )
            )

    logger.debug("split %d lines on margin numbers", split_count)
    return result


# ---------------------------------------------------------------------------
# Ordering, cleanup and line numbers
# ---------------------------------------------------------------------------

def sort_reading_order(lines: list[AnchoredLine]) -> list[AnchoredLine]:
    """Page ascending, column ascending, then top of the page first."""
    return sorted(lines, key=lambda ln: (ln.page, ln.column, -ln.y))


def clean_line_text(text: str) -> str:
    text = text.strip()
    for old, new in _TEXT_FIXUPS:
        text = text.replace(old, new)
    return text


def clean_lines(lines: list[AnchoredLine]) -> list[AnchoredLine]:
    return [replace(ln, text=clean_line_text(ln.text)) for ln in lines]


def assign_line_numbers(lines: list[AnchoredLine], config: LayoutConfig | None = None) -> list[AnchoredLine]:
    """Number body lines within each column, in the order given.

    The count restarts at every unassigned line and every column change, so
    the first line of a column is line 1. A y-gap wider than config.line_gap
    counts as two lines, standing in for a blank line that produced no text.
    Lines in the page-header band are unassigned.
    """
    config = config or LayoutConfig()
    result: list[AnchoredLine] = []
    line_number = 0
    prev: AnchoredLine | None = None

    for line in lines:
        if line.column == 0 or line.y >= config.body_top_y:
            line_number = 0
            current = replace(line, column=0, line_number=0)
        else:
            if prev is None or prev.column != line.column:
                increment = 1
            else:
                gap = math.trunc(prev.y) - math.trunc(line.y)
                increment = 2 if gap > config.line_gap else 1
            line_number += increment
            current = replace(line, line_number=line_number)
        result.append(current)
        prev = current

    return result
