from __future__ import annotations

from dataclasses import dataclass, field

MARGIN_NUMBERS: tuple[int, ...] = tuple(range(5, 70, 5))


@dataclass(frozen=True)
class TextFragment:
    """A positioned run of text as delivered by PDF extraction."""

    page: int
    x: float
    y: float
    width: float
    text: str


@dataclass
class Line:
    """All fragments sharing one page and baseline, concatenated in encounter order."""

    page: int
    x: float
    y: float
    width: float
    text: str


@dataclass
class AnchoredLine(Line):
    """A Line placed in a document column. Column 0 means front matter or noise."""

    column: int = 0
    line_number: int = 0


@dataclass(frozen=True)
class SearchToken:
    """One lower-cased word of a body line, tagged with its column and line."""

    column: int
    line: int
    text: str


@dataclass
class MatchResult:
    """Tokens whose concatenation approximately equals the query phrase."""

    tokens: list[SearchToken]

    @property
    def column(self) -> int:
        return self.tokens[0].column

    @property
    def line(self) -> int:
        return self.tokens[0].line

    @property
    def text(self) -> str:
        return " ".join(t.text for t in self.tokens)


@dataclass(frozen=True)
class LayoutConfig:
    """Thresholds for anchor, column and line-number heuristics.

    Coordinates are PDF user space: x grows rightward, y grows upward, so the
    top of a page has the largest y.
    """

    anchor_strategy: str = "header"
    column_strategy: str = "ordering"
    column_marker: str = "1"
    margin_numbers: tuple[int, ...] = MARGIN_NUMBERS
    margin_min_x: float = 263.0
    density_min_lines: int = 4
    left_column_max_x: float = 298.0
    right_column_min_x: float = 311.0
    line_gap: float = 12.0
    body_top_y: float = 712.0


@dataclass(frozen=True)
class SearchConfig:
    max_edit_distance: int = 2
    hyphenation_merge: bool = True


ANCHOR_STRATEGIES = ("header", "sheet", "density")
COLUMN_STRATEGIES = ("ordering", "x_threshold")


class PatentLayoutError(Exception):
    """Base class for errors raised by the reconstruction and search pipeline."""


class EmptyInputError(PatentLayoutError):
    pass


@dataclass(eq=False)
class AnchorNotFoundError(PatentLayoutError):
    document_id: str
    strategy: str
    detail: str = field(default="")

    def __str__(self) -> str:
        msg = f"no body anchor for {self.document_id!r} (strategy={self.strategy})"
        if self.detail:
            msg += f": {self.detail}"
        return msg


class InvalidQueryError(PatentLayoutError):
    pass
