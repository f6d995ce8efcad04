from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Hashable, Iterable
from pathlib import Path

from patent_extract import combine_fragments, extract_fragments
from patent_layout import (
    assign_columns,
    assign_line_numbers,
    clean_lines,
    find_anchor,
    sort_reading_order,
    split_margin_numbers,
)
from patent_match import build_index, search
from patent_models import AnchoredLine, LayoutConfig, MatchResult, SearchConfig, TextFragment

logger = logging.getLogger(__name__)


def reconstruct_lines(
    fragments: Iterable[TextFragment],
    document_id: str,
    config: LayoutConfig | None = None,
) -> list[AnchoredLine]:
    """Run every layout stage and return numbered lines in reading order."""
    config = config or LayoutConfig()
    lines = combine_fragments(fragments)
    anchor = find_anchor(lines, document_id, config)
    anchored = assign_columns(lines, anchor, config)
    anchored = split_margin_numbers(anchored, config)
    anchored = sort_reading_order(anchored)
    anchored = clean_lines(anchored)
    return assign_line_numbers(anchored, config)


class LineCache:
    """Reconstructed lines per key.

    The key is whatever identifies one reconstruction: a bare document id, or
    (see cache_key) the id together with the source and layout settings.
    At most one reconstruction runs per key; later callers for the same key
    wait for it and share the result. Different keys never wait on each other.
    Failed reconstructions are not stored.
    """

    def __init__(self) -> None:
        self._lines: dict[Hashable, list[AnchoredLine]] = {}
        self._locks: dict[Hashable, threading.Lock] = {}
        self._guard = threading.Lock()

    def _lock_for(self, key: Hashable) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.Lock()
            return lock

    def get(self, key: Hashable, build: Callable[[], list[AnchoredLine]]) -> list[AnchoredLine]:
        cached = self._lines.get(key)
        if cached is not None:
            return cached

        with self._lock_for(key):
            cached = self._lines.get(key)
            if cached is not None:
                return cached
            logger.debug("reconstructing lines for %r", key)
            lines = build()
            self._lines[key] = lines
            return lines

    def __contains__(self, key: Hashable) -> bool:
        return key in self._lines

    def clear(self) -> None:
        with self._guard:
            self._lines.clear()
            self._locks.clear()


def cache_key(
    pdf_path: str | Path,
    document_id: str,
    start_page: int = 1,
    layout: LayoutConfig | None = None,
) -> tuple:
    """Key covering every input a reconstruction depends on."""
    return (document_id, str(Path(pdf_path).resolve()), start_page, layout or LayoutConfig())


def find_phrase(
    pdf_path: str | Path,
    document_id: str,
    query: str,
    start_page: int = 1,
    layout: LayoutConfig | None = None,
    search_config: SearchConfig | None = None,
    cache: LineCache | None = None,
) -> tuple[list[AnchoredLine], list[MatchResult]]:
    """Reconstruct *pdf_path* (through *cache* when given) and search it for *query*."""

    def build() -> list[AnchoredLine]:
        return reconstruct_lines(extract_fragments(pdf_path, start_page), document_id, layout)

    if cache is None:
        lines = build()
    else:
        lines = cache.get(cache_key(pdf_path, document_id, start_page, layout), build)
    return lines, search(build_index(lines), query, search_config)
