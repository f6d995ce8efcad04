"""Find a phrase in a two-column patent specification PDF.

Pipeline:
  1. extract_fragments     – positioned text runs from page.chars
  2. reconstruct_lines
       a) combine_fragments    – one Line per (page, baseline)
       b) find_anchor          – where two-column body text begins
       c) assign_columns       – document column per body line
       d) split_margin_numbers – strip merged margin line-numbers
       e) assign_line_numbers  – column:line coordinates as printed
  3. search                – fuzzy, hyphenation-aware phrase match

Matches are reported as ``column:line`` citations, the way patent text is
usually cited.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from patent_models import (
    ANCHOR_STRATEGIES,
    COLUMN_STRATEGIES,
    AnchoredLine,
    LayoutConfig,
    MatchResult,
    PatentLayoutError,
    SearchConfig,
)
from patent_pipeline import find_phrase


def find_line(lines: list[AnchoredLine], column: int, line_number: int) -> AnchoredLine | None:
    """Return the body line at *column*:*line_number*, or None."""
    for ln in lines:
        if ln.column == column and ln.line_number == line_number:
            return ln
    return None


def match_record(match: MatchResult, lines: list[AnchoredLine]) -> dict:
    ln = find_line(lines, match.column, match.line)
    return {
        "page": ln.page if ln else None,
        "column": match.column,
        "line": match.line,
        "matched": match.text,
        "context": ln.text if ln else "",
    }


def format_report(matches: list[MatchResult], lines: list[AnchoredLine], verbose: bool = False) -> str:
    if not matches:
        return "No matches found."

    out: list[str] = [f"{len(matches)} match{'es' if len(matches) != 1 else ''}:"]
    for rank, match in enumerate(matches, 1):
        ln = find_line(lines, match.column, match.line)
        page = f"page {ln.page}" if ln else "page ?"
        out.append(f"  #{rank} {match.column}:{match.line}  ({page})  {match.text!r}")
        if verbose and ln:
            out.append(f"      Context:     {ln.text}")
    return "\n".join(out)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Find a phrase in a two-column patent specification PDF.",
    )
    parser.add_argument("pdf", help="Path to the PDF file")
    parser.add_argument("document_id", help='Document number as printed in the page header, e.g. "US 9,740,988 B2"')
    parser.add_argument("query", help="Phrase to search for")
    parser.add_argument(
        "--start-page",
        type=int, default=1, metavar="N",
        help="Skip pages before N, e.g. drawing sheets (default: 1)",
    )
    parser.add_argument(
        "--anchor",
        choices=ANCHOR_STRATEGIES, default=LayoutConfig.anchor_strategy,
        help="How to find the start of the body text (default: %(default)s)",
    )
    parser.add_argument(
        "--columns",
        choices=COLUMN_STRATEGIES, default=LayoutConfig.column_strategy,
        help="How to assign columns (default: %(default)s)",
    )
    parser.add_argument(
        "--left-max-x",
        type=float, default=LayoutConfig.left_column_max_x, metavar="X",
        help="Left column ends before this x (default: %(default)s)",
    )
    parser.add_argument(
        "--right-min-x",
        type=float, default=LayoutConfig.right_column_min_x, metavar="X",
        help="Right column starts after this x (default: %(default)s)",
    )
    parser.add_argument(
        "--max-edits",
        type=int, default=SearchConfig.max_edit_distance, metavar="N",
        help="Edit distance tolerated per word (default: %(default)s)",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print matches as a JSON array",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Show line context and pipeline diagnostics",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    path = Path(args.pdf)
    if not path.exists():
        print(f"Error: file not found: {path}", file=sys.stderr)
        return 1

    layout = LayoutConfig(
        anchor_strategy=args.anchor,
        column_strategy=args.columns,
        left_column_max_x=args.left_max_x,
        right_column_min_x=args.right_min_x,
    )
    search_config = SearchConfig(max_edit_distance=args.max_edits)

    try:
        lines, matches = find_phrase(path, args.document_id, args.query, args.start_page, layout, search_config)
    except PatentLayoutError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps([match_record(m, lines) for m in matches], indent=2))
    else:
        print(format_report(matches, lines, args.verbose))
    return 0


if __name__ == "__main__":
    sys.exit(main())
