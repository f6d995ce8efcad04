from __future__ import annotations

import logging

from rapidfuzz.distance import Levenshtein

from patent_models import AnchoredLine, InvalidQueryError, MatchResult, SearchConfig, SearchToken

logger = logging.getLogger(__name__)


def build_index(lines: list[AnchoredLine]) -> list[SearchToken]:
    """Flatten body lines into lower-case word tokens, in the order given.

    Lines in column 0 are front matter or noise and contribute nothing.
    """
    tokens: list[SearchToken] = []
    for line in lines:
        if not line.column:
            continue
        for word in line.text.split():
            tokens.append(SearchToken(column=line.column, line=line.line_number, text=word.lower().strip()))
    logger.debug("indexed %d tokens from %d lines", len(tokens), len(lines))
    return tokens


def tokenize_query(query: str) -> list[str]:
    words = query.lower().strip().split()
    if not words:
        raise InvalidQueryError("query must contain at least one word")
    return words


def _is_close(candidate: str, target: str, max_distance: int) -> bool:
    return Levenshtein.distance(candidate, target, score_cutoff=max_distance) <= max_distance


def _ends_line(tokens: list[SearchToken], k: int) -> bool:
    nxt = tokens[k + 1]
    return (tokens[k].column, tokens[k].line) != (nxt.column, nxt.line)


def _match_at(
    tokens: list[SearchToken],
    start: int,
    query_tokens: list[str],
    config: SearchConfig,
) -> list[SearchToken] | None:
    matched: list[SearchToken] = []
    k = start
    for word in query_tokens:
        if k >= len(tokens):
            return None
        token = tokens[k]
        if _is_close(token.text, word, config.max_edit_distance):
            matched.append(token)
            k += 1
            continue

        # A word hyphenated across a line break arrives as two tokens.
        if (
            config.hyphenation_merge
            and k + 1 < len(tokens)
            and _ends_line(tokens, k)
            and _is_close(token.text + tokens[k + 1].text, word, config.max_edit_distance)
        ):
            matched.append(token)
            k += 2
            continue

        return None
    return matched


def search(index: list[SearchToken], query: str, config: SearchConfig | None = None) -> list[MatchResult]:
    """Find every contiguous run of tokens approximately equal to *query*.

    Each query word may differ from its token by up to config.max_edit_distance
    edits. A token ending its line may be joined with the next token to match
    one query word; only the first of the pair is recorded.
    """
    config = config or SearchConfig()
    query_tokens = tokenize_query(query)

    results: list[MatchResult] = []
    for i in range(len(index) - len(query_tokens) + 1):
        matched = _match_at(index, i, query_tokens, config)
        if matched is not None:
            results.append(MatchResult(tokens=matched))

    logger.debug("query %r: %d matches in %d tokens", query, len(results), len(index))
    return results
