"""
Approximate item search over raw op records.

Scoring follows the bitap convention: 0.0 is a perfect match at the expected
location, 1.0 is no match at all. For each indexed field the pattern is
aligned against its best-matching substring (fewest edits), then penalized
by how far that substring starts from ``options.location``.

Two choices differ from Fuse.js, whose options this module mirrors:

- Queries longer than ``max_pattern_length`` are cut to that length rather
  than falling back to a token search, so only their prefix is matched.
- A record ranks by its best-scoring key, not by the mean of its matching
  keys, so one strong field is enough to sort it first.
"""

from __future__ import annotations

from typing import Any

from opclient.models import FuzzyOptions


def field_value(record: dict[str, Any], path: str) -> str:
    """Resolve a dotted key path ("overview.title") to a string, or ""."""
    value: Any = record
    for part in path.split("."):
        if not isinstance(value, dict):
            return ""
        value = value.get(part)
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def best_alignment(pattern: str, text: str) -> list[tuple[int, int]]:
    """Return (errors, start) for every end position of ``pattern`` in ``text``.

    Approximate substring matching (Sellers): the edit distance between the
    pattern and the best substring of text ending at each position.
    """
    m = len(pattern)
    # column[i] = (distance, start) for pattern[:i] against text ending here
    column = [(i, 0) for i in range(m + 1)]
    results = []
    for j, ch in enumerate(text, start=1):
        prev_diag = column[0]
        column[0] = (0, j)
        for i in range(1, m + 1):
            above = column[i]
            cost = 0 if pattern[i - 1] == ch else 1
            candidates = (
                (prev_diag[0] + cost, prev_diag[1]),
                (above[0] + 1, above[1]),
                (column[i - 1][0] + 1, column[i - 1][1]),
            )
            column[i] = min(candidates)
            prev_diag = above
        results.append(column[m])
    return results


def score_text(pattern: str, text: str, options: FuzzyOptions) -> float | None:
    """Score one field. None when nothing in it is within the threshold."""
    if not text:
        return None
    best: float | None = None
    for errors, start in best_alignment(pattern, text.lower()):
        if len(pattern) - errors < options.min_match_char_length:
            continue
        accuracy = errors / len(pattern)
        proximity = abs(options.location - start)
        if options.distance == 0:
            score = accuracy if proximity == 0 else 1.0
        else:
            score = accuracy + proximity / options.distance
        if score <= options.threshold and (best is None or score < best):
            best = score
    return best


def score_record(pattern: str, record: dict[str, Any], options: FuzzyOptions) -> float | None:
    """Best score across the indexed keys of one raw record."""
    scores = [
        s
        for key in options.keys
        if (s := score_text(pattern, field_value(record, key), options)) is not None
    ]
    return min(scores) if scores else None


def search(
    records: list[dict[str, Any]], query: str, options: FuzzyOptions | None = None
) -> list[dict[str, Any]]:
    """Return the records matching ``query`` within ``options.threshold``."""
    options = options or FuzzyOptions()
    pattern = query.lower()[: options.max_pattern_length]
    if not pattern:
        return list(records)

    scored = []
    for record in records:
        score = score_record(pattern, record, options)
        if score is not None:
            scored.append((score, record))

    if options.should_sort:
        scored.sort(key=lambda pair: pair[0])
    return [record for _, record in scored]
