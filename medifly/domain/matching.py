"""
Approximate Text Matching
=========================

Tiered similarity score in ``[0, 100]`` between a search query and a
candidate field:

1. **Exact**      -- case-insensitive equality           -> 100
2. **Substring**  -- candidate contains the query         -> 80
3. **Fuzzy**      -- normalised Levenshtein similarity x cap (default 60)

The fuzzy tier scores cap x (max_len - d) / max_len.  With any cap below
80 that stays under the substring score for strings that failed tier 2,
so fuzzy matches never outrank substring or exact matches.

Complexity
----------
Tiers 1 and 2 are O(n + m).  Tier 3 is O(n x m) time and space using the
full dynamic-programming table; fields here are short (names, addresses),
so the table stays small.
"""

from __future__ import annotations

import re

EXACT_SCORE = 100.0
SUBSTRING_SCORE = 80.0
FUZZY_CAP = 60.0

PHONE_MATCH_SCORE = 100.0
MIN_PHONE_DIGITS = 3

_NON_DIGITS = re.compile(r"\D")


def levenshtein(a: str, b: str) -> int:
    """Minimum single-character edits turning *a* into *b*."""
    rows, cols = len(a) + 1, len(b) + 1
    table = [[0] * cols for _ in range(rows)]
    for i in range(rows):
        table[i][0] = i
    for j in range(cols):
        table[0][j] = j

    for i in range(1, rows):
        for j in range(1, cols):
            cost = 0 if a[i - 1] == b[j - 1] else 1
            table[i][j] = min(
                table[i - 1][j] + 1,  # deletion
                table[i][j - 1] + 1,  # insertion
                table[i - 1][j - 1] + cost,  # substitution
            )
    return table[-1][-1]


def match_score(query: str, candidate: str, fuzzy_cap: float = FUZZY_CAP) -> float:
    """Return the tiered similarity of *candidate* to *query*."""
    q = query.lower()
    c = candidate.lower()

    if q == c:
        return EXACT_SCORE
    if q in c:
        return SUBSTRING_SCORE

    max_len = max(len(q), len(c))
    distance = levenshtein(q, c)
    return ((max_len - distance) / max_len) * fuzzy_cap


def digits_only(value: str) -> str:
    return _NON_DIGITS.sub("", value)


def phone_score(query: str, phone: str) -> float:
    """Binary phone match on digits only; short digit runs never match."""
    wanted = digits_only(query)
    if len(wanted) < MIN_PHONE_DIGITS:
        return 0.0
    return PHONE_MATCH_SCORE if wanted in digits_only(phone) else 0.0
