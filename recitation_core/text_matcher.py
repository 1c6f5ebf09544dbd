"""
TextMatcher: word-level comparison rules between a normalized transcript
token and the expected reference word.

Rules, from strictest to loosest:
1. Exact match
2. Fuzzy match (positional character diff, length-dependent tolerance)
3. Combined match (recognizer split one word into several tokens)
4. Deferred prefix (recognizer still mid-word: wait, do not reject)
5. Containment (one word contains the other)
"""

from __future__ import annotations

from enum import Enum
from typing import Sequence

from .config import (
    FUZZY_EXACT_ONLY_MAX_LEN,
    FUZZY_MAX_LENGTH_DIFF,
    FUZZY_LONG_WORD_LEN,
    FUZZY_LONG_WORD_MAX_DIFF,
    FUZZY_SHORT_WORD_MAX_DIFF,
    COMBINE_LENGTH_MARGIN,
    COMBINE_MAX_LOOKAHEAD,
    PREFIX_MIN_LENGTH,
)
from .text_preprocessor import normalize_for_matching


class MatchKind(str, Enum):
    """Rule that confirmed a reference word."""
    EXACT = "exact"
    FUZZY = "fuzzy"
    COMBINED = "combined"
    CONTAINMENT = "containment"


# =============================================================================
def positional_distance(spoken: str, expected: str) -> int:
    """
    Count mismatching characters over the overlapping prefix plus the
    length difference.

    This is not an edit distance: an insertion early in the word shifts every
    following character and counts each of them.
    """
    min_len = min(len(spoken), len(expected))
    differences = sum(1 for j in range(min_len) if spoken[j] != expected[j])
    return differences + abs(len(spoken) - len(expected))


def fuzzy_match(spoken: str, expected: str) -> bool:
    """Return True if ``spoken`` is close enough to ``expected``."""
    if spoken == expected:
        return True
    # Short words must match exactly
    if len(expected) <= FUZZY_EXACT_ONLY_MAX_LEN:
        return False
    if abs(len(spoken) - len(expected)) > FUZZY_MAX_LENGTH_DIFF:
        return False

    allowed = FUZZY_LONG_WORD_MAX_DIFF if len(expected) > FUZZY_LONG_WORD_LEN else FUZZY_SHORT_WORD_MAX_DIFF
    return positional_distance(spoken, expected) <= allowed


def match_combined(
    candidates: Sequence[str],
    start: int,
    expected: str,
    allow_fuzzy: bool = True,
) -> int:
    """
    Join ``candidates[start]`` with following tokens until the result matches
    ``expected``.

    Returns the number of source tokens consumed (at least 2), or 0 if no
    combination matched.
    """
    combined = candidates[start]
    lookahead = 1

    while (
        start + lookahead < len(candidates)
        and lookahead <= COMBINE_MAX_LOOKAHEAD
        and len(combined) < len(expected) + COMBINE_LENGTH_MARGIN
    ):
        combined += candidates[start + lookahead]
        normalized = normalize_for_matching(combined)
        if normalized == expected or (allow_fuzzy and fuzzy_match(normalized, expected)):
            return lookahead + 1
        lookahead += 1

    return 0


def is_deferred_prefix(spoken: str, expected: str, is_final: bool, is_last: bool) -> bool:
    """
    True if ``spoken`` looks like the start of ``expected`` that the recognizer
    has not finished yet.

    An interim hypothesis gets the benefit of the doubt for any fragment of
    at least PREFIX_MIN_LENGTH letters; a final one only for its last token.
    """
    if spoken == expected or not expected.startswith(spoken):
        return False
    if not is_final and len(spoken) >= PREFIX_MIN_LENGTH:
        return True
    return is_last


def contains_either(spoken: str, expected: str) -> bool:
    return spoken in expected or expected in spoken
