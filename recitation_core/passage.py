"""
Reference passage model: verses of the selected ayah range flattened into
the ordered word tokens the aligner walks over.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .text_preprocessor import normalize_for_matching, tokenize

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Verse:
    """One ayah of the active range."""
    number: int           # Number in surah
    text: str             # Diacritized text as delivered by the content API


@dataclass(frozen=True)
class ReferenceToken:
    """A single word of the reference passage."""
    display_text: str     # Original word form, diacritics preserved
    match_key: str        # Canonical form used for comparison
    verse_index: int      # Verse number this word belongs to


def build_reference_tokens(verses: list[Verse]) -> list[ReferenceToken]:
    """
    Flatten verses into reference tokens in reading order.

    Words whose matching form is empty (standalone stop signs, ayah markers)
    are left out: nothing a reciter says could confirm them.
    """
    tokens: list[ReferenceToken] = []
    skipped = 0

    for verse in verses:
        for word in tokenize(verse.text):
            match_key = normalize_for_matching(word)
            if not match_key:
                skipped += 1
                continue
            tokens.append(ReferenceToken(
                display_text=word,
                match_key=match_key,
                verse_index=verse.number,
            ))

    if skipped:
        logger.debug("Skipped %d non-word tokens while building reference", skipped)

    return tokens


def tokens_from_words(words: list[str], verse_index: int = 1) -> list[ReferenceToken]:
    """Build reference tokens for a bare word list (single verse)."""
    return build_reference_tokens([Verse(number=verse_index, text=" ".join(words))])
