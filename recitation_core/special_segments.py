"""
Special segment handling for the Basmala.

Some mushaf editions prefix ayah 1 of every surah (except Al-Fatiha and
At-Tawba) with "بِسْمِ اللَّهِ الرَّحْمَٰنِ الرَّحِيمِ". It is not part of the
ayah being memorized, so it is stripped before the passage is tokenized.
"""

from __future__ import annotations

import re

from .config import BASMALA_KEEP_SURAHS

BASMALA_TEXT = "بسم الله الرحمن الرحيم"

# Letters the mushaf may write differently from the plain spelling above
_LETTER_VARIANTS = {
    'ا': 'اٱأإآ',
    'ة': 'ةه',
    'ه': 'هة',
    'ى': 'ىا',
}

# Any run of harakat, Quranic marks or tatweel between letters
_MARKS = '[\u064B-\u065F\u0670\u06D6-\u06ED\u0640]*'


def build_loose_arabic_pattern(phrase: str) -> re.Pattern:
    """
    Build a regex matching ``phrase`` at the start of a string regardless of
    diacritics, tatweel, alef variants and spacing.
    """
    pattern = "^"
    for char in phrase:
        if char.isspace():
            pattern += r"\s*"
            continue
        variants = _LETTER_VARIANTS.get(char, char)
        pattern += f"[{variants}]" + _MARKS + r"\s*"
    return re.compile(pattern)


BASMALA_PATTERN = build_loose_arabic_pattern(BASMALA_TEXT)


def starts_with_basmala(text: str) -> bool:
    return bool(BASMALA_PATTERN.match(text))


def strip_basmala(text: str) -> str:
    """Remove a leading Basmala (any orthography) from ``text``."""
    return BASMALA_PATTERN.sub("", text, count=1).strip()


def should_strip_basmala(surah: int, ayah: int) -> bool:
    """Only ayah 1 of surahs other than Al-Fatiha and At-Tawba carries a prefix."""
    return ayah == 1 and surah not in BASMALA_KEEP_SURAHS
