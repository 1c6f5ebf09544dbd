"""
Text preprocessing module for Arabic Quran text normalization.

Turns reference passage text and live transcript fragments into comparable
canonical tokens. The matching form is lossy: it only has to make two
renderings of the same spoken word compare equal. Diacritized text is kept
separately for display.
"""

from __future__ import annotations

import re

# Basic Arabic letters
ALEF = '\u0627'              # ا
ALEF_MADDA = '\u0622'        # آ
ALEF_HAMZA_ABOVE = '\u0623'  # أ
ALEF_HAMZA_BELOW = '\u0625'  # إ
ALEF_WASLA = '\u0671'        # ٱ
HAMZA = '\u0621'             # ء
WAW_HAMZA = '\u0624'         # ؤ
YA_HAMZA = '\u0626'          # ئ

WAW = '\u0648'               # و
YA = '\u064A'                # ي
ALEF_MAKSURA = '\u0649'      # ى
TA_MARBUTA = '\u0629'        # ة
HA = '\u0647'                # ه

# Other
TATWEEL = '\u0640'

# =============================================================================
# Harakat and tanween (064B-065F), dagger alef (0670), and the Quranic
# annotation block: small high ligatures, stop signs, end-of-ayah (06D6-06ED)
_DIACRITICS_RE = re.compile('[\u064B-\u065F\u0670\u06D6-\u06ED]')
_NON_ARABIC_RE = re.compile('[^\u0600-\u06FF\\s]')
_WHITESPACE_RE = re.compile(r'\s+')
_ALEF_RUN_RE = re.compile(ALEF + '+')
_WAW_RUN_RE = re.compile(WAW + '+')

# Every hamza-bearing form folds to bare alef, like the alef variants
_ALEF_FOLD = {
    ord(c): ALEF
    for c in (ALEF_HAMZA_ABOVE, ALEF_HAMZA_BELOW, ALEF_MADDA, ALEF_WASLA, HAMZA, WAW_HAMZA, YA_HAMZA)
}
CHAR_REPLACEMENTS = {
    **_ALEF_FOLD,
    ord(ALEF_MAKSURA): YA,
    ord(TA_MARBUTA): HA,
}


# =============================================================================
def strip_tatweel(text: str) -> str:
    return text.replace(TATWEEL, '')


def normalize_for_matching(text: str) -> str:
    """
    Normalize Arabic text to its matching key.

    Steps:
    1. Remove diacritics and Quranic annotation marks
    2. Remove tatweel
    3. Fold hamza/alef variants to alef, alef maksura to ya, ta marbuta to ha
    4. Drop non-Arabic characters, collapse whitespace
    5. Collapse repeated alefs and waws (recognizer stutter/elongation)
    """
    if not text:
        return ''

    result = _DIACRITICS_RE.sub('', text)
    result = strip_tatweel(result)
    result = result.translate(CHAR_REPLACEMENTS)
    result = _NON_ARABIC_RE.sub('', result)
    result = _WHITESPACE_RE.sub(' ', result)
    result = _ALEF_RUN_RE.sub(ALEF, result)
    result = _WAW_RUN_RE.sub(WAW, result)

    return result.strip()


def tokenize(text: str) -> list[str]:
    """Split raw (diacritized) text into display tokens after stripping tatweel."""
    return [w for w in strip_tatweel(text).split() if w]


def split_words(text: str) -> list[str]:
    """Split normalized text into words."""
    return [w.strip() for w in text.split() if w.strip()]


def preprocess_for_matching(text: str) -> tuple[str, list[str]]:
    """Full preprocessing pipeline for text matching."""
    normalized = normalize_for_matching(text)
    words = split_words(normalized)
    return normalized, words
