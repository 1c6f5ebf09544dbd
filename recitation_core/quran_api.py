"""
Client for the alquran.cloud REST API.

Loads the surah catalog and surah text for the selected mushaf edition,
and slices the ayah range the user wants to recite.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import requests

from .config import (
    QURAN_API_BASE,
    QURAN_API_TIMEOUT,
    MUSHAF_EDITIONS,
    MUSHAF_EDITION_DEFAULT,
)
from .errors import ContentFetchError
from .passage import Verse
from .special_segments import should_strip_basmala, starts_with_basmala, strip_basmala

logger = logging.getLogger(__name__)


@dataclass
class SurahInfo:
    """Catalog entry for one surah."""
    number: int
    name: str
    english_name: str
    number_of_ayahs: int


@dataclass
class SurahText:
    """Full text of one surah in one edition."""
    number: int
    name: str
    number_of_ayahs: int
    verses: list[Verse]


# =============================================================================
# Caches
# =============================================================================

_surah_list_cache: dict = {"loaded": False, "data": None}
_surah_text_cache: dict[tuple[int, str], SurahText] = {}


def clear_caches():
    """Drop cached API responses."""
    _surah_list_cache["loaded"] = False
    _surah_list_cache["data"] = None
    _surah_text_cache.clear()


def fetch_json(path: str) -> dict:
    """GET ``path`` under the API base and return the ``data`` payload."""
    url = f"{QURAN_API_BASE}/{path.lstrip('/')}"
    try:
        response = requests.get(url, timeout=QURAN_API_TIMEOUT)
    except requests.RequestException as e:
        raise ContentFetchError(f"Request failed: {e}") from e

    if not response.ok:
        raise ContentFetchError(f"Request failed: {response.status_code}", status_code=response.status_code)

    payload = response.json()
    if payload.get("code", 200) != 200 or "data" not in payload:
        raise ContentFetchError(f"Request failed: {payload.get('status', 'no data')}", status_code=payload.get("code"))

    return payload["data"]


# =============================================================================
def fetch_surah_list() -> list[SurahInfo]:
    """Return the 114-surah catalog (cached)."""
    if _surah_list_cache["loaded"]:
        return _surah_list_cache["data"]

    data = fetch_json("/surah")
    surahs = [
        SurahInfo(
            number=int(entry["number"]),
            name=entry["name"],
            english_name=entry.get("englishName", ""),
            number_of_ayahs=int(entry["numberOfAyahs"]),
        )
        for entry in data
    ]

    _surah_list_cache["data"] = surahs
    _surah_list_cache["loaded"] = True
    logger.info("Loaded catalog of %d surahs", len(surahs))
    return surahs


def fetch_surah(number: int, edition: str = MUSHAF_EDITION_DEFAULT) -> SurahText:
    """Return the text of surah ``number`` in ``edition`` (cached)."""
    if edition not in MUSHAF_EDITIONS:
        raise ValueError(f"Unknown mushaf edition: {edition}")
    if not 1 <= number <= 114:
        raise ValueError(f"Surah number must be in [1, 114], got {number}")

    key = (number, edition)
    if key in _surah_text_cache:
        return _surah_text_cache[key]

    data = fetch_json(f"/surah/{number}/{edition}")
    verses = [
        Verse(number=int(ayah["numberInSurah"]), text=ayah["text"])
        for ayah in data.get("ayahs", [])
    ]
    surah = SurahText(
        number=int(data.get("number", number)),
        name=data.get("name", ""),
        number_of_ayahs=int(data.get("numberOfAyahs", len(verses))),
        verses=verses,
    )

    _surah_text_cache[key] = surah
    logger.info("Loaded surah %d (%s): %d ayahs", number, edition, len(verses))
    return surah


def fetch_range(
    number: int,
    from_ayah: int = 1,
    to_ayah: Optional[int] = None,
    edition: str = MUSHAF_EDITION_DEFAULT,
    strip_leading_basmala: bool = True,
) -> list[Verse]:
    """
    Return verses ``from_ayah``..``to_ayah`` (inclusive) of surah ``number``.

    The range is clamped to the surah. A Basmala prefixed to ayah 1 is removed
    unless the surah counts it as part of the ayah.
    """
    surah = fetch_surah(number, edition)
    last = surah.number_of_ayahs
    start = max(1, min(from_ayah, last))
    end = last if to_ayah is None else max(start, min(to_ayah, last))

    verses = []
    for verse in surah.verses:
        if not start <= verse.number <= end:
            continue
        if strip_leading_basmala and should_strip_basmala(number, verse.number) and starts_with_basmala(verse.text):
            verse = Verse(number=verse.number, text=strip_basmala(verse.text))
        verses.append(verse)

    return verses
