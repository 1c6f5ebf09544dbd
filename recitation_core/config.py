"""
Configuration for live recitation matching.
"""

import os

# Port for local development
PORT = int(os.environ.get("RECITATION_PORT", "7860"))

# =============================================================================
# Content API (alquran.cloud)
# =============================================================================

QURAN_API_BASE = os.environ.get("QURAN_API_BASE", "https://api.alquran.cloud/v1")
QURAN_API_TIMEOUT = 30              # Seconds per request

MUSHAF_EDITIONS = {
    "quran-simple": "الرسم المبسّط",
    "quran-uthmani": "الرسم العثماني",
    "quran-uthmani-min": "عثماني (مختصر)",
    "quran-simple-clean": "مبسّط (منقّى)",
}
MUSHAF_EDITION_DEFAULT = "quran-simple"

# Surahs whose first ayah never carries a Basmala prefix to strip
# (Al-Fatiha counts it as ayah 1, At-Tawba has none)
BASMALA_KEEP_SURAHS = {1, 9}

# =============================================================================
# Word matching settings
# =============================================================================

FUZZY_EXACT_ONLY_MAX_LEN = 3        # Expected words this short must match exactly
FUZZY_MAX_LENGTH_DIFF = 2           # Reject fuzzy candidates beyond this length gap
FUZZY_LONG_WORD_LEN = 5             # Expected words longer than this get the wider tolerance
FUZZY_LONG_WORD_MAX_DIFF = 2
FUZZY_SHORT_WORD_MAX_DIFF = 1

COMBINE_LENGTH_MARGIN = 5           # Stop joining tokens once this much longer than expected
COMBINE_MAX_LOOKAHEAD = 4           # Max extra transcript tokens joined into one word

PREFIX_MIN_LENGTH = 2               # Shortest interim fragment worth waiting on

# =============================================================================
# Speech recognition settings
# =============================================================================

WHISPER_MODEL = os.environ.get("RECITATION_WHISPER_MODEL", "tarteel-ai/whisper-base-ar-quran")
SAMPLE_RATE = 16000

SPEECH_RMS_THRESHOLD = 0.01         # Chunk RMS above this counts as speech
UTTERANCE_SILENCE_SECONDS = 0.8     # Silence closing an utterance (final segment)
INTERIM_INTERVAL_SECONDS = 1.0      # Re-transcribe the open utterance this often
MAX_UTTERANCE_SECONDS = 25.0        # Whisper window is 30s; close before it
MAX_NEW_TOKENS = 200

# =============================================================================
# User notices
# =============================================================================

NOTICE_UNSUPPORTED = "عذراً، المتصفح لا يدعم التعرف الصوتي."
NOTICE_PERMISSION = "يرجى السماح باستخدام الميكروفون."
NOTICE_FETCH_FAILED = "تعذر تحميل السورة المطلوبة."

# =============================================================================
# UI settings
# =============================================================================

STREAM_EVERY_SECONDS = 0.5          # Microphone chunk cadence

# Arabic font stack
ARABIC_FONT_STACK = "'Amiri Quran', 'Traditional Arabic', 'Scheherazade', 'Amiri', 'Noto Naskh Arabic', serif"

QURAN_TEXT_SIZE_PX = 28
ARABIC_WORD_SPACING = "0.2em"
CONFIRMED_WORD_COLOR = "#1b7f3b"
CURSOR_COLOR = "#c0392b"
