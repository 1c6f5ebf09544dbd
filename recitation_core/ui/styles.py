"""CSS styles for the recitation Gradio interface."""

from recitation_core.config import (
    ARABIC_FONT_STACK,
    QURAN_TEXT_SIZE_PX, ARABIC_WORD_SPACING,
    CONFIRMED_WORD_COLOR, CURSOR_COLOR,
)


def build_css() -> str:
    """Return the complete CSS string for the Gradio interface."""
    return f"""
    .arabic-text {{
        font-family: {ARABIC_FONT_STACK};
        direction: rtl;
        text-align: right;
    }}

    .recitation-placeholder {{
        text-align: center;
        color: #666;
        padding: 60px;
        direction: rtl;
    }}

    .recitation-ayah {{
        margin-bottom: 0.6em;
    }}

    .recitation-text {{
        font-size: {QURAN_TEXT_SIZE_PX}px;
        line-height: 2.2;
        word-spacing: {ARABIC_WORD_SPACING};
    }}

    .recitation-word {{
        color: {CONFIRMED_WORD_COLOR};
    }}

    .recitation-ayah-number {{
        font-size: 0.8em;
        color: #8a6d3b;
        margin-inline-start: 0.3em;
    }}

    .recitation-ayah--current .cursor {{
        color: {CURSOR_COLOR};
        font-size: {QURAN_TEXT_SIZE_PX}px;
        animation: blink 1s step-start infinite;
    }}

    .recitation-ayah-number--current {{
        color: {CURSOR_COLOR};
    }}

    @keyframes blink {{
        50% {{ opacity: 0; }}
    }}

    #progress-label {{
        font-size: 1.1em;
        direction: rtl;
        text-align: center;
    }}
    """
