"""Python event handler callbacks for the Gradio UI."""
import html
import logging

import gradio as gr

from recitation_core.config import MUSHAF_EDITION_DEFAULT
from recitation_core.errors import RecitationError
from recitation_core.quran_api import fetch_range, fetch_surah_list
from recitation_core.recognition import RecitationController, create_recognizer
from recitation_core.session import RecitationSession

logger = logging.getLogger(__name__)

_ARABIC_DIGITS = "٠١٢٣٤٥٦٧٨٩"

_EMPTY_PLACEHOLDER = (
    '<div class="recitation-placeholder">'
    'اضغط على "بدء التسميع" وابدأ بقراءة الآيات...</div>'
)


def to_arabic_digits(value) -> str:
    return "".join(_ARABIC_DIGITS[int(c)] if c.isdigit() else c for c in str(value))


def new_controller(recognizer=None) -> RecitationController:
    """One controller (and one recognizer) per browser session."""
    return RecitationController(recognizer or create_recognizer())


def _show_notice(error: RecitationError):
    gr.Warning(error.notice or str(error))


# =============================================================================
# Rendering
# =============================================================================

def render_session_html(session: RecitationSession, is_listening: bool = False) -> str:
    """Confirmed words grouped by verse, plus a cursor for the verse being recited."""
    groups = session.confirmed_grouped_by_verse()
    if not groups and not is_listening:
        return _EMPTY_PLACEHOLDER

    parts = ['<div class="recitation-ayahs arabic-text">']
    for verse, tokens in groups:
        words = " ".join(
            f'<span class="recitation-word">{html.escape(t.display_text)}</span>' for t in tokens
        )
        parts.append(
            f'<div class="recitation-ayah"><p class="recitation-text">{words} '
            f'<span class="recitation-ayah-number">﴿{to_arabic_digits(verse)}﴾</span></p></div>'
        )

    current = session.current_verse()
    if is_listening and current is not None and all(v != current for v, _ in groups):
        parts.append(
            '<div class="recitation-ayah recitation-ayah--current">'
            '<span class="cursor">|</span>'
            f'<span class="recitation-ayah-number recitation-ayah-number--current">'
            f'﴿{to_arabic_digits(current)}﴾</span></div>'
        )
    parts.append('</div>')
    return "\n".join(parts)


def format_progress(session: RecitationSession) -> str:
    return f"إنجاز: {round(session.progress_fraction() * 100)}%"


def _button_label(controller: RecitationController) -> str:
    if controller.is_listening:
        return "إيقاف التسميع"
    if controller.session.is_complete:
        return "اكتمل التسميع"
    if controller.session.confirmed_count > 0:
        return "استئناف التسميع"
    return "بدء التسميع"


def _outputs(controller: RecitationController):
    return (
        render_session_html(controller.session, controller.is_listening),
        format_progress(controller.session),
        # Nothing left to recite until another passage is loaded
        gr.update(
            value=_button_label(controller),
            interactive=controller.is_listening or not controller.session.is_complete,
        ),
        controller,
    )


# =============================================================================
# Passage selection
# =============================================================================

def load_surah_choices():
    """Dropdown choices for the surah catalog: (label, number)."""
    try:
        surahs = fetch_surah_list()
    except RecitationError as e:
        logger.warning(f"Surah catalog unavailable: {e}")
        _show_notice(e)
        return gr.update(choices=[], value=None)
    choices = [(f"{s.number}. {s.name}", s.number) for s in surahs]
    return gr.update(choices=choices, value=choices[0][1] if choices else None)


def on_surah_change(surah_number):
    """Reset the ayah range to the whole surah."""
    if not surah_number:
        return gr.update(), gr.update()
    try:
        surahs = {s.number: s for s in fetch_surah_list()}
    except RecitationError as e:
        _show_notice(e)
        return gr.update(), gr.update()
    info = surahs.get(int(surah_number))
    if info is None:
        return gr.update(), gr.update()
    last = info.number_of_ayahs
    return (
        gr.update(value=1, maximum=last),
        gr.update(value=last, maximum=last),
    )


def on_load_passage(surah_number, from_ayah, to_ayah, edition, controller):
    """Fetch the range and rebuild the session; keeps the old passage on failure."""
    if controller is None:
        controller = new_controller()
    if not surah_number:
        return _outputs(controller)

    try:
        verses = fetch_range(
            int(surah_number),
            int(from_ayah or 1),
            int(to_ayah) if to_ayah else None,
            edition or MUSHAF_EDITION_DEFAULT,
        )
    except RecitationError as e:
        logger.warning(f"Passage load failed: {e}")
        _show_notice(e)
        return _outputs(controller)

    controller.load_passage(verses)
    return _outputs(controller)


# =============================================================================
# Listening
# =============================================================================

def on_toggle_listening(controller):
    """Start/resume, or stop, depending on the current state."""
    if controller is None:
        controller = new_controller()

    if controller.is_listening:
        controller.stop_listening()
    else:
        try:
            controller.start_listening()
        except RecitationError as e:
            _show_notice(e)
    return _outputs(controller)


def on_stream_chunk(chunk, controller):
    """Feed one microphone chunk (sample_rate, samples) to the recognizer."""
    if controller is None or chunk is None:
        return gr.update(), gr.update(), gr.update(), controller

    feed = getattr(controller.recognizer, "feed_audio", None)
    if controller.is_listening and feed is not None:
        sample_rate, samples = chunk
        feed(sample_rate, samples)

    notice = controller.pending_notice()
    if notice is not None:
        _show_notice(notice)

    return _outputs(controller)
