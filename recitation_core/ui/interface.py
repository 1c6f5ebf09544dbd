"""Gradio UI layout for the recitation checker."""
from types import SimpleNamespace

import gradio as gr

from recitation_core.config import (
    MUSHAF_EDITIONS, MUSHAF_EDITION_DEFAULT,
    STREAM_EVERY_SECONDS,
)
from recitation_core.ui.styles import build_css
from recitation_core.ui.handlers import (
    _EMPTY_PLACEHOLDER,
    load_surah_choices,
    on_surah_change,
    on_load_passage,
    on_toggle_listening,
    on_stream_chunk,
)


def build_interface():
    """Build the Gradio interface."""
    c = SimpleNamespace()
    css = build_css()

    with gr.Blocks(title="التسميع", css=css) as app:
        gr.Markdown("# \U0001f399️ التسميع")
        gr.Markdown(
            "اختر السورة ونطاق الآيات، ثم اضغط \"بدء التسميع\" واقرأ من حفظك. "
            "تظهر الكلمات التي تُلفظ بشكل صحيح تباعاً.",
            elem_classes=["arabic-text"],
        )

        with gr.Row():
            _build_left_column(c)
            _build_right_column(c)

        # Per-browser-session controller, created on first use
        c.controller = gr.State(value=None)

        _wire_events(app, c)

    return app


def _build_left_column(c):
    """Passage selection and listening controls."""
    with gr.Column(scale=1):
        c.surah = gr.Dropdown(label="السورة", choices=[], interactive=True)
        with gr.Row():
            c.from_ayah = gr.Number(label="من آية", value=1, minimum=1, precision=0)
            c.to_ayah = gr.Number(label="إلى آية", value=1, minimum=1, precision=0)
        c.edition = gr.Radio(
            label="الرسم",
            choices=[(label, key) for key, label in MUSHAF_EDITIONS.items()],
            value=MUSHAF_EDITION_DEFAULT,
        )
        c.load_btn = gr.Button("تحميل الآيات", variant="secondary")

        c.mic = gr.Audio(
            label="الميكروفون",
            sources=["microphone"],
            streaming=True,
            type="numpy",
        )
        c.listen_btn = gr.Button("بدء التسميع", variant="primary")


def _build_right_column(c):
    """Progress and confirmed text."""
    with gr.Column(scale=2):
        c.progress = gr.Markdown("إنجاز: 0%", elem_id="progress-label")
        c.paper = gr.HTML(_EMPTY_PLACEHOLDER)


def _wire_events(app, c):
    """Wire all event handlers to Gradio components."""
    session_outputs = [c.paper, c.progress, c.listen_btn, c.controller]

    app.load(fn=load_surah_choices, inputs=[], outputs=[c.surah], api_name=False)

    c.surah.change(
        fn=on_surah_change,
        inputs=[c.surah],
        outputs=[c.from_ayah, c.to_ayah],
        api_name=False,
    )

    c.load_btn.click(
        fn=on_load_passage,
        inputs=[c.surah, c.from_ayah, c.to_ayah, c.edition, c.controller],
        outputs=session_outputs,
        api_name=False,
    )

    c.listen_btn.click(
        fn=on_toggle_listening,
        inputs=[c.controller],
        outputs=session_outputs,
        api_name=False,
    )

    # One chunk at a time, in arrival order
    c.mic.stream(
        fn=on_stream_chunk,
        inputs=[c.mic, c.controller],
        outputs=session_outputs,
        stream_every=STREAM_EVERY_SECONDS,
        concurrency_limit=1,
        api_name=False,
    )
