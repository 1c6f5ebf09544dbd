"""Live Quran recitation checker: Gradio app."""
import logging

from recitation_core.ui.interface import build_interface

# =============================================================================
# Module-level demo for Gradio hot-reload (`gradio app.py`)
# =============================================================================
demo = build_interface()

# =============================================================================
# Main
# =============================================================================

if __name__ == "__main__":
    import argparse
    from recitation_core.config import PORT
    from recitation_core.whisper_stream import WHISPER_AVAILABLE, load_whisper

    parser = argparse.ArgumentParser()
    parser.add_argument("--share", action="store_true", help="Create public link")
    parser.add_argument("--port", type=int, default=PORT, help="Port to run on")
    parser.add_argument("--no-preload", action="store_true", help="Load the Whisper model on first use")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log every confirmed word")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    print(f"Speech recognition available: {WHISPER_AVAILABLE}")

    # Preload the model so the first recitation does not wait on it
    if WHISPER_AVAILABLE and not args.no_preload:
        print("Preloading Whisper...")
        load_whisper()
        print("Whisper preloaded.")

    print(f"Launching Gradio on port {args.port}")
    demo.queue().launch(
        server_name="0.0.0.0",
        server_port=args.port,
        share=args.share,
    )
