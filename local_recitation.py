#!/usr/bin/env python3
"""
Local Recitation Replay Script

Feeds a recorded speech-recognition hypothesis stream through the
recitation matcher and reports which words of the passage were confirmed.

Usage:
    python local_recitation.py <stream.json> --surah 1 [--from-ayah 1] [--to-ayah 7]
    python local_recitation.py <stream.json> --verses-json passage.json

The stream is a JSON list of {"result_index": int, "transcript": str, "is_final": bool}.
A verses file is a JSON list of {"number": int, "text": str}.

Output:
    JSON session summary to stdout.
"""

import argparse
import json
import logging
import os
import sys

from recitation_core.config import MUSHAF_EDITIONS, MUSHAF_EDITION_DEFAULT
from recitation_core.errors import RecitationError
from recitation_core.passage import Verse, build_reference_tokens
from recitation_core.quran_api import fetch_range
from recitation_core.session import RecitationSession
from recitation_core.transcript_aligner import HypothesisSegment

# Fix Windows console encoding for Arabic text output
if sys.platform == 'win32':
    sys.stdout.reconfigure(encoding='utf-8')
    sys.stderr.reconfigure(encoding='utf-8')


def load_stream(path: str) -> list[HypothesisSegment]:
    """Read hypothesis segments from a JSON file."""
    with open(path, "r", encoding="utf-8") as f:
        raw = json.load(f)

    return [
        HypothesisSegment(
            result_index=int(entry["result_index"]),
            transcript_text=entry.get("transcript", ""),
            is_final=bool(entry.get("is_final", False)),
        )
        for entry in raw
    ]


def load_verses(path: str) -> list[Verse]:
    with open(path, "r", encoding="utf-8") as f:
        raw = json.load(f)
    return [Verse(number=int(entry["number"]), text=entry["text"]) for entry in raw]


def replay(verses: list[Verse], segments: list[HypothesisSegment]) -> dict:
    """Run every segment through a fresh session; return its summary."""
    completed_at = []
    delivered = 0
    session = RecitationSession(
        build_reference_tokens(verses),
        on_complete=lambda s: completed_at.append(delivered),
    )

    for segment in segments:
        delivered += 1
        session.on_hypothesis_segment(segment)
        if session.is_complete:
            break

    result = session.summary()
    result["segments_delivered"] = delivered
    result["completed_at_segment"] = completed_at[0] if completed_at else None
    return result


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Replay a recognition hypothesis stream against a Quran passage",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    python local_recitation.py stream.json --surah 112
    python local_recitation.py stream.json --surah 2 --from-ayah 255 --to-ayah 255 --edition quran-uthmani
    python local_recitation.py stream.json --verses-json fatiha.json
        """
    )

    parser.add_argument("stream_path", help="Path to the hypothesis stream JSON")
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--verses-json", help="Read the passage from a local JSON file")
    source.add_argument("--surah", type=int, help="Fetch the passage from the content API")
    parser.add_argument("--from-ayah", type=int, default=1, help="First ayah of the range")
    parser.add_argument("--to-ayah", type=int, default=None, help="Last ayah of the range (default: end of surah)")
    parser.add_argument("--edition", default=MUSHAF_EDITION_DEFAULT, choices=sorted(MUSHAF_EDITIONS),
                        help="Mushaf edition used for the reference text")
    parser.add_argument("--verbose", "-v", action="store_true",
                        help="Log every confirmed word to stderr")
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="[%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )

    if not os.path.exists(args.stream_path):
        print(json.dumps({"error": f"Stream file not found: {args.stream_path}"}))
        sys.exit(1)

    try:
        segments = load_stream(args.stream_path)
        if args.verses_json:
            verses = load_verses(args.verses_json)
        else:
            verses = fetch_range(args.surah, args.from_ayah, args.to_ayah, args.edition)
    except (OSError, ValueError, KeyError, RecitationError) as e:
        print(f"[ERROR] {e}", file=sys.stderr)
        print(json.dumps({"error": str(e)}, ensure_ascii=False))
        sys.exit(1)

    result = replay(verses, segments)
    print(json.dumps(result, ensure_ascii=False, indent=2))


if __name__ == "__main__":
    main()
