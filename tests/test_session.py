import unittest

from recitation_core.passage import Verse, build_reference_tokens, tokens_from_words
from recitation_core.session import RecitationSession
from recitation_core.transcript_aligner import HypothesisSegment


def _ikhlas_start():
    return build_reference_tokens([
        Verse(number=1, text="قل هو الله احد"),
        Verse(number=2, text="الله الصمد"),
    ])


class RecitationSessionTests(unittest.TestCase):
    def setUp(self) -> None:
        self.completed = []
        self.session = RecitationSession(_ikhlas_start(), on_complete=self.completed.append)

    def test_returns_newly_confirmed_tokens(self) -> None:
        new = self.session.on_hypothesis_segment(HypothesisSegment(0, "قل هو"))

        self.assertEqual([t.match_key for t in new], ["قل", "هو"])
        self.assertEqual(self.session.confirmed_count, 2)
        self.assertEqual([t.match_key for t in self.session.confirmed_tokens], ["قل", "هو"])

    def test_groups_confirmed_words_by_verse(self) -> None:
        self.session.on_hypothesis_segment(HypothesisSegment(0, "قل هو الله احد الله", is_final=True))

        groups = self.session.confirmed_grouped_by_verse()

        self.assertEqual([verse for verse, _ in groups], [1, 2])
        self.assertEqual(len(groups[0][1]), 4)
        self.assertEqual([t.match_key for t in groups[1][1]], ["الله"])
        self.assertEqual(self.session.current_verse(), 2)
        self.assertAlmostEqual(self.session.progress_fraction(), 5 / 6)

    def test_completion_fires_once_and_ignores_later_segments(self) -> None:
        self.session.on_hypothesis_segment(HypothesisSegment(0, "قل هو الله احد", is_final=True))
        self.session.on_hypothesis_segment(HypothesisSegment(1, "الله الصمد", is_final=True))

        self.assertTrue(self.session.is_complete)
        self.assertEqual(self.completed, [self.session])
        self.assertIsNone(self.session.current_verse())

        self.assertEqual(self.session.on_hypothesis_segment(HypothesisSegment(2, "الله", is_final=True)), [])
        self.assertEqual(len(self.completed), 1)

    def test_restart_revisions_keeps_progress(self) -> None:
        self.session.on_hypothesis_segment(HypothesisSegment(0, "قل"))
        self.session.restart_revisions()

        self.assertIsNone(self.session.revision.last_result_index)
        self.assertEqual(self.session.confirmed_count, 1)

        # A new run numbers its results from 0 again
        self.session.on_hypothesis_segment(HypothesisSegment(0, "هو"))
        self.assertEqual(self.session.confirmed_count, 2)

    def test_reset_discards_progress(self) -> None:
        self.session.on_hypothesis_segment(HypothesisSegment(0, "قل هو الله احد الله الصمد", is_final=True))
        self.session.reset(build_reference_tokens([Verse(number=5, text="الله الصمد")]))

        self.assertEqual(self.session.confirmed_count, 0)
        self.assertEqual(self.session.confirmations, [])
        self.assertEqual(self.session.current_verse(), 5)
        self.assertFalse(self.session.is_complete)

        self.session.on_hypothesis_segment(HypothesisSegment(0, "الله الصمد", is_final=True))
        self.assertEqual(len(self.completed), 2)

    def test_basmala_recited_across_two_revisions(self) -> None:
        completed = []
        session = RecitationSession(
            tokens_from_words(["بسم", "الله", "الرحمن", "الرحيم"]),
            on_complete=completed.append,
        )

        first = session.on_hypothesis_segment(HypothesisSegment(0, "بسم الله"))
        self.assertEqual([t.match_key for t in first], ["بسم", "الله"])
        self.assertEqual(session.progress_fraction(), 0.5)
        self.assertEqual(completed, [])

        second = session.on_hypothesis_segment(
            HypothesisSegment(0, "بسم الله الرحمن الرحيم", is_final=True)
        )
        self.assertEqual([t.match_key for t in second], ["الرحمن", "الرحيم"])
        self.assertEqual(session.progress_fraction(), 1.0)
        self.assertTrue(session.is_complete)
        self.assertEqual(completed, [session])

    def test_empty_passage_is_never_complete(self) -> None:
        session = RecitationSession()

        self.assertFalse(session.is_complete)
        self.assertEqual(session.progress_fraction(), 0.0)
        self.assertIsNone(session.current_verse())
        self.assertEqual(session.on_hypothesis_segment(HypothesisSegment(0, "قل", is_final=True)), [])

    def test_summary(self) -> None:
        self.session.on_hypothesis_segment(HypothesisSegment(0, "قل هو الله احد الله", is_final=True))

        summary = self.session.summary()

        self.assertEqual(summary["total_words"], 6)
        self.assertEqual(summary["confirmed_words"], 5)
        self.assertEqual(summary["progress"], round(5 / 6, 4))
        self.assertFalse(summary["complete"])
        self.assertEqual(summary["current_verse"], 2)
        self.assertEqual(summary["verses"], [
            {"verse": 1, "text": "قل هو الله احد"},
            {"verse": 2, "text": "الله"},
        ])
        self.assertEqual(summary["match_kinds"], ["exact"] * 5)


if __name__ == "__main__":
    unittest.main()
