import unittest

from recitation_core.text_preprocessor import (
    normalize_for_matching,
    preprocess_for_matching,
    split_words,
    tokenize,
)


class NormalizeForMatchingTests(unittest.TestCase):
    def test_removes_diacritics_and_folds_alef_wasla(self) -> None:
        self.assertEqual(
            normalize_for_matching("بِسْمِ ٱللَّهِ ٱلرَّحْمَٰنِ ٱلرَّحِيمِ"),
            "بسم الله الرحمن الرحيم",
        )

    def test_folds_hamza_forms_to_alef(self) -> None:
        self.assertEqual(normalize_for_matching("أَحْسَنُوا"), "احسنوا")
        self.assertEqual(normalize_for_matching("إِيمَان"), "ايمان")
        self.assertEqual(normalize_for_matching("مُؤْمِن"), "مامن")

    def test_hamza_after_alef_collapses_into_one_alef(self) -> None:
        self.assertEqual(normalize_for_matching("سَمَاءٌ"), "سما")
        self.assertEqual(normalize_for_matching("شَيْئًا"), "شيا")

    def test_folds_ya_and_ta_marbuta(self) -> None:
        self.assertEqual(normalize_for_matching("عَلَى"), "علي")
        self.assertEqual(normalize_for_matching("رَحْمَة"), "رحمه")

    def test_removes_tatweel(self) -> None:
        self.assertEqual(normalize_for_matching("اللـــه"), "الله")

    def test_strips_non_arabic_and_collapses_whitespace(self) -> None:
        self.assertEqual(normalize_for_matching("  hello   بسم \t الله 42 "), "بسم الله")

    def test_collapses_repeated_alef_and_waw(self) -> None:
        self.assertEqual(normalize_for_matching("قاااالووو"), "قالو")

    def test_empty_input(self) -> None:
        self.assertEqual(normalize_for_matching(""), "")
        self.assertEqual(normalize_for_matching("abc 123"), "")

    def test_recognizer_and_mushaf_spellings_compare_equal(self) -> None:
        self.assertEqual(
            normalize_for_matching("ٱلْكِتَٰبُ"),
            normalize_for_matching("الكتب"),
        )


class TokenizeTests(unittest.TestCase):
    def test_tokenize_keeps_diacritics_and_drops_tatweel(self) -> None:
        self.assertEqual(tokenize("بِسْمِ  ٱللَّـهِ\n"), ["بِسْمِ", "ٱللَّهِ"])

    def test_split_words_ignores_empty_runs(self) -> None:
        self.assertEqual(split_words("  قل   هو "), ["قل", "هو"])

    def test_preprocess_returns_normalized_text_and_words(self) -> None:
        normalized, words = preprocess_for_matching("قُلْ هُوَ ٱللَّهُ أَحَدٌ")
        self.assertEqual(normalized, "قل هو الله احد")
        self.assertEqual(words, ["قل", "هو", "الله", "احد"])


if __name__ == "__main__":
    unittest.main()
