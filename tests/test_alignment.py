import pytest

from reading_core.alignment import (
    align_expected_to_recognized,
    approximate_phonemes,
    compare_phonemes,
    completeness,
    extract_answer,
    levenshtein,
    match_words,
    normalize_text,
    phoneme_sequence,
    similarity,
    tokenize,
    word_accuracy,
)
from reading_core.models import LanguageProfile

EN = LanguageProfile.ENGLISH
FIL = LanguageProfile.FILIPINO
MATH = LanguageProfile.MATH


def test_normalize_english_strips_punctuation_and_case():
    assert normalize_text("The  Cat, sat!", EN) == "the cat sat"
    assert normalize_text("Don't stop.", EN) == "don't stop"


def test_normalize_filipino_keeps_accented_letters():
    assert normalize_text("Niño, kumain ka na?", FIL) == "niño kumain ka na"
    assert normalize_text("Niño", EN) == "nio"


def test_tokenize_math_splits_numbers_and_operators():
    assert tokenize("12+15", MATH) == ["12", "+", "15"]
    assert tokenize("6 x 7", MATH) == ["6", "×", "7"]
    assert tokenize("20/4", MATH) == ["20", "÷", "4"]


def test_tokenize_math_reads_number_words():
    assert tokenize("eight", MATH) == ["8"]
    assert tokenize("forty-two", MATH) == ["42"]
    assert tokenize("five plus three equals eight", MATH) == ["5", "+", "3", "=", "8"]


def test_extract_answer_takes_text_after_last_equals():
    assert extract_answer(["5", "+", "3", "=", "8"]) == "8"
    assert extract_answer(["27"]) == "27"


def test_approximate_phonemes_filipino_digraphs_and_vowel_runs():
    assert approximate_phonemes("ang", FIL) == ["A", "NG"]
    assert approximate_phonemes("bata", FIL) == ["B", "A", "T", "A"]
    assert approximate_phonemes("naglalaro", FIL) == ["N", "A", "GL", "A", "L", "A", "R", "O"]
    assert approximate_phonemes("tsinelas", FIL)[0] == "TS"


def test_approximate_phonemes_english_teams():
    assert approximate_phonemes("sheep", EN) == ["SH", "EE", "P"]
    assert approximate_phonemes("street", EN) == ["STR", "EE", "T"]
    assert approximate_phonemes("", EN) == []


def test_math_tokens_are_single_units():
    assert approximate_phonemes("42", MATH) == ["42"]


def test_levenshtein():
    assert levenshtein("kitten", "sitting") == 3
    assert levenshtein("", "abc") == 3
    assert levenshtein("same", "same") == 0


@pytest.mark.parametrize("expected,candidate", [
    ("bata", "bata"), ("bata", "bat"), ("ay", "ang"), ("a", "completely different"), ("word", ""),
])
def test_similarity_is_bounded(expected, candidate):
    score = similarity(expected, candidate)
    assert 0 <= score <= 100
    assert (score == 100) == (levenshtein(expected, candidate) == 0)


def test_empty_expected_sequence():
    assert word_accuracy(match_words([], ["anything"])) == 0
    assert compare_phonemes([], ["A"]) == 0
    assert completeness([]) == 100


def test_exact_english_sentence():
    result = align_expected_to_recognized("The cat sat.", "the cat sat", EN)
    assert result.word_accuracy == 100
    assert result.phoneme_accuracy == 100
    assert [m.kind for m in result.matches] == ["exact", "exact", "exact"]


def test_filipino_sentence_with_split_word():
    result = align_expected_to_recognized("Ang bata ay naglalaro", "ang bata nag laro", FIL)
    kinds = [m.kind for m in result.matches]

    assert kinds == ["exact", "exact", "miss", "soft"]
    assert result.word_accuracy == pytest.approx(65.0)
    assert result.matches[3].matched == "naglaro"
    assert result.matches[2].error_type == "Omitted"
    assert result.matches[3].error_type == "Mispronounced"


def test_window_limits_candidates():
    matches = match_words(["one", "two", "three", "four"], ["four", "x", "x", "x"])
    # recognized "four" at position 0 is outside the window of expected position 3
    assert matches[3].kind == "miss"
    assert matches[3].matched == "x"


def test_phoneme_tolerance_allows_one_position_shift():
    assert compare_phonemes(["A", "B", "C"], ["X", "A", "B"]) == pytest.approx(200 / 3)
    assert compare_phonemes(["A", "B", "C"], ["A", "B", "C"]) == 100


def test_completeness_counts_only_zero_similarity_as_omitted():
    result = align_expected_to_recognized("Ang bata ay naglalaro", "ang bata nag laro", FIL)
    assert result.completeness == pytest.approx(75.0)


def test_merged_english_units_keep_correct_readings_perfect():
    assert approximate_phonemes("car", EN) == ["C", "AR"]
    assert approximate_phonemes("teacher", EN) == ["T", "EE", "CH", "ER"]

    result = align_expected_to_recognized(
        "The teacher parked her car near the river.", "the teacher parked her car near the river", EN
    )
    assert result.word_accuracy == 100
    assert result.phoneme_accuracy == 100

    # same sound, different spelling
    assert compare_phonemes(phoneme_sequence(["meet"], EN), phoneme_sequence(["meat"], EN)) == 100
