"""Unit tests for letter matching, signatures and scoring."""

from __future__ import annotations

import random
from collections import Counter

import pytest

from wordtwist.dictionary import DictionaryService
from wordtwist.game_logic import calculate_points, can_form, shuffle_letters, signature_of, validate_word


class TestCanForm:
    def test_exact_repeated_letters(self) -> None:
        # LULL is three Ls and one U
        assert can_form("LULL", ["L", "U", "L", "L"])

    def test_missing_one_repeat(self) -> None:
        assert not can_form("LULL", ["L", "U", "L"])

    def test_order_does_not_matter(self) -> None:
        assert can_form("CAT", list("TSELAC"))
        assert can_form("CASTLE", list("ELTSAC"))

    def test_subset_of_larger_multiset(self) -> None:
        assert can_form("SEAL", list("CASTLE"))

    def test_letter_not_available(self) -> None:
        assert not can_form("CATS", list("CAT"))
        assert not can_form("ZEBRA", list("CASTLE"))

    def test_case_insensitive(self) -> None:
        assert can_form("cat", ["c", "A", "t"])

    def test_accepts_string_of_letters(self) -> None:
        assert can_form("TALE", "ACELST")

    def test_does_not_consume_callers_letters(self) -> None:
        letters = list("CASTLE")
        can_form("CAT", letters)
        assert letters == list("CASTLE")

    @pytest.mark.parametrize("word", ["", None, 42])
    def test_malformed_word_is_not_formable(self, word) -> None:
        assert not can_form(word, list("CASTLE"))

    def test_malformed_letters_are_not_formable(self) -> None:
        assert not can_form("CAT", None)
        assert not can_form("CAT", [1, 2, 3])

    def test_matches_counter_containment(self) -> None:
        rng = random.Random(3)
        for _ in range(200):
            letters = [rng.choice("AELST") for _ in range(6)]
            word = "".join(rng.choice("AELST") for _ in range(rng.randint(1, 6)))
            expected = not (Counter(word) - Counter(letters))
            assert can_form(word, letters) == expected


class TestSignature:
    def test_permutation_invariant(self) -> None:
        assert signature_of("CASTLE") == signature_of("ECTALS") == "ACELST"

    def test_case_insensitive(self) -> None:
        assert signature_of("castle") == signature_of("CASTLE")

    def test_list_input(self) -> None:
        assert signature_of(["T", "A", "C"]) == "ACT"

    def test_different_profile_differs(self) -> None:
        assert signature_of("LULL") != signature_of("LUUL")
        assert signature_of("CASTLE") != signature_of("CASTLES")


class TestPoints:
    @pytest.mark.parametrize("length,points", [(3, 30), (4, 45), (5, 60), (6, 75), (7, 90), (8, 105)])
    def test_formula(self, length: int, points: int) -> None:
        assert calculate_points(length) == points


class TestValidateWord:
    def test_valid_word(self, dictionary: DictionaryService) -> None:
        assert validate_word("cat", list("CASTLE"), dictionary)

    def test_too_short(self, dictionary: DictionaryService) -> None:
        assert not validate_word("AT", list("CASTLE"), dictionary)

    def test_not_in_dictionary(self, dictionary: DictionaryService) -> None:
        assert not validate_word("TACS", list("CASTLE"), dictionary)

    def test_not_formable(self, dictionary: DictionaryService) -> None:
        assert not validate_word("TABLE", list("CASTLE"), dictionary)

    def test_longer_than_letters(self, dictionary: DictionaryService) -> None:
        assert not validate_word("CASTLE", list("CAT"), dictionary)


class TestShuffle:
    def test_is_permutation(self) -> None:
        rng = random.Random(1)
        for _ in range(50):
            assert sorted(shuffle_letters("CASTLE", rng)) == sorted("CASTLE")

    def test_reaches_every_position(self) -> None:
        rng = random.Random(2)
        first = Counter(shuffle_letters("ABCDEF", rng)[0] for _ in range(600))
        assert set(first) == set("ABCDEF")
