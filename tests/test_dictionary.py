"""Tests for corpus loading and the dictionary service."""

from __future__ import annotations

from pathlib import Path

import pytest

from wordtwist.constants import PUZZLE_WORDS
from wordtwist.dictionary import DictionaryService, load_corpus, load_corpus_file, load_default_dictionary
from wordtwist.game_logic import validate_word
from wordtwist.errors import CorpusLoadError


class TestLoadCorpus:
    def test_uppercases_and_strips(self) -> None:
        assert load_corpus(["  cat\n", "Dog\r\n"]) == frozenset({"CAT", "DOG"})

    def test_length_bounds(self) -> None:
        words = load_corpus(["at", "cat", "elephant", "elephants"], min_len=3, max_len=8)
        assert words == frozenset({"CAT", "ELEPHANT"})

    def test_alphabetic_only(self) -> None:
        words = load_corpus(["can't", "co-op", "abc1", "café", "good"])
        assert words == frozenset({"GOOD"})

    def test_deduplicates(self) -> None:
        assert load_corpus(["cat", "CAT", "Cat"]) == frozenset({"CAT"})

    def test_skip_proper_nouns(self) -> None:
        assert load_corpus(["Paris", "cat"], skip_proper_nouns=True) == frozenset({"CAT"})
        assert load_corpus(["Paris", "cat"]) == frozenset({"PARIS", "CAT"})

    def test_empty_result_raises(self) -> None:
        with pytest.raises(CorpusLoadError):
            load_corpus(["a", "be", "1234"])

    def test_empty_source_raises(self) -> None:
        with pytest.raises(CorpusLoadError):
            load_corpus([])


class TestLoadCorpusFile:
    def test_reads_file(self, tmp_path: Path) -> None:
        path = tmp_path / "words.txt"
        path.write_text("cat\ndog\nox\n", encoding="utf-8")
        assert load_corpus_file(path) == frozenset({"CAT", "DOG"})

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(CorpusLoadError):
            load_corpus_file(tmp_path / "nope.txt")

    def test_undecodable_file_raises(self, tmp_path: Path) -> None:
        path = tmp_path / "words.txt"
        path.write_bytes(b"\xff\xfe\xfa\x00cat")
        with pytest.raises(CorpusLoadError):
            load_corpus_file(path)


class TestDictionaryService:
    def test_is_valid_case_insensitive(self) -> None:
        d = DictionaryService({"CAT"})
        assert d.is_valid("cat")
        assert d.is_valid("CAT")
        assert "Cat" in d

    def test_invalid_inputs(self) -> None:
        d = DictionaryService({"CAT"})
        assert not d.is_valid("")
        assert not d.is_valid(None)
        assert not d.is_valid("DOG")
        assert 5 not in d

    def test_size(self) -> None:
        d = DictionaryService({"cat", "CAT", "dog"})
        assert d.size == 2
        assert len(d) == 2


class TestBundledDictionary:
    def test_loads(self) -> None:
        d = load_default_dictionary()
        assert d.size > 40000
        assert all(3 <= len(w) <= 8 and w.isupper() for w in d.words)

    def test_contains_every_puzzle_word(self) -> None:
        d = load_default_dictionary()
        missing = [w for words in PUZZLE_WORDS.values() for w in words if not d.is_valid(w)]
        assert missing == []

    @pytest.mark.parametrize(
        "word, base",
        [
            ("MINT", "MOUNTAIN"),
            ("UNIT", "MOUNTAIN"),
            ("REPAINT", "PAINTER"),
            ("PAIN", "PAINTER"),
            ("STEAL", "CASTLE"),
            ("LEAST", "CASTLE"),
            ("PLATE", "ELEPHANT"),
            ("GARDEN", "GARDENS"),
        ],
    )
    def test_common_words_from_curated_letters(self, word: str, base: str) -> None:
        assert validate_word(word, list(base), load_default_dictionary())

    def test_rejects_non_words(self) -> None:
        d = load_default_dictionary()
        assert not d.is_valid("TACS")
        assert not d.is_valid("XQZT")
