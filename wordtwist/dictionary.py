from __future__ import annotations
import logging
from pathlib import Path
from typing import FrozenSet, Iterable, Optional, Union

from . import config
from .constants import MAX_WORD_LENGTH, MIN_WORD_LENGTH
from .errors import CorpusLoadError

logger = logging.getLogger(__name__)


def load_corpus(
    raw_lines: Iterable[str],
    min_len: int = MIN_WORD_LENGTH,
    max_len: int = MAX_WORD_LENGTH,
    skip_proper_nouns: bool = False,
) -> FrozenSet[str]:
    """Normalize raw word-list lines into an immutable set of uppercase words.

    Keeps only ASCII alphabetic tokens whose length lies in [min_len, max_len].
    With ``skip_proper_nouns`` any token containing an uppercase letter is
    dropped, for word lists that capitalize names.
    """
    words = set()
    for line in raw_lines:
        token = line.strip()
        if not (min_len <= len(token) <= max_len):
            continue
        if not (token.isascii() and token.isalpha()):
            continue
        if skip_proper_nouns and not token.islower():
            continue
        words.add(token.upper())
    if not words:
        raise CorpusLoadError(
            f'No words of length {min_len}-{max_len} found in dictionary source'
        )
    return frozenset(words)


def load_corpus_file(
    path: Union[str, Path],
    min_len: int = MIN_WORD_LENGTH,
    max_len: int = MAX_WORD_LENGTH,
    skip_proper_nouns: bool = False,
) -> FrozenSet[str]:
    path = Path(path)
    try:
        with path.open('r', encoding='utf-8') as f:
            words = load_corpus(f, min_len, max_len, skip_proper_nouns)
    except (OSError, UnicodeDecodeError) as e:
        raise CorpusLoadError(f'Cannot read dictionary at {path}: {e}') from e
    logger.info('Dictionary loaded: %d words from %s', len(words), path)
    return words


class DictionaryService:
    def __init__(self, words: Iterable[str]):
        # Store uppercase words
        self._words: FrozenSet[str] = frozenset(w.upper() for w in words)

    @property
    def words(self) -> FrozenSet[str]:
        return self._words

    @property
    def size(self) -> int:
        return len(self._words)

    def is_valid(self, word: Optional[str]) -> bool:
        if not word or not isinstance(word, str):
            return False
        return word.upper() in self._words

    def __contains__(self, word: object) -> bool:
        return isinstance(word, str) and self.is_valid(word)

    def __len__(self) -> int:
        return len(self._words)


def load_default_dictionary(path: Optional[Union[str, Path]] = None) -> DictionaryService:
    """Load the configured word list (the bundled one unless overridden)."""
    words = load_corpus_file(path or config.WORDS_PATH, skip_proper_nouns=True)
    return DictionaryService(words)
