from __future__ import annotations
import random
from typing import Iterable, List, Optional, Sequence

from .constants import BONUS_PER_EXTRA_LETTER, MIN_WORD_LENGTH, POINTS_PER_LETTER


def signature_of(letters: Iterable[str]) -> str:
    """Canonical sorted-letter key; anagrams share one signature."""
    return ''.join(sorted(''.join(letters).upper()))


def can_form(word: str, available_letters: Iterable[str]) -> bool:
    """True if every letter of ``word`` can be taken from the available tiles.

    Each tile is consumed once, so repeated letters need repeated tiles.
    Order does not matter.
    """
    if not isinstance(word, str) or not word:
        return False
    try:
        remaining = [ch.upper() for ch in available_letters]
    except (AttributeError, TypeError):
        return False
    for ch in word.upper():
        try:
            remaining.remove(ch)
        except ValueError:
            return False
    return True


def calculate_points(word_length: int) -> int:
    return word_length * POINTS_PER_LETTER + (word_length - MIN_WORD_LENGTH) * BONUS_PER_EXTRA_LETTER


def validate_word(word: str, letters: Sequence[str], dictionary) -> bool:
    """A word scores if it is long enough, uses only the dealt tiles and is in the dictionary."""
    if not isinstance(word, str):
        return False
    word = word.upper()
    if not (MIN_WORD_LENGTH <= len(word) <= len(letters)):
        return False
    if not can_form(word, letters):
        return False
    return dictionary.is_valid(word)


def shuffle_letters(word: str, rng: Optional[random.Random] = None) -> List[str]:
    # Fisher-Yates
    rng = rng or random
    letters = list(word.upper())
    for i in range(len(letters) - 1, 0, -1):
        j = rng.randint(0, i)
        letters[i], letters[j] = letters[j], letters[i]
    return letters
