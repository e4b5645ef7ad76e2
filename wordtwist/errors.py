from __future__ import annotations


class WordTwistError(Exception):
    """Base class for errors raised by the game core."""


class CorpusLoadError(WordTwistError):
    """The dictionary source is unreadable or yields no usable words."""


class PuzzleCacheError(WordTwistError):
    """The puzzle cache cannot be built or was used before it was built."""


class CorruptSessionError(WordTwistError, RuntimeError):
    """A stored session record could not be decoded."""
