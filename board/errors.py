"""
Geocoin — board/errors.py
Error taxonomy for the cache board.
"""


class BoardError(Exception):
    """Root of every error raised by the board core."""


class DecodeError(BoardError, ValueError):
    """A momento could not be parsed back into a cache."""


class NotFoundError(BoardError, KeyError):
    """A cell was looked up that is not part of the current visible set."""

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the message readable.
        return str(self.args[0]) if self.args else ""


class StaleVisibleError(BoardError, RuntimeError):
    """A scan was started while the previous scan's caches were still visible."""


class PersistenceError(BoardError):
    """The persistence gateway failed to read or write a value."""
