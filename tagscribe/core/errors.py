"""Exception types raised by the tagscribe core."""

from __future__ import annotations


class TagscribeError(Exception):
    """Base class for every error the core raises on its own."""


class FormatError(TagscribeError, ValueError):
    """Input text does not follow the expected grammar.

    The offending input is kept on ``value`` and echoed in the message.
    """

    def __init__(self, message: str, value: str) -> None:
        super().__init__(f"{message}: {value!r}")
        self.value = value


class PaginationProtocolError(TagscribeError):
    """A paginated response broke the Link header contract."""
