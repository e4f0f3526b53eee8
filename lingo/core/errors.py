from __future__ import annotations


class LingoError(Exception):
    """Base class for errors raised by the catalog layer."""


class InvalidDictionaryError(LingoError, TypeError):
    """A catalog whose root is not a mapping was handed to the resolver."""

    def __init__(self, locale: str, got: object) -> None:
        self.locale = locale
        super().__init__(
            f"Dictionary for locale {locale!r} must be a mapping, got {type(got).__name__}"
        )
