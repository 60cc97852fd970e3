"""
Card Exceptions
===============

Exception hierarchy for the card pipeline. Every terminal failure is turned
into a user facing message at the command boundary.
"""

from typing import Iterable


class CardError(Exception):
    """Base exception for status card failures."""

    pass


class AssetError(CardError):
    """Exception raised when an asset cannot be read."""

    pass


class MissingFontError(CardError):
    """Exception raised when the vector backend lacks a required font."""

    def __init__(self, missing: Iterable[str]):
        self.missing = list(missing)
        super().__init__(f"missing fonts: {', '.join(self.missing)}")


class CardRenderError(CardError):
    """Exception raised when a rendering engine fails."""

    pass
