"""A preprocessor that leaves the book exactly as it was given."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from .book import Book


class PreprocessorError(Exception):
    """Raised when a preprocessor fails to process a book."""


class Nop:
    """A no-op preprocessor.

    Setting the ``blow-up`` key in its configuration makes it fail, which is
    useful for exercising error handling.
    """

    name = "nop-preprocessor"

    def run(self, preprocessor_config: Mapping[str, Any] | None, book: Book) -> Book:
        """Return ``book`` unchanged, or raise if the config asks to blow up."""
        if preprocessor_config is not None and "blow-up" in preprocessor_config:
            raise PreprocessorError("Boom!!1!")
        return book

    def supports_renderer(self, renderer: str) -> bool:
        """Every renderer is supported except one named ``not-supported``."""
        return renderer != "not-supported"


__all__ = ["Nop", "PreprocessorError"]