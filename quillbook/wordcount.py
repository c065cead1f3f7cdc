"""A renderer that counts the words in each chapter of a book."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Iterator

from .book import Book, Chapter


@dataclass
class WordcountConfig:
    """Settings for word counting, read from the ``output.wordcount`` table."""

    ignores: list[str] = field(default_factory=list)
    deny_odds: bool = False

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None) -> "WordcountConfig":
        """Read kebab-case settings; anything missing or malformed gives the defaults."""
        if not isinstance(data, Mapping):
            return cls()
        ignores = data.get("ignores", [])
        deny_odds = data.get("deny-odds", False)
        if not isinstance(ignores, list) or not all(isinstance(i, str) for i in ignores):
            return cls()
        if not isinstance(deny_odds, bool):
            return cls()
        return cls(ignores=list(ignores), deny_odds=deny_odds)


def count_words(chapter: Chapter) -> int:
    """Return the number of whitespace-separated words in a chapter."""
    return len(chapter.content.split())


def word_counts(book: Book, config: WordcountConfig | None = None) -> Iterator[tuple[str, int]]:
    """Yield ``(chapter name, word count)`` for every chapter not ignored.

    With ``deny_odds`` set, a ``ValueError`` is raised after yielding the first
    chapter whose count is odd.
    """
    config = config or WordcountConfig()
    for item in book.iter():
        if not isinstance(item, Chapter) or item.name in config.ignores:
            continue
        num_words = count_words(item)
        yield item.name, num_words
        if config.deny_odds and num_words % 2 == 1:
            raise ValueError(f"{item.name} has an odd number of words!")


__all__ = ["WordcountConfig", "count_words", "word_counts"]