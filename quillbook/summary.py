"""Data types describing a parsed ``SUMMARY.md``."""

from __future__ import annotations

from dataclasses import dataclass, field
from itertools import chain
from typing import Iterable, Iterator, Union


class SectionNumber(tuple):
    """A section number such as ``1.2.3``, stored as a tuple of integers."""

    def __new__(cls, parts: Iterable[int] = ()) -> "SectionNumber":
        return super().__new__(cls, (int(part) for part in parts))

    def __str__(self) -> str:
        if not self:
            return "0"
        return "".join(f"{part}." for part in self)

    def __repr__(self) -> str:
        return f"SectionNumber({list(self)!r})"


@dataclass
class Link:
    """An entry in ``SUMMARY.md`` that points at a chapter, possibly with nested entries.

    A ``location`` of ``None`` marks a draft chapter with no source file.
    """

    name: str = ""
    location: str | None = ""
    number: SectionNumber | None = None
    nested_items: list["SummaryItem"] = field(default_factory=list)


@dataclass(frozen=True)
class Separator:
    """A separator (``---``) between summary entries."""


@dataclass(frozen=True)
class PartTitle:
    """The title of a part of the numbered chapters."""

    title: str


SummaryItem = Union[Link, Separator, PartTitle]


@dataclass
class Summary:
    """The parsed ``SUMMARY.md``, specifying how the book is laid out."""

    title: str | None = None
    prefix_chapters: list[SummaryItem] = field(default_factory=list)
    numbered_chapters: list[SummaryItem] = field(default_factory=list)
    suffix_chapters: list[SummaryItem] = field(default_factory=list)

    def all_items(self) -> Iterator[SummaryItem]:
        """Yield the top-level items: prefix, then numbered, then suffix chapters."""
        return chain(self.prefix_chapters, self.numbered_chapters, self.suffix_chapters)