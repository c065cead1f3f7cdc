"""The in-memory representation of a book and loading it from disk."""

from __future__ import annotations

import json
import logging
from collections import deque
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Iterable, Iterator, Mapping, Union

from .summary import Link, PartTitle, SectionNumber, Separator, Summary, SummaryItem
from .summary_parser import SummaryParseError, parse_summary

logger = logging.getLogger(__name__)

_BOM = "\ufeff"


class BookError(Exception):
    """Raised when a book cannot be loaded or decoded."""


@dataclass
class Chapter:
    """A chapter, usually backed by one markdown file, possibly with sub-chapters.

    ``path`` and ``source_path`` are relative to the ``SUMMARY.md`` file; both
    are ``None`` for a draft chapter.
    """

    name: str = ""
    content: str = ""
    number: SectionNumber | None = None
    sub_items: list["BookItem"] = field(default_factory=list)
    path: str | None = None
    source_path: str | None = None
    parent_names: list[str] = field(default_factory=list)

    @classmethod
    def draft(cls, name: str, parent_names: Iterable[str] = ()) -> "Chapter":
        """Create a draft chapter with no source file and no content."""
        return cls(name=name, parent_names=list(parent_names))

    def is_draft_chapter(self) -> bool:
        """Return True if the chapter has no source file."""
        return self.path is None

    def __str__(self) -> str:
        if self.number is not None:
            return f"{self.number} {self.name}"
        return self.name


BookItem = Union[Chapter, Separator, PartTitle]


def _walk_mut(func: Callable[[BookItem], Any], items: Iterable[BookItem]) -> None:
    for item in items:
        if isinstance(item, Chapter):
            _walk_mut(func, item.sub_items)
        func(item)


def _item_to_data(item: BookItem) -> Any:
    if isinstance(item, Chapter):
        return {
            "Chapter": {
                "name": item.name,
                "content": item.content,
                "number": list(item.number) if item.number is not None else None,
                "sub_items": [_item_to_data(sub) for sub in item.sub_items],
                "path": item.path,
                "source_path": item.source_path,
                "parent_names": list(item.parent_names),
            }
        }
    if isinstance(item, Separator):
        return "Separator"
    if isinstance(item, PartTitle):
        return {"PartTitle": item.title}
    raise BookError(f"Not a book item: {item!r}")


def _item_from_data(data: Any) -> BookItem:
    if data == "Separator":
        return Separator()
    if isinstance(data, Mapping) and len(data) == 1:
        ((kind, value),) = data.items()
        if kind == "PartTitle" and isinstance(value, str):
            return PartTitle(value)
        if kind == "Chapter" and isinstance(value, Mapping):
            try:
                number = value.get("number")
                return Chapter(
                    name=value["name"],
                    content=value["content"],
                    number=SectionNumber(number) if number is not None else None,
                    sub_items=[_item_from_data(sub) for sub in value.get("sub_items", [])],
                    path=value.get("path"),
                    source_path=value.get("source_path"),
                    parent_names=list(value.get("parent_names", [])),
                )
            except (KeyError, TypeError, ValueError) as exc:
                raise BookError(f"Invalid chapter data: {exc}") from exc
    raise BookError(f"Unknown book item: {data!r}")


@dataclass
class Book:
    """A tree of book items."""

    sections: list[BookItem] = field(default_factory=list)

    def iter(self) -> Iterator[BookItem]:
        """Yield every item in the book, depth first."""
        pending: deque[BookItem] = deque(self.sections)
        while pending:
            item = pending.popleft()
            if isinstance(item, Chapter):
                pending.extendleft(reversed(item.sub_items))
            yield item

    __iter__ = iter

    def for_each_mut(self, func: Callable[[BookItem], Any]) -> None:
        """Apply ``func`` to every item, children before their parent chapter."""
        _walk_mut(func, self.sections)

    def push_item(self, item: BookItem) -> "Book":
        """Append an item to the top level of the book."""
        self.sections.append(item)
        return self

    def to_json(self) -> str:
        """Serialise the book to a JSON string."""
        return json.dumps({"sections": [_item_to_data(item) for item in self.sections]})

    @classmethod
    def from_json(cls, data: str | bytes | Mapping[str, Any]) -> "Book":
        """Build a book from a JSON string or an already decoded mapping."""
        if isinstance(data, (str, bytes)):
            try:
                data = json.loads(data)
            except ValueError as exc:
                raise BookError(f"Invalid book JSON: {exc}") from exc
        if not isinstance(data, Mapping) or not isinstance(data.get("sections"), list):
            raise BookError("Book JSON must be an object with a list of sections")
        return cls([_item_from_data(item) for item in data["sections"]])


def _create_missing(src_dir: Path, summary: Summary) -> None:
    items: list[SummaryItem] = list(summary.all_items())
    while items:
        item = items.pop()
        if not isinstance(item, Link):
            continue
        if item.location is not None:
            filename = src_dir / item.location
            if not filename.exists():
                filename.parent.mkdir(parents=True, exist_ok=True)
                logger.debug("Creating missing file %s", filename)
                try:
                    filename.write_text(f"# {item.name}\n", encoding="utf-8")
                except OSError as exc:
                    raise BookError(f"Unable to create missing file: {filename}") from exc
        items.extend(item.nested_items)


def load_book(src_dir: str | Path, create_missing: bool = False) -> Book:
    """Load a book from its source directory, which holds ``SUMMARY.md``."""
    src_dir = Path(src_dir)
    summary_md = src_dir / "SUMMARY.md"
    try:
        summary_content = summary_md.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise BookError(f"Couldn't open SUMMARY.md in {str(src_dir)!r} directory") from exc

    try:
        summary = parse_summary(summary_content)
    except SummaryParseError as exc:
        raise BookError(f"Summary parsing failed for file={str(summary_md)!r}: {exc}") from exc

    if create_missing:
        try:
            _create_missing(src_dir, summary)
        except OSError as exc:
            raise BookError(f"Unable to create missing chapters: {exc}") from exc

    return load_book_from_disk(summary, src_dir)


def load_book_from_disk(summary: Summary, src_dir: str | Path) -> Book:
    """Load every chapter named by ``summary`` from ``src_dir``."""
    logger.debug("Loading the book from disk")
    return Book([load_summary_item(item, src_dir, []) for item in summary.all_items()])


def load_summary_item(
    item: SummaryItem, src_dir: str | Path, parent_names: Iterable[str]
) -> BookItem:
    """Turn one summary entry into a book item, loading chapters from disk."""
    if isinstance(item, Separator):
        return Separator()
    if isinstance(item, PartTitle):
        return PartTitle(item.title)
    if isinstance(item, Link):
        return load_chapter(item, src_dir, parent_names)
    raise BookError(f"Not a summary item: {item!r}")


def load_chapter(link: Link, src_dir: str | Path, parent_names: Iterable[str]) -> Chapter:
    """Load the chapter a link points at, together with its nested items."""
    src_dir = Path(src_dir)
    parents = list(parent_names)

    if link.location is not None:
        logger.debug("Loading %s (%s)", link.name, link.location)
        link_location = Path(link.location)
        location = link_location if link_location.is_absolute() else src_dir / link_location
        try:
            with open(location, encoding="utf-8", newline="") as handle:
                content = handle.read()
        except FileNotFoundError as exc:
            raise BookError(f"Chapter file not found, {link.location}") from exc
        except (OSError, UnicodeDecodeError) as exc:
            raise BookError(f'Unable to read "{link.name}" ({location})') from exc

        if content.startswith(_BOM):
            content = content[len(_BOM):]

        try:
            stripped = str(location.relative_to(src_dir))
        except ValueError as exc:
            raise BookError(f"Chapter {location} is not inside the book at {src_dir}") from exc

        chapter = Chapter(
            name=link.name,
            content=content,
            path=stripped,
            source_path=stripped,
            parent_names=list(parents),
        )
    else:
        chapter = Chapter.draft(link.name, parents)

    chapter.number = link.number
    sub_parents = parents + [link.name]
    chapter.sub_items = [
        load_summary_item(item, src_dir, sub_parents) for item in link.nested_items
    ]
    return chapter


__all__ = [
    "Book",
    "BookError",
    "BookItem",
    "Chapter",
    "load_book",
    "load_book_from_disk",
    "load_chapter",
    "load_summary_item",
]