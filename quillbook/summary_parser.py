"""Parser turning the text of a ``SUMMARY.md`` into a :class:`Summary`."""

from __future__ import annotations

import bisect
import logging
import re
from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterable, Iterator

from markdown_it import MarkdownIt
from markdown_it.token import Token

from .summary import Link, PartTitle, SectionNumber, Separator, Summary, SummaryItem

logger = logging.getLogger(__name__)

PARAGRAPH = "paragraph"
HEADING = "heading"
LIST = "list"
ITEM = "item"
LINK = "link"
EMPHASIS = "emphasis"
STRONG = "strong"
IMAGE = "image"
BLOCK_QUOTE = "block_quote"
CODE_BLOCK = "code_block"


class SummaryParseError(ValueError):
    """Raised when a ``SUMMARY.md`` cannot be parsed."""


class _Kind(Enum):
    START = auto()
    END = auto()
    TEXT = auto()
    CODE = auto()
    SOFT_BREAK = auto()
    HARD_BREAK = auto()
    RULE = auto()
    HTML = auto()


@dataclass(frozen=True)
class _Event:
    kind: _Kind
    tag: str = ""
    level: int = 0
    text: str = ""

    def starts(self, tag: str, level: int = 0) -> bool:
        return (
            self.kind is _Kind.START
            and self.tag == tag
            and (not level or self.level == level)
        )

    def ends(self, tag: str, level: int = 0) -> bool:
        return (
            self.kind is _Kind.END
            and self.tag == tag
            and (not level or self.level == level)
        )

    def closes(self, opening: "_Event") -> bool:
        return (
            self.kind is _Kind.END
            and self.tag == opening.tag
            and self.level == opening.level
        )


_BLOCK_PAIRS = {
    "bullet_list": LIST,
    "ordered_list": LIST,
    "list_item": ITEM,
    "blockquote": BLOCK_QUOTE,
}

_INLINE_PAIRS = {
    "link": LINK,
    "em": EMPHASIS,
    "strong": STRONG,
}


def _markdown() -> MarkdownIt:
    md = MarkdownIt("commonmark")
    # Keep link destinations as written; only "%20" is decoded, by the parser.
    md.normalizeLink = lambda url: url
    return md


def _inline_events(children: Iterable[Token]) -> Iterator[_Event]:
    for child in children:
        kind = child.type
        if kind in ("text", "text_special"):
            yield _Event(_Kind.TEXT, text=child.content)
        elif kind == "code_inline":
            yield _Event(_Kind.CODE, text=child.content)
        elif kind == "softbreak":
            yield _Event(_Kind.SOFT_BREAK)
        elif kind == "hardbreak":
            yield _Event(_Kind.HARD_BREAK)
        elif kind == "html_inline":
            yield _Event(_Kind.HTML, text=child.content)
        elif kind == "link_open":
            href = child.attrGet("href")
            yield _Event(_Kind.START, LINK, text=str(href) if href is not None else "")
        elif kind == "image":
            yield _Event(_Kind.START, IMAGE)
            yield from _inline_events(child.children or ())
            yield _Event(_Kind.END, IMAGE)
        else:
            base, _, suffix = kind.rpartition("_")
            tag = _INLINE_PAIRS.get(base)
            if tag and suffix == "open":
                yield _Event(_Kind.START, tag)
            elif tag and suffix == "close":
                yield _Event(_Kind.END, tag)


def _block_events(token: Token) -> Iterator[_Event]:
    kind = token.type
    if kind in ("paragraph_open", "paragraph_close"):
        if not token.hidden:
            yield _Event(_Kind.START if kind.endswith("open") else _Kind.END, PARAGRAPH)
    elif kind in ("heading_open", "heading_close"):
        level = int(token.tag[1:])
        yield _Event(_Kind.START if kind.endswith("open") else _Kind.END, HEADING, level)
    elif kind == "hr":
        yield _Event(_Kind.RULE)
    elif kind == "html_block":
        yield _Event(_Kind.HTML, text=token.content)
    elif kind in ("fence", "code_block"):
        yield _Event(_Kind.START, CODE_BLOCK)
        yield _Event(_Kind.TEXT, text=token.content)
        yield _Event(_Kind.END, CODE_BLOCK)
    elif kind == "inline":
        yield from _inline_events(token.children or ())
    else:
        base, _, suffix = kind.rpartition("_")
        tag = _BLOCK_PAIRS.get(base)
        if tag and suffix == "open":
            yield _Event(_Kind.START, tag)
        elif tag and suffix == "close":
            yield _Event(_Kind.END, tag)


def _event_stream(text: str) -> Iterator[tuple[_Event, int]]:
    """Yield markdown events with the offset of the line they start on."""
    line_starts = [0] + [match.end() for match in re.finditer("\n", text)]
    offset = 0
    for token in _markdown().parse(text):
        if token.map:
            offset = line_starts[min(token.map[0], len(line_starts) - 1)]
        for event in _block_events(token):
            yield event, offset


def _stringify_events(events: Iterable[_Event]) -> str:
    pieces = []
    for event in events:
        if event.kind in (_Kind.TEXT, _Kind.CODE):
            pieces.append(event.text)
        elif event.kind is _Kind.SOFT_BREAK:
            pieces.append(" ")
    return "".join(pieces)


def stringify_markdown(text: str) -> str:
    """Return the plain text of a markdown snippet, with styling removed."""
    return _stringify_events(event for event, _ in _event_stream(text))


def _renumber(items: list[SummaryItem], level: int, by: int) -> None:
    for item in items:
        if isinstance(item, Link):
            if item.number is not None:
                parts = list(item.number)
                parts[level] += by
                item.number = SectionNumber(parts)
            _renumber(item.nested_items, level, by)


def _last_link(items: list[SummaryItem]) -> Link:
    for item in reversed(items):
        if isinstance(item, Link):
            return item
    raise SummaryParseError(
        "Unable to get last link because the list of SummaryItems doesn't contain any Links"
    )


class SummaryParser:
    """A recursive-descent parser for the text of a ``SUMMARY.md``."""

    def __init__(self, text: str) -> None:
        self._src = text
        self._stream = _event_stream(text)
        self._offset = 0
        self._back: _Event | None = None
        self._root_items = 0

    def parse(self) -> Summary:
        """Parse the whole text into a :class:`Summary`."""
        title = self.parse_title()
        try:
            prefix = self.parse_affix(True)
        except SummaryParseError as exc:
            raise SummaryParseError(
                f"There was an error parsing the prefix chapters: {exc}"
            ) from exc
        try:
            numbered = self.parse_parts()
        except SummaryParseError as exc:
            raise SummaryParseError(
                f"There was an error parsing the numbered chapters: {exc}"
            ) from exc
        try:
            suffix = self.parse_affix(False)
        except SummaryParseError as exc:
            raise SummaryParseError(
                f"There was an error parsing the suffix chapters: {exc}"
            ) from exc
        return Summary(title, prefix, numbered, suffix)

    def parse_title(self) -> str | None:
        """Parse an optional leading ``# Title``, skipping HTML such as comments."""
        while True:
            event = self._next_event()
            if event is not None and event.starts(HEADING, 1):
                return _stringify_events(self._collect_until(HEADING, 1))
            if event is not None and event.kind is _Kind.HTML:
                continue
            return None

    def parse_affix(self, is_prefix: bool) -> list[SummaryItem]:
        """Parse unnumbered prefix or suffix chapters."""
        items: list[SummaryItem] = []
        logger.debug("Parsing %s items", "prefix" if is_prefix else "suffix")
        while True:
            event = self._next_event()
            if event is None:
                break
            if event.starts(LIST) or event.starts(HEADING, 1):
                if is_prefix:
                    self._push_back(event)
                    break
                raise self._error("Suffix chapters cannot be followed by a list")
            if event.starts(LINK):
                items.append(self._parse_link(event.text))
            elif event.kind is _Kind.RULE:
                items.append(Separator())
        return items

    def parse_parts(self) -> list[SummaryItem]:
        """Parse the numbered chapters, split into optionally titled parts."""
        parts: list[SummaryItem] = []
        while True:
            event = self._next_event()
            if event is None:
                break
            if event.starts(PARAGRAPH):
                self._push_back(event)
                break
            if event.starts(HEADING, 1):
                logger.debug("Found a h1 in the SUMMARY")
                title: str | None = _stringify_events(self._collect_until(HEADING, 1))
            else:
                self._push_back(event)
                title = None

            numbered = self.parse_numbered()
            if title is not None:
                parts.append(PartTitle(title))
            parts.extend(numbered)
        return parts

    def parse_numbered(self) -> list[SummaryItem]:
        """Parse one run of numbered chapters, continuing the numbering so far."""
        items: list[SummaryItem] = []
        first = True
        while True:
            event = self._next_event()
            if event is None:
                break
            if event.starts(PARAGRAPH):
                if not first:
                    self._push_back(event)
                    break
            elif event.starts(HEADING, 1):
                self._push_back(event)
                break
            elif event.starts(LIST):
                self._push_back(event)
                bunch = self._parse_nested_numbered(SectionNumber())
                _renumber(bunch, 0, self._root_items)
                self._root_items += len(bunch)
                items.extend(bunch)
            elif event.kind is _Kind.START:
                while (inner := self._next_event()) is not None:
                    if inner.closes(event):
                        break
            elif event.kind is _Kind.RULE:
                items.append(Separator())
            first = False
        return items

    def _parse_nested_numbered(self, parent: SectionNumber) -> list[SummaryItem]:
        logger.debug("Parsing numbered chapters at level %s", parent)
        items: list[SummaryItem] = []
        while True:
            event = self._next_event()
            if event is None or event.ends(LIST):
                break
            if event.starts(ITEM):
                items.append(self._parse_nested_item(parent, len(items)))
            elif event.starts(LIST):
                if not items:
                    continue
                last = _last_link(items)
                if last.number is None:
                    raise SummaryParseError("All numbered chapters have numbers")
                last.nested_items = self._parse_nested_numbered(last.number)
        return items

    def _parse_nested_item(self, parent: SectionNumber, existing: int) -> SummaryItem:
        while True:
            event = self._next_event()
            if event is not None and event.starts(PARAGRAPH):
                continue
            if event is not None and event.starts(LINK):
                link = self._parse_link(event.text)
                link.number = SectionNumber((*parent, existing + 1))
                return link
            logger.warning("Expected a start of a link, actually got %r", event)
            raise self._error(
                "The link items for nested chapters must only contain a hyperlink"
            )

    def _parse_link(self, href: str) -> Link:
        href = href.replace("%20", " ")
        name = _stringify_events(self._collect_until(LINK))
        return Link(name=name, location=href or None)

    def _collect_until(self, tag: str, level: int = 0) -> list[_Event]:
        events = []
        for event, _ in self._stream:
            if event.ends(tag, level):
                return events
            events.append(event)
        logger.debug("Reached end of stream without finding the end of %s", tag)
        return events

    def _push_back(self, event: _Event) -> None:
        if self._back is not None:
            raise RuntimeError("only one event can be pushed back")
        self._back = event

    def _next_event(self) -> _Event | None:
        if self._back is not None:
            event, self._back = self._back, None
            return event
        try:
            event, self._offset = next(self._stream)
        except StopIteration:
            return None
        return event

    def _current_location(self) -> tuple[int, int]:
        previous = self._src[: self._offset]
        line = previous.count("\n") + 1
        start_of_line = max(previous.rfind("\n"), 0)
        column = len(self._src[start_of_line : self._offset])
        return line, column

    def _error(self, message: str) -> SummaryParseError:
        line, column = self._current_location()
        return SummaryParseError(
            f"failed to parse SUMMARY.md line {line}, column {column}: {message}"
        )


def parse_summary(text: str) -> Summary:
    """Parse the text of a ``SUMMARY.md`` file."""
    return SummaryParser(text).parse()


__all__ = [
    "SummaryParseError",
    "SummaryParser",
    "parse_summary",
    "stringify_markdown",
]

# Keep bisect import meaningful for offset lookups elsewhere if needed.
del bisect