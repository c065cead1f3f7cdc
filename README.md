# quillbook

quillbook reads a book written as a directory of Markdown files. The book's
layout comes from a `SUMMARY.md` file: an optional title, unnumbered prefix
chapters, numbered chapters (optionally split into titled parts and nested to
any depth), and unnumbered suffix chapters.

## Installing

```
pip install quillbook
```

## The SUMMARY.md format

```markdown
# Summary

[Introduction](intro.md)

# Part One

- [Getting started](start.md)
    - [Installing](start/install.md)
- [A draft chapter]()

---

[Appendix](appendix.md)
```

- A leading level-one heading is the summary's title. HTML comments before
  it are skipped.
- Links before the first list or level-one heading are prefix chapters.
- List items are numbered chapters; nested lists give numbers such as `1.1.`.
  Numbering carries on across separators (`---`) and part titles.
- A level-one heading between lists starts a new part.
- A link with an empty target is a draft chapter with no file behind it.
  `%20` in a link target is read as a space.
- Links after the numbered chapters are suffix chapters; a list after them is
  an error.

## Parsing a summary

```python
from pathlib import Path
from quillbook.summary_parser import parse_summary

summary = parse_summary(Path("src/SUMMARY.md").read_text(encoding="utf-8"))
print(summary.title)
for item in summary.all_items():
    print(item)
```

`parse_summary` returns a `quillbook.summary.Summary` whose items are `Link`,
`Separator` and `PartTitle` objects. A `Link` carries its `name`, `location`
(`None` for a draft), `number` (a `SectionNumber`, printed as e.g. `1.2.`)
and `nested_items`. `SummaryParser` exposes the individual steps
(`parse_title`, `parse_affix`, `parse_parts`, `parse_numbered`) as well as
`parse`.

Malformed input raises `SummaryParseError`; for errors such as a list after
the suffix chapters, or a numbered item that is not a link, the message gives
the line and column of the problem.

`stringify_markdown(text)` returns the plain text of a Markdown snippet with
its styling removed.

## Loading a book

```python
from quillbook.book import load_book, Chapter

book = load_book("src", create_missing=True)
for item in book.iter():
    if isinstance(item, Chapter):
        print(item)   # e.g. "1.2. Installing"
```

`load_book` reads `SUMMARY.md` from the source directory and then each
chapter's file, stripping a UTF-8 byte-order mark. With `create_missing=True`,
chapter files that do not exist yet are created with a heading holding the
chapter's name. Problems such as a missing `SUMMARY.md`, a summary that does
not parse, or a missing chapter file raise `BookError`.

`load_book_from_disk(summary, src_dir)`, `load_summary_item` and
`load_chapter` load from an already parsed summary.

`Book.iter()` walks every item depth first; `Book.for_each_mut(func)` calls
`func` on every item, children before their parent, so chapters can be
changed in place. `Book.push_item(item)` appends a top-level item.
`Book.to_json()` returns the book as a JSON string, and `Book.from_json()`
builds a book from a JSON string, bytes, or an already decoded mapping.

## Preprocessors and word counts

`quillbook.nop.Nop` is a preprocessor that hands the book back unchanged; it
raises `PreprocessorError` when its configuration holds a `blow-up` key, and
supports every renderer except one named `not-supported`.

`quillbook.wordcount` counts the whitespace-separated words in each chapter:

```python
from quillbook.wordcount import WordcountConfig, word_counts

config = WordcountConfig.from_mapping({"ignores": ["Appendix"], "deny-odds": False})
for name, count in word_counts(book, config):
    print(f"{name}: {count}")
```

With `deny-odds` set, `word_counts` raises `ValueError` after yielding the
first chapter whose word count is odd.

## What quillbook does not do

quillbook is a library only. It has no command-line tool, and it does not
create new books, read a `book.toml` configuration, render books to HTML or
other formats, run external preprocessors or renderers, test code samples,
serve a book over HTTP, or watch files for changes.