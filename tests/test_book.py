import pytest

from quillbook.book import (
    Book,
    BookError,
    Chapter,
    load_book,
    load_book_from_disk,
    load_chapter,
    load_summary_item,
)
from quillbook.summary import Link, PartTitle, SectionNumber, Separator, Summary

DUMMY_SRC = (
    "\n# Dummy Chapter\n\nthis is some dummy text.\n\nAnd here is some more text.\n"
)


@pytest.fixture
def dummy_link(tmp_path):
    chapter_path = tmp_path / "chapter_1.md"
    chapter_path.write_bytes(DUMMY_SRC.encode("utf-8"))
    return Link(name="Chapter 1", location=str(chapter_path)), tmp_path


@pytest.fixture
def nested_links(dummy_link):
    root, temp = dummy_link
    second_path = temp / "second.md"
    second_path.write_bytes(b"Hello World!")
    root.nested_items.append(
        Link(name="Nested Chapter 1", location=str(second_path), number=SectionNumber([1, 2]))
    )
    root.nested_items.append(Separator())
    root.nested_items.append(
        Link(name="Nested Chapter 1", location=str(second_path), number=SectionNumber([1, 2]))
    )
    return root, temp


def _plain_chapter(name, content, path):
    return Chapter(name=name, content=content, path=path, source_path=path)


def _nested_book():
    return Book(
        [
            Chapter(
                name="Chapter 1",
                content=DUMMY_SRC,
                path="Chapter_1/index.md",
                source_path="Chapter_1/index.md",
                sub_items=[
                    _plain_chapter("Hello World", "", "Chapter_1/hello.md"),
                    Separator(),
                    _plain_chapter("Goodbye World", "", "Chapter_1/goodbye.md"),
                ],
            ),
            Separator(),
        ]
    )


def test_load_a_single_chapter_from_disk(dummy_link):
    link, temp = dummy_link
    got = load_chapter(link, temp, [])
    assert got == _plain_chapter("Chapter 1", DUMMY_SRC, "chapter_1.md")


def test_load_a_single_chapter_with_utf8_bom_from_disk(tmp_path):
    chapter_path = tmp_path / "chapter_1.md"
    chapter_path.write_bytes(("\ufeff" + DUMMY_SRC).encode("utf-8"))
    link = Link(name="Chapter 1", location=str(chapter_path))
    got = load_chapter(link, tmp_path, [])
    assert got == _plain_chapter("Chapter 1", DUMMY_SRC, "chapter_1.md")


def test_cant_load_a_nonexistent_chapter():
    link = Link(name="Chapter 1", location="/foo/bar/baz.md")
    with pytest.raises(BookError):
        load_chapter(link, "", [])


def test_load_recursive_link_with_separators(nested_links):
    root, temp = nested_links
    nested = Chapter(
        name="Nested Chapter 1",
        content="Hello World!",
        number=SectionNumber([1, 2]),
        path="second.md",
        source_path="second.md",
        parent_names=["Chapter 1"],
    )
    should_be = Chapter(
        name="Chapter 1",
        content=DUMMY_SRC,
        path="chapter_1.md",
        source_path="chapter_1.md",
        sub_items=[nested, Separator(), nested],
    )
    got = load_summary_item(root, temp, [])
    assert got == should_be


def test_load_a_book_with_a_single_chapter(dummy_link):
    link, temp = dummy_link
    summary = Summary(numbered_chapters=[link])
    got = load_book_from_disk(summary, temp)
    assert got == Book([_plain_chapter("Chapter 1", DUMMY_SRC, "chapter_1.md")])


def test_book_iter_iterates_over_sequential_items():
    book = Book([Chapter(name="Chapter 1", content=DUMMY_SRC), Separator()])
    assert list(book.iter()) == book.sections


def test_iterate_over_nested_book_items():
    got = list(_nested_book().iter())
    assert len(got) == 5
    names = [item.name for item in got if isinstance(item, Chapter)]
    assert names == ["Chapter 1", "Hello World", "Goodbye World"]


def test_for_each_mut_visits_all_items():
    book = _nested_book()
    visited = []
    book.for_each_mut(visited.append)
    assert len(visited) == len(list(book.iter()))


def test_for_each_mut_visits_children_first_and_can_mutate():
    book = _nested_book()
    order = []

    def rename(item):
        if isinstance(item, Chapter):
            order.append(item.name)
            item.name = item.name.upper()

    book.for_each_mut(rename)
    assert order == ["Hello World", "Goodbye World", "Chapter 1"]
    assert book.sections[0].name == "CHAPTER 1"


def test_cant_load_chapters_with_an_empty_path(dummy_link):
    _, temp = dummy_link
    summary = Summary(numbered_chapters=[Link(name="Empty", location="")])
    with pytest.raises(BookError):
        load_book_from_disk(summary, temp)


def test_cant_load_chapters_when_the_link_is_a_directory(dummy_link):
    _, temp = dummy_link
    directory = temp / "nested"
    directory.mkdir()
    summary = Summary(numbered_chapters=[Link(name="nested", location=str(directory))])
    with pytest.raises(BookError):
        load_book_from_disk(summary, temp)


def test_draft_chapter_has_no_path():
    link = Link(name="Draft", location=None, number=SectionNumber([3]))
    got = load_chapter(link, "", ["Parent"])
    assert got.is_draft_chapter() is True
    assert got.content == ""
    assert got.parent_names == ["Parent"]
    assert got.number == SectionNumber([3])


def test_chapter_display_includes_section_number():
    chapter = Chapter(name="Intro", number=SectionNumber([1, 2]))
    assert str(chapter) == "1.2. Intro"
    assert str(Chapter(name="Plain")) == "Plain"


def test_push_item_appends_and_returns_book():
    book = Book()
    result = book.push_item(Chapter.draft("A")).push_item(Separator())
    assert result is book
    assert book.sections == [Chapter.draft("A"), Separator()]


def test_json_round_trip():
    book = _nested_book()
    book.push_item(PartTitle("Part Two"))
    book.sections[0].number = SectionNumber([1])
    assert Book.from_json(book.to_json()) == book


def test_from_json_rejects_unknown_items():
    with pytest.raises(BookError):
        Book.from_json('{"sections": [{"Mystery": 1}]}')


def test_load_book_creates_missing_chapters(tmp_path):
    (tmp_path / "SUMMARY.md").write_text(
        "# Summary\n\n- [First](./first.md)\n  - [Deep](./sub/deep.md)\n",
        encoding="utf-8",
    )
    book = load_book(tmp_path, create_missing=True)
    assert (tmp_path / "first.md").read_text(encoding="utf-8") == "# First\n"
    assert (tmp_path / "sub" / "deep.md").read_text(encoding="utf-8") == "# Deep\n"
    names = [item.name for item in book.iter() if isinstance(item, Chapter)]
    assert names == ["First", "Deep"]
    assert book.sections[0].sub_items[0].parent_names == ["First"]


def test_load_book_without_create_missing_fails_on_missing_chapter(tmp_path):
    (tmp_path / "SUMMARY.md").write_text("- [First](./first.md)\n", encoding="utf-8")
    with pytest.raises(BookError):
        load_book(tmp_path)


def test_load_book_without_summary_fails(tmp_path):
    with pytest.raises(BookError):
        load_book(tmp_path)