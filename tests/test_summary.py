import pytest

from quillbook.summary import Link, PartTitle, SectionNumber, Separator, Summary


@pytest.mark.parametrize(
    "parts, expected",
    [
        ([0], "0."),
        ([1, 3], "1.3."),
        ([1, 2, 3], "1.2.3."),
    ],
)
def test_section_number_has_correct_dotted_representation(parts, expected):
    assert str(SectionNumber(parts)) == expected


def test_empty_section_number_displays_as_zero():
    assert str(SectionNumber()) == "0"


def test_section_number_behaves_like_a_sequence():
    number = SectionNumber([1, 2])
    assert number == (1, 2)
    assert number[-1] == 2
    assert len(number) == 2
    assert SectionNumber([*number, 3]) == SectionNumber([1, 2, 3])


def test_section_number_converts_parts_to_int():
    assert SectionNumber(["4", 5]) == (4, 5)


def test_link_defaults():
    link = Link()
    assert link.name == ""
    assert link.location == ""
    assert link.number is None
    assert link.nested_items == []


def test_links_do_not_share_nested_items():
    first = Link(name="First", location="./first.md")
    second = Link(name="Second", location="./second.md")
    first.nested_items.append(Separator())
    assert second.nested_items == []


def test_link_equality_includes_number_and_nesting():
    nested = Link(name="Nested", location="./nested.md", number=SectionNumber([1, 1]))
    a = Link(name="First", location="./first.md", number=SectionNumber([1]), nested_items=[nested])
    b = Link(name="First", location="./first.md", number=SectionNumber([1]), nested_items=[nested])
    assert a == b
    b.number = SectionNumber([2])
    assert a != b and b.number == (2,)


def test_separator_and_part_title_equality():
    assert Separator() == Separator()
    assert PartTitle("Title 2") == PartTitle("Title 2")
    assert PartTitle("Title 2").title == "Title 2"
    assert PartTitle("Title 2") != Separator()


def test_summary_defaults_are_empty():
    summary = Summary()
    assert summary.title is None
    assert list(summary.all_items()) == []


def test_all_items_orders_prefix_numbered_suffix():
    prefix = Link(name="Prefix", location="prefix.md")
    numbered = Link(name="First", location="./first.md", number=SectionNumber([1]))
    suffix = Link(name="Appendix", location="appendix.md")
    summary = Summary(
        prefix_chapters=[prefix],
        numbered_chapters=[PartTitle("Part"), numbered, Separator()],
        suffix_chapters=[suffix],
    )
    assert list(summary.all_items()) == [prefix, PartTitle("Part"), numbered, Separator(), suffix]


def test_all_items_only_yields_top_level():
    child = Link(name="Nested", location="./nested.md", number=SectionNumber([1, 1]))
    parent = Link(name="First", location="./first.md", number=SectionNumber([1]), nested_items=[child])
    summary = Summary(numbered_chapters=[parent])
    items = list(summary.all_items())
    assert items == [parent]
    assert child not in items