import pytest

from index_markup.occurrences import Occurrence
from index_markup.scanner import extract_from_content
from index_markup.xhtml import (
    XHTMLIndexBuilder,
    extract_subentries,
    parse_item,
    render_anchor,
)


HEAD = "<div class='index tocentry'>\n<h2>Index</h2>\n<ul class='main'>\n"


def link(position, number):
    return f" <a href='#{position}'>{number}</a>"


@pytest.fixture
def builder():
    return XHTMLIndexBuilder()


def test_parse_item_sides():
    assert parse_item("key@Display|textbf", for_output=True) == "Display"
    assert parse_item("key@Display|textbf", for_output=False) == "key"
    assert parse_item("Term|see{X}", for_output=True) == "Term"
    assert parse_item("Term", for_output=False) == "Term"


def test_extract_subentries_splits_at_most_twice():
    assert extract_subentries("a ! b ! c ! d") == ("a", "b", "c ! d")
    assert extract_subentries("a ! b") == ("a", "b", "")
    assert extract_subentries("a!b") == ("a!b", "", "")
    assert extract_subentries("") == ("", "", "")


def test_case_insensitive_stable_sort(builder):
    entries = builder.collect([
        ("apple", "", "p1"),
        ("Banana", "", "p2"),
        ("apple", "", "p3"),
    ])
    ordered = builder.sort(entries)
    assert [(e.main, e.position) for e, _ in ordered] == [
        ("apple", "p1"), ("apple", "p3"), ("Banana", "p2"),
    ]


def test_single_entry(builder):
    output = builder.render([("Term", "Term", "p1")])
    assert output == HEAD + "<li class='main'>Term:" + link("p1", 1) + "</li></ul>\n</div>\n"


def test_repeated_entry_adds_numbered_links(builder):
    output = builder.render([
        ("apple", "apple", "p1"),
        ("Banana", "Banana", "p2"),
        ("apple", "apple", "p3"),
    ])
    assert output == (
        HEAD
        + "<li class='main'>apple:" + link("p1", 1) + "," + link("p3", 2) + "</li>\n"
        + "<li class='main'>Banana:" + link("p2", 1)
        + "</li></ul>\n</div>\n"
    )


def test_nested_levels(builder):
    output = builder.render([
        Occurrence("Bread ! production", "Bread ! production", "p1"),
        Occurrence("Bread ! production ! wheat", "Bread ! production ! wheat", "p2"),
        Occurrence("Bread ! baking", "Bread ! baking", "p3"),
        Occurrence("Cake", "Cake", "p4"),
    ])
    assert output == (
        HEAD
        + "<li class='main'>Bread"
        + "\n<ul class='subentry'><li class='subentry'>baking:" + link("p3", 1) + "</li>\n"
        + "<li class='subentry'>production:" + link("p1", 1)
        + "\n<ul class='subsubentry'><li class='subsubentry'>wheat:" + link("p2", 1) + "</li>\n"
        + "</ul>\n</li>\n</ul>\n</li>\n"
        + "<li class='main'>Cake:" + link("p4", 1)
        + "</li></ul>\n</div>\n"
    )


def test_all_open_levels_are_closed(builder):
    output = builder.render([("a ! b ! c", "a ! b ! c", "p1")])
    assert output.endswith("</li></ul>\n" * 3 + "</div>\n")
    assert output.count("<ul") == output.count("</ul>")
    assert output.count("<li") == output.count("</li>")


def test_sort_key_orders_but_display_shows_term(builder):
    output = builder.render([
        ("zeta@Alpha", "zeta@Alpha", "p1"),
        ("beta", "beta", "p2"),
    ])
    assert output.index("beta") < output.index("Alpha")
    assert "zeta" not in output


def test_display_comes_from_plain_rendering(builder):
    output = builder.render([("LyX@\\LyX", "LyX@LyX", "p1"), ("R&D", "", "p2")])
    assert "<li class='main'>LyX:" in output
    assert "<li class='main'>R&amp;D:" in output
    assert "\\LyX" not in output


def test_rendering_twice_is_identical(builder):
    occurrences = [("b ! x", "b ! x", "p1"), ("a", "a", "p2"), ("b ! x", "b ! x", "p3")]
    assert builder.render(occurrences) == builder.render(occurrences)


def test_empty_input_renders_nothing(builder):
    assert builder.render([]) == ""


def test_non_default_index_is_not_printed_with_multiple_indices():
    builder = XHTMLIndexBuilder(use_indices=True)
    assert builder.render([("Term", "Term", "p1")], "names") == ""
    assert builder.render([("Term", "Term", "p1")], "idx").startswith(HEAD)


def test_custom_anchor_and_heading():
    builder = XHTMLIndexBuilder(anchor=lambda pos: f"magic-{pos}", heading="Register",
                                heading_tag="h1", css_class="toc")
    output = builder.render([("Term", "Term", 7)])
    assert output.startswith("<div class='index toc'>\n<h1>Register</h1>\n")
    assert "href='#magic-7'" in output


def test_render_anchor():
    assert render_anchor("chap1.tex:12") == "<a id='chap1.tex_12' />"


def test_scanned_command_entry_keeps_a_label(builder):
    occurrences = extract_from_content("Text \\index{LyX@\\LyX} more.", "a.tex")
    output = builder.render(occurrences)
    assert "<li class='main'>:" not in output
    assert "<li class='main'>\\LyX:" + link("a.tex_1", 1) in output


def test_display_falls_back_per_level(builder):
    output = builder.render([("Tools ! LyX@\\LyX", "Tools ! LyX@", "p1")])
    assert "<li class='main'>Tools" in output
    assert "<li class='subentry'>\\LyX:" in output


def test_back_links_match_rendered_anchors(builder):
    output = builder.render([("Term", "Term", "chap1.tex:12")])
    target = render_anchor("chap1.tex:12")
    assert "href='#chap1.tex_12'" in output
    assert target == "<a id='chap1.tex_12' />"
