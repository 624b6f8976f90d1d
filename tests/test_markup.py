import pytest

from index_markup.markup import (
    CommandKind,
    IndexEntry,
    classify_command,
    parse_entry,
    separator_positions,
    split_markup,
    split_unescaped,
)


def test_levels_and_see():
    entry = parse_entry("Alpha!Beta!Gamma|see{Delta}")
    assert entry.levels == ("Alpha", "Beta", "Gamma")
    assert entry.kind is CommandKind.SEE
    assert entry.see_targets == ("Delta",)
    assert entry.command == "see{Delta}"


def test_seealso_keeps_all_targets():
    entry = parse_entry("Bread!production|seealso{Flour,Yeast}")
    assert entry.levels == ("Bread", "production")
    assert entry.kind is CommandKind.SEE_ALSO
    assert entry.see_targets == ("Flour", "Yeast")


@pytest.mark.parametrize("raw", ["", "plain", "|", "!!", "a|b|c", "@@@", "|(", "x\"|y"])
def test_parse_never_fails(raw):
    entry = parse_entry(raw)
    assert isinstance(entry, IndexEntry)
    assert len(entry.levels) >= 1


def test_no_separators_is_single_level():
    levels, command = split_markup("Term")
    assert levels == ["Term"]
    assert command is None


def test_extra_levels_are_carried():
    entry = parse_entry("a!b!c!d")
    assert entry.levels == ("a", "b", "c", "d")
    assert entry.subsub == "c"


def test_only_first_bar_splits():
    levels, command = split_markup("Term|textbf|(")
    assert levels == ["Term"]
    assert command == "textbf|("


def test_escaped_separators_are_skipped():
    assert separator_positions('a"!b!c', "!") == [4]
    assert split_unescaped('a"!b!c', "!") == ['a"!b', "c"]
    levels, command = split_markup('x"|y|see{z}')
    assert levels == ['x"|y']
    assert command == "see{z}"


def test_escape_character_is_a_parameter():
    assert split_unescaped("a\\!b!c", "!", escape_char="\\") == ["a\\!b", "c"]
    assert split_unescaped('a"!b', "!", escape_char=None) == ['a"', "b"]


def test_levels_are_trimmed_and_empty_kept():
    assert split_unescaped(" a ! ! b ", "!") == ["a", "", "b"]
    assert split_unescaped(" a ! ! b ", "!", keep_empty=False) == ["a", "b"]


@pytest.mark.parametrize("command, kind, leftover", [
    (None, CommandKind.NONE, ""),
    ("", CommandKind.NONE, ""),
    ("(", CommandKind.RANGE_START, ""),
    (")", CommandKind.RANGE_END, ""),
    ("(textbf", CommandKind.RANGE_START, "textbf"),
    ("textbf|(", CommandKind.RANGE_START, "textbf"),
    ("textbf", CommandKind.FORMAT, "textbf"),
    ("unknownseecmd{X}", CommandKind.FORMAT, "unknownseecmd{X}"),
    ("seesaw", CommandKind.FORMAT, "seesaw"),
])
def test_classify_command(command, kind, leftover):
    parsed = classify_command(command)
    assert parsed.kind is kind
    assert parsed.leftover == leftover


def test_seealso_is_not_mistaken_for_see():
    parsed = classify_command("seealso{A, B}")
    assert parsed.kind is CommandKind.SEE_ALSO
    assert parsed.see_targets == ("A", "B")


def test_see_with_several_targets_keeps_first():
    parsed = classify_command("see{A,B}")
    assert parsed.kind is CommandKind.SEE
    assert parsed.see_targets == ("A",)
    assert parsed.multiple_see


def test_see_unescapes_braces_and_keeps_trailing_text():
    parsed = classify_command("see\\{Delta\\}textbf")
    assert parsed.kind is CommandKind.SEE
    assert parsed.see_targets == ("Delta",)
    assert parsed.leftover == "textbf"


def test_range_wins_over_see():
    parsed = classify_command("see{X}|(")
    assert parsed.kind is CommandKind.RANGE_START
    assert parsed.see_targets == ()
    assert parsed.leftover == "see{X}"


def test_empty_see_is_not_a_cross_reference():
    parsed = classify_command("see{}")
    assert parsed.kind is CommandKind.FORMAT


def test_grouping_predicates_ignore_case():
    a = IndexEntry(levels=("Apple", "Red", "x"))
    b = IndexEntry(levels=("apple", "red", "X"))
    c = IndexEntry(levels=("apple", "green"))
    assert a.same_main(b) and a.same_sub(b) and a.same_all(b)
    assert a.same_main(c)
    assert not a.same_sub(c)
    assert not a.same_all(c)


def test_missing_levels_read_empty():
    entry = IndexEntry(levels=("Main",))
    assert entry.sub == ""
    assert entry.subsub == ""
    assert entry.term_path == "Main"
