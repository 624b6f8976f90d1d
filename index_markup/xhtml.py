"""XHTML output: the printed index as a nested list.

All occurrences of a document are collected first, sorted case-insensitively
on (main, sub, subsub), and then grouped: every distinct entry becomes one
list item, and each of its occurrences one numbered back link.
"""

from typing import Callable, Iterable, Optional

from index_markup.latex import DEFAULT_INDEX
from index_markup.markup import (
    COMMAND_SEPARATOR,
    DEFAULT_ESCAPE,
    SORT_SEPARATOR,
    IndexEntry,
    find_unescaped,
)
from index_markup.xmlstream import clean_id, comp_tag, end_tag, escape, start_tag


DISPLAY_SEPARATOR = ' ! '


def parse_item(text: str, for_output: bool, escape_char: Optional[str] = DEFAULT_ESCAPE) -> str:
    """Keep the display side (for_output) or the sort side of "key@term",
    and drop any command."""
    loc = find_unescaped(text, SORT_SEPARATOR, escape_char)
    if loc != -1:
        text = text[loc + 1:] if for_output else text[:loc]
    loc = find_unescaped(text, COMMAND_SEPARATOR, escape_char)
    if loc != -1:
        text = text[:loc]
    return text


def extract_subentries(entry: str, separator: str = DISPLAY_SEPARATOR) -> tuple[str, str, str]:
    if not entry:
        return '', '', ''
    parts = [part.strip() for part in entry.split(separator, 2)]
    parts += [''] * (3 - len(parts))
    return parts[0], parts[1], parts[2]


def default_anchor(position) -> str:
    return clean_id('' if position is None else str(position))


def render_anchor(position, anchor: Callable[[object], str] = default_anchor) -> str:
    """The link target for one occurrence.

    The index only writes back links; the caller places this tag at the
    occurrence itself, using the same anchor function as the builder.
    """
    return comp_tag('a', {'id': anchor(position)}, quote="'")


class XHTMLIndexBuilder:
    def __init__(self, separator: str = DISPLAY_SEPARATOR,
                 anchor: Optional[Callable[[object], str]] = None,
                 heading: str = 'Index', heading_tag: str = 'h2',
                 css_class: str = 'tocentry', use_indices: bool = False,
                 escape_char: Optional[str] = DEFAULT_ESCAPE):
        self.separator = separator
        self.anchor = anchor or default_anchor
        self.heading = heading
        self.heading_tag = heading_tag
        self.css_class = css_class
        self.use_indices = use_indices
        self.escape_char = escape_char

    def extract(self, text: str, for_output: bool) -> tuple[str, str, str]:
        main, sub, subsub = extract_subentries(text, self.separator)
        return (parse_item(main, for_output, self.escape_char),
                parse_item(sub, for_output, self.escape_char),
                parse_item(subsub, for_output, self.escape_char))

    def collect(self, occurrences: Iterable) -> list[tuple[IndexEntry, tuple[str, str, str]]]:
        """Pair each occurrence's sorting entry with its display levels.

        Occurrences are (markup, plain, position, ...) tuples. Each display
        level comes from the plain rendering, or from the markup where the
        plain level is empty (a bare command such as \\LyX has no plain text).
        """
        entries = []
        for markup, plain, position, *_ in occurrences:
            key = IndexEntry(levels=self.extract(markup, for_output=False), position=position)
            from_markup = self.extract(markup, for_output=True)
            from_plain = self.extract(plain or '', for_output=True)
            display = tuple(p or m for p, m in zip(from_plain, from_markup))
            entries.append((key, tuple(escape(level) for level in display)))
        return entries

    @staticmethod
    def sort(entries: list) -> list:
        """Stable, case-insensitive sort; equal entries keep document order."""
        return sorted(entries, key=lambda item: tuple(level.lower() for level in item[0].levels))

    def render(self, occurrences: Iterable, index_id: Optional[str] = DEFAULT_INDEX) -> str:
        # only the main index can be printed for now
        if self.use_indices and index_id != DEFAULT_INDEX:
            return ''
        entries = self.collect(occurrences)
        if not entries:
            return ''
        return self.group(self.sort(entries))

    def group(self, entries: list) -> str:
        """Write sorted entries as nested lists."""
        xs = [
            start_tag('div', {'class': f'index {self.css_class}'}, quote="'"), '\n',
            start_tag(self.heading_tag), escape(self.heading), end_tag(self.heading_tag), '\n',
            "<ul class='main'>", '\n',
        ]
        # 1: inside a main entry, 2: a sub-entry, 3: a sub-sub-entry
        level = 1
        last = None
        entry_number = 0
        for entry, (main, sub, subsub) in entries:
            if last is None or not entry.same_all(last):
                if last is not None:
                    if level == 3:
                        xs.append('</li>\n')
                        if not entry.same_sub(last):
                            xs.append('</ul>\n')
                            level = 2
                    # reached either from above or because only the
                    # sub-sub-entry changed, in which case nothing closes
                    if level == 2 and not entry.same_sub(last):
                        xs.append('</li>\n')
                        if not entry.same_main(last):
                            xs.append('</ul>\n')
                            level = 1
                    if level == 1 and not entry.same_main(last):
                        xs.append('</li>\n')

                entry_number = 0

                if level == 3:
                    xs.append("<li class='subsubentry'>" + subsub)
                elif level == 2:
                    if not entry.same_sub(last):
                        xs.append("<li class='subentry'>" + sub)
                    if subsub:
                        xs.append("\n<ul class='subsubentry'><li class='subsubentry'>" + subsub)
                        level = 3
                else:
                    if last is None or not entry.same_main(last):
                        xs.append("<li class='main'>" + main)
                    if sub:
                        xs.append("\n<ul class='subentry'><li class='subentry'>" + sub)
                        level = 2
                        if subsub:
                            xs.append("\n<ul class='subsubentry'><li class='subsubentry'>" + subsub)
                            level = 3

            entry_number += 1
            href = '#' + self.anchor(entry.position)
            xs.append(':' if entry_number == 1 else ',')
            xs.append(' ' + start_tag('a', {'href': href}, quote="'") + str(entry_number) + end_tag('a'))
            last = entry

        while level > 0:
            xs.append('</li></ul>\n')
            level -= 1
        xs.append('</div>\n')
        return ''.join(xs)
