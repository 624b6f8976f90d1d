"""DocBook output: <indexterm> elements.

DocBook needs a different split than LaTeX: a single sort key for the whole
term path ("sortas@primary!secondary"), and ranges and cross-references become
attributes and child elements instead of staying in the command text.
Formatting commands have no DocBook counterpart and are reported.
"""

from dataclasses import dataclass, field
from typing import Iterable, Optional

from index_markup.diagnostics import DiagnosticKind, DiagnosticLog
from index_markup.latex import DEFAULT_INDEX
from index_markup.markup import (
    DEFAULT_ESCAPE,
    LEVEL_SEPARATOR,
    SORT_SEPARATOR,
    CommandKind,
    IndexEntry,
    ParsedCommand,
    classify_command,
    split_command,
    split_unescaped,
)
from index_markup.xmlstream import clean_id, comp_tag, element, end_tag, start_tag


@dataclass
class RangeTable:
    """Range identifiers handed out during one rendering session.

    The id of a range is its term path. A term path that was already closed
    once gets the current counter as suffix; the counter only moves on range
    ends, so both halves of one range compute the same id.
    """

    seen: set[str] = field(default_factory=set)
    counter: int = 0

    def identifier(self, term_path: str, kind: CommandKind) -> str:
        ident = term_path
        if term_path in self.seen:
            ident = f'{term_path}-{self.counter}'
            if kind is CommandKind.RANGE_END:
                self.counter += 1
        elif kind is CommandKind.RANGE_END:
            self.seen.add(term_path)
        return clean_id(ident)


class DocBookRenderer:
    def __init__(self, use_indices: bool = False,
                 escape_char: Optional[str] = DEFAULT_ESCAPE,
                 diagnostics: Optional[DiagnosticLog] = None):
        self.use_indices = use_indices
        self.escape_char = escape_char
        self.diagnostics = diagnostics if diagnostics is not None else DiagnosticLog()

    def parse(self, raw: str) -> tuple[IndexEntry, ParsedCommand]:
        """Parse raw markup with the DocBook grammar."""
        terms, command = split_command(raw, self.escape_char)

        sort_key = None
        sorting = split_unescaped(terms, SORT_SEPARATOR, self.escape_char, keep_empty=False)
        if len(sorting) == 2:
            sort_key, terms = sorting

        levels = split_unescaped(terms, LEVEL_SEPARATOR, self.escape_char, keep_empty=False)
        parsed = classify_command(command)
        entry = IndexEntry(
            levels=tuple(levels),
            command=command,
            kind=parsed.kind,
            see_targets=parsed.see_targets,
            leftover=parsed.leftover,
            sort_key=sort_key,
        )
        return entry, parsed

    def _error(self, kind: DiagnosticKind, message: str, raw: str) -> str:
        return self.diagnostics.report(kind, message, raw).as_comment()

    def render(self, raw: str, table: RangeTable, index_id: Optional[str] = DEFAULT_INDEX) -> str:
        """Render one entry; table must belong to the current document scan."""
        raw = raw.strip()
        out = []

        if SORT_SEPARATOR + '\\' in raw:
            out.append(self._error(
                DiagnosticKind.UNSUPPORTED_SORT_MARKUP,
                f'Unsupported feature: an index entry contains an @\\. Complete entry: "{raw}"',
                raw,
            ))

        entry, parsed = self.parse(raw)

        if parsed.multiple_see:
            out.append(self._error(
                DiagnosticKind.MULTIPLE_SEE_TARGETS,
                f'Several index terms found as "see"! Only one is acceptable. Complete entry: "{raw}"',
                raw,
            ))

        if entry.leftover:
            out.append(self._error(
                DiagnosticKind.UNSUPPORTED_TRAILING_COMMAND,
                f'Unsupported feature: an index entry contains a | with an unsupported command, '
                f'{entry.leftover}. Complete entry: "{raw}"',
                raw,
            ))

        if not entry.levels and entry.kind is not CommandKind.RANGE_END:
            out.append(self._error(
                DiagnosticKind.NO_TERM_FOUND,
                f'No index term found! Complete entry: "{raw}"',
                raw,
            ))
            return ''.join(out)

        out.append(self._indexterm(entry, table, index_id))
        return ''.join(out)

    def _indexterm(self, entry: IndexEntry, table: RangeTable, index_id: Optional[str]) -> str:
        attrs = {}
        if self.use_indices and index_id:
            attrs['type'] = index_id

        if entry.kind is CommandKind.RANGE_END:
            ident = table.identifier(entry.term_path, entry.kind)
            return comp_tag('indexterm', {'class': 'endofrange', 'startref': ident})

        if entry.kind is CommandKind.RANGE_START:
            attrs['class'] = 'startofrange'
            attrs['xml:id'] = table.identifier(entry.term_path, entry.kind)

        out = [start_tag('indexterm', attrs)]
        if entry.main:
            out.append(element('primary', entry.main,
                               {'sortas': entry.sort_key} if entry.sort_key else None))
        if entry.sub:
            out.append(element('secondary', entry.sub))
        if entry.subsub:
            out.append(element('tertiary', entry.subsub))

        if entry.kind is CommandKind.SEE:
            out.append(element('see', entry.see_targets[0]))
        elif entry.kind is CommandKind.SEE_ALSO:
            out.extend(element('seealso', target) for target in entry.see_targets)

        out.append(end_tag('indexterm'))
        return ''.join(out)


class DocBookSession:
    """One ordered pass over the index entries of a single document.

    Owns the range table; create a new session for every document scan.
    """

    def __init__(self, use_indices: bool = False,
                 escape_char: Optional[str] = DEFAULT_ESCAPE,
                 diagnostics: Optional[DiagnosticLog] = None):
        self.diagnostics = diagnostics if diagnostics is not None else DiagnosticLog()
        self.renderer = DocBookRenderer(use_indices, escape_char, self.diagnostics)
        self.ranges = RangeTable()

    def render(self, raw: str, index_id: Optional[str] = DEFAULT_INDEX) -> str:
        return self.renderer.render(raw, self.ranges, index_id)

    def render_all(self, entries: Iterable[tuple[str, Optional[str]]]) -> list[str]:
        """Render (raw markup, index id) pairs in document order."""
        return [self.render(raw, index_id) for raw, index_id in entries]
