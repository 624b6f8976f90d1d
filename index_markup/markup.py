"""Index entry markup parsing.

Splits a raw makeindex-style entry into its term levels and the trailing
command, and classifies that command once:

- ! separates hierarchy levels: "main!sub!subsub"
- @ separates a sort key from the displayed term: "sortkey@display"
- | introduces the command: "term|textbf", "term|see{other}"
- |( and |) open and close a page range

Separators preceded by the escape character (makeindex's quote, '"') are not
split on. This is a best-effort check: the escape character can be redefined
in style files, and an escaped escape character is not recognised.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import NamedTuple, Optional


LEVEL_SEPARATOR = '!'
SORT_SEPARATOR = '@'
COMMAND_SEPARATOR = '|'
DEFAULT_ESCAPE = '"'

RANGE_MARKERS = (('(', 'range_start'), (')', 'range_end'))

# seealso has to be tried before its prefix see
SEE_PATTERN = re.compile(r'(seealso|see)\{')


class CommandKind(Enum):
    NONE = 'none'
    FORMAT = 'format'
    SEE = 'see'
    SEE_ALSO = 'seealso'
    RANGE_START = 'range_start'
    RANGE_END = 'range_end'

    @property
    def is_range(self) -> bool:
        return self in (CommandKind.RANGE_START, CommandKind.RANGE_END)


class ParsedCommand(NamedTuple):
    kind: CommandKind
    see_targets: tuple[str, ...] = ()
    leftover: str = ''
    multiple_see: bool = False


@dataclass(frozen=True)
class IndexEntry:
    """Parsed form of one index occurrence."""

    levels: tuple[str, ...] = ()
    command: Optional[str] = None
    kind: CommandKind = CommandKind.NONE
    see_targets: tuple[str, ...] = ()
    leftover: str = ''
    sort_key: Optional[str] = None
    position: Optional[str] = None

    def level(self, depth: int) -> str:
        return self.levels[depth] if depth < len(self.levels) else ''

    @property
    def main(self) -> str:
        return self.level(0)

    @property
    def sub(self) -> str:
        return self.level(1)

    @property
    def subsub(self) -> str:
        return self.level(2)

    @property
    def term_path(self) -> str:
        return LEVEL_SEPARATOR.join(self.levels)

    def same_main(self, other: 'IndexEntry') -> bool:
        return self.main.lower() == other.main.lower()

    def same_sub(self, other: 'IndexEntry') -> bool:
        return self.same_main(other) and self.sub.lower() == other.sub.lower()

    def same_all(self, other: 'IndexEntry') -> bool:
        return self.same_sub(other) and self.subsub.lower() == other.subsub.lower()


def separator_positions(text: str, char: str,
                        escape_char: Optional[str] = DEFAULT_ESCAPE) -> list[int]:
    """Return the positions of every unescaped occurrence of char."""
    positions = []
    for i, current in enumerate(text):
        if current != char:
            continue
        if escape_char and i > 0 and text[i - 1] == escape_char:
            continue
        positions.append(i)
    return positions


def find_unescaped(text: str, char: str,
                   escape_char: Optional[str] = DEFAULT_ESCAPE) -> int:
    positions = separator_positions(text, char, escape_char)
    return positions[0] if positions else -1


def split_unescaped(text: str, char: str,
                    escape_char: Optional[str] = DEFAULT_ESCAPE,
                    keep_empty: bool = True) -> list[str]:
    """Split on unescaped char, trimming every part."""
    bounds = [-1] + separator_positions(text, char, escape_char) + [len(text)]
    parts = [text[start + 1:end].strip() for start, end in zip(bounds, bounds[1:])]
    if keep_empty:
        return parts
    return [part for part in parts if part]


def split_command(raw: str,
                  escape_char: Optional[str] = DEFAULT_ESCAPE) -> tuple[str, Optional[str]]:
    """Split raw markup at the first unescaped | into (term path, command)."""
    pos = find_unescaped(raw, COMMAND_SEPARATOR, escape_char)
    if pos == -1:
        return raw, None
    return raw[:pos], raw[pos + 1:]


def split_markup(raw: str,
                 escape_char: Optional[str] = DEFAULT_ESCAPE) -> tuple[list[str], Optional[str]]:
    """Split raw markup into its levels and the trailing command.

    Never fails: input without separators is a single level with no command.
    """
    path, command = split_command(raw, escape_char)
    return split_unescaped(path, LEVEL_SEPARATOR, escape_char), command


def _strip_range(text: str) -> tuple[Optional[CommandKind], str]:
    kind = None
    for marker, name in RANGE_MARKERS:
        embedded = COMMAND_SEPARATOR + marker
        if text.startswith(marker) or embedded in text:
            kind = kind or CommandKind(name)
            text = text.replace(embedded, '')
            if text.startswith(marker):
                text = text[1:]
    return kind, text


def _parse_see(text: str) -> Optional[ParsedCommand]:
    unescaped = text.replace('\\{', '{').replace('\\}', '}')
    match = SEE_PATTERN.match(unescaped)
    if not match:
        return None

    close = unescaped.find('}', match.end())
    if close == -1:
        body, rest = unescaped[match.end():], ''
    else:
        body, rest = unescaped[match.end():close], unescaped[close + 1:]

    targets = tuple(t.strip() for t in body.split(',') if t.strip())
    if not targets:
        return None
    if match.group(1) == 'seealso':
        return ParsedCommand(CommandKind.SEE_ALSO, targets, rest)
    return ParsedCommand(CommandKind.SEE, targets[:1], rest, len(targets) > 1)


def classify_command(command: Optional[str]) -> ParsedCommand:
    """Classify the text after the top-level | in a single pass.

    Range markers take precedence over see/seealso; whatever is neither a
    range marker nor a cross-reference is returned as leftover (a page
    formatting command such as "textbf", or trailing garbage).
    """
    if not command:
        return ParsedCommand(CommandKind.NONE)

    range_kind, text = _strip_range(command)
    if range_kind is not None:
        return ParsedCommand(range_kind, leftover=text)

    see = _parse_see(text)
    if see is not None:
        return see

    if not text.strip():
        return ParsedCommand(CommandKind.NONE)
    return ParsedCommand(CommandKind.FORMAT, leftover=text)


def parse_entry(raw: str, escape_char: Optional[str] = DEFAULT_ESCAPE,
                position: Optional[str] = None) -> IndexEntry:
    """Parse raw markup into an IndexEntry."""
    levels, command = split_markup(raw, escape_char)
    parsed = classify_command(command)
    return IndexEntry(
        levels=tuple(levels),
        command=command,
        kind=parsed.kind,
        see_targets=parsed.see_targets,
        leftover=parsed.leftover,
        position=position,
    )
