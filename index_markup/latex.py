"""LaTeX output: \\index / \\sindex macros and the print-index command."""

import logging
from typing import Optional, Sequence

from index_markup.diagnostics import DiagnosticLog
from index_markup.markup import (
    COMMAND_SEPARATOR,
    DEFAULT_ESCAPE,
    LEVEL_SEPARATOR,
    SORT_SEPARATOR,
    split_command,
    split_unescaped,
)
from index_markup.sortkey import CodecValidator, EncodingValidator, build_sort_key, needs_sort_key


logger = logging.getLogger(__name__)

DEFAULT_INDEX = 'idx'

# Characters that break LaTeX labels; written as =XX per UTF-8 byte
LABEL_UNSAFE = set('=%#${}[]&\\')


def escape_label(text: str) -> str:
    """Escape text for use as a LaTeX label or optional argument."""
    out = []
    for char in text:
        if ord(char) >= 128 or char in LABEL_UNSAFE:
            out.extend(f'={byte:02X}' for byte in char.encode('utf-8'))
        else:
            out.append(char)
    return ''.join(out)


def uses_named_index(index_id: Optional[str], use_indices: bool) -> bool:
    return bool(use_indices and index_id and index_id != DEFAULT_INDEX)


def index_macro(index_id: Optional[str] = DEFAULT_INDEX, use_indices: bool = False) -> str:
    """Return the opening of the index macro, up to and including the brace."""
    if uses_named_index(index_id, use_indices):
        return f"\\sindex[{escape_label(index_id)}]{{"
    return "\\index{"


def render_print_index(index_id: Optional[str] = DEFAULT_INDEX, use_indices: bool = False,
                       subindex: bool = False, print_all: bool = False) -> str:
    """Return the command printing an index.

    Without multiple indices only the default index can be printed.
    """
    if not use_indices:
        return '\\printindex' if index_id == DEFAULT_INDEX else ''
    name = 'printsubindex' if subindex else 'printindex'
    if print_all:
        return f'\\{name}*'
    if index_id:
        return f'\\{name}[{escape_label(index_id)}]'
    return f'\\{name}'


class LatexRenderer:
    """Renders raw index markup as a LaTeX index macro.

    Levels that contain a command get a sort key built from their plain-text
    rendering, e.g. "\\LyX" with plain text "LyX" becomes "LyX@\\LyX".
    """

    def __init__(self, validator: Optional[EncodingValidator] = None,
                 escape_char: Optional[str] = DEFAULT_ESCAPE,
                 use_indices: bool = False, dry_run: bool = False,
                 search_only: bool = False,
                 diagnostics: Optional[DiagnosticLog] = None):
        self.validator = validator or CodecValidator()
        self.escape_char = escape_char
        self.use_indices = use_indices
        self.dry_run = dry_run
        self.search_only = search_only
        self.diagnostics = diagnostics if diagnostics is not None else DiagnosticLog()

    def render(self, latex: str, plain: str = '', index_id: Optional[str] = DEFAULT_INDEX) -> str:
        if self.search_only:
            return index_macro(index_id, self.use_indices) + latex + '}'

        path, command = split_command(latex, self.escape_char)
        plain_path, plain_command = split_command(plain, self.escape_char)
        if command is not None and plain and plain_command is None:
            logger.debug("The '|' separator was not found in the plain text of %r", latex)

        levels = split_unescaped(path, LEVEL_SEPARATOR, self.escape_char)
        plain_levels = split_unescaped(plain_path, LEVEL_SEPARATOR, self.escape_char)

        sort_keys: list[Optional[str]] = []
        for i, level in enumerate(levels):
            if not needs_sort_key(level, self.escape_char):
                sort_keys.append(None)
                continue
            counterpart = plain_levels[i] if i < len(plain_levels) else ''
            sort_keys.append(build_sort_key(
                level,
                counterpart,
                self.validator,
                dry_run=self.dry_run,
                diagnostics=self.diagnostics,
                escape_char=self.escape_char,
            ))

        return self.render_levels(levels, sort_keys, command, index_id)

    def render_levels(self, levels: Sequence[str], sort_keys: Sequence[Optional[str]],
                      command: Optional[str] = None,
                      index_id: Optional[str] = DEFAULT_INDEX) -> str:
        """Reassemble levels, their sort keys and the command into the macro."""
        parts = []
        for i, level in enumerate(levels):
            key = sort_keys[i] if i < len(sort_keys) else None
            parts.append(f'{key}{SORT_SEPARATOR}{level}' if key is not None else level)

        body = LEVEL_SEPARATOR.join(parts)
        if command:
            body += COMMAND_SEPARATOR + command
        return index_macro(index_id, self.use_indices) + body + '}'
