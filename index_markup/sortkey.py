"""Sort keys for LaTeX index entries.

A level that contains a LaTeX command sorts by its command text unless a
sort key is prepended, e.g. \\index{LyX@\\LyX} or \\index{text@\\textbf{text}}.
The key is built from the plain-text rendering of the level.
"""

import codecs
import unicodedata
from typing import Optional, Protocol

from index_markup.diagnostics import DiagnosticKind, DiagnosticLog
from index_markup.markup import DEFAULT_ESCAPE, SORT_SEPARATOR, find_unescaped


COMMAND_INTRODUCER = '\\'

# Combining marks -> LaTeX accent commands
ACCENT_MACROS = {
    '\u0300': '`',
    '\u0301': "'",
    '\u0302': '^',
    '\u0303': '~',
    '\u0304': '=',
    '\u0306': 'u',
    '\u0307': '.',
    '\u0308': '"',
    '\u030a': 'r',
    '\u030b': 'H',
    '\u030c': 'v',
    '\u0327': 'c',
    '\u0328': 'k',
}

SPECIAL_LETTERS = {
    'ß': '\\ss{}',
    'æ': '\\ae{}',
    'Æ': '\\AE{}',
    'œ': '\\oe{}',
    'Œ': '\\OE{}',
    'ø': '\\o{}',
    'Ø': '\\O{}',
    'ł': '\\l{}',
    'Ł': '\\L{}',
    'ı': '\\i{}',
    '\u2013': '--',
    '\u2014': '---',
    '\u2018': '`',
    '\u2019': "'",
    '\u201c': '``',
    '\u201d': "''",
}


class EncodingValidator(Protocol):
    def latex_string(self, text: str, dry_run: bool = False) -> tuple[str, str]:
        """Return (text made representable, characters that could not be)."""


class CodecValidator:
    """Encoding validator backed by a Python codec."""

    def __init__(self, encoding: str = 'utf-8'):
        self.encoding = codecs.lookup(encoding).name

    def can_encode(self, char: str) -> bool:
        try:
            char.encode(self.encoding)
        except UnicodeEncodeError:
            return False
        return True

    def latex_macro(self, char: str) -> Optional[str]:
        if char in SPECIAL_LETTERS:
            return SPECIAL_LETTERS[char]
        decomposed = unicodedata.normalize('NFD', char)
        if len(decomposed) == 2 and decomposed[1] in ACCENT_MACROS:
            base = decomposed[0]
            if self.can_encode(base):
                return f"\\{ACCENT_MACROS[decomposed[1]]}{{{base}}}"
        return None

    def latex_string(self, text: str, dry_run: bool = False) -> tuple[str, str]:
        result = []
        uncodable = []
        for char in text:
            if self.can_encode(char):
                result.append(char)
                continue
            macro = self.latex_macro(char)
            if macro is not None:
                result.append(macro)
                continue
            uncodable.append(char)
            # previews keep the character so the output stays readable
            if dry_run:
                result.append(char)
        return ''.join(result), ''.join(uncodable)


def needs_sort_key(level: str, escape_char: Optional[str] = DEFAULT_ESCAPE) -> bool:
    """A level needs a generated key if it has a command and no key of its own."""
    return (COMMAND_INTRODUCER in level
            and find_unescaped(level, SORT_SEPARATOR, escape_char) == -1)


def build_sort_key(level: str, plain: str, validator: EncodingValidator,
                   dry_run: bool = False,
                   diagnostics: Optional[DiagnosticLog] = None,
                   escape_char: Optional[str] = DEFAULT_ESCAPE) -> str:
    """Build the sort key for one level from its plain-text counterpart.

    Plain text can be empty (e.g. for raw LaTeX content); the level itself is
    used then. Encoding problems are reported but never stop rendering.
    """
    if diagnostics is None:
        diagnostics = DiagnosticLog()

    candidate = plain if plain else level
    encoded, uncodable = validator.latex_string(candidate, dry_run)
    if uncodable:
        diagnostics.report(
            DiagnosticKind.UNCODABLE_SORT_CHARACTER,
            f"Uncodable character in index entry '{candidate}'. Sorting might be wrong!",
            level,
        )
    if encoded != candidate and not dry_run:
        diagnostics.report(
            DiagnosticKind.SORT_KEY_MISMATCH,
            f"Automatic index sorting faced problems with the entry '{candidate}'. "
            "Please specify the sorting of this entry manually.",
            level,
        )

    key = encoded.replace(COMMAND_INTRODUCER, '')
    if escape_char:
        key = key.replace(escape_char, COMMAND_INTRODUCER + escape_char)
    return key
