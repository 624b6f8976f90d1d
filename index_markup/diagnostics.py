"""Recoverable diagnostics raised while rendering index entries."""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterator


logger = logging.getLogger(__name__)


class IndexMarkupError(RuntimeError):
    """Raised when an occurrence document cannot be read."""


class DiagnosticKind(Enum):
    UNCODABLE_SORT_CHARACTER = 'uncodable_sort_character'
    SORT_KEY_MISMATCH = 'sort_key_mismatch'
    UNSUPPORTED_TRAILING_COMMAND = 'unsupported_trailing_command'
    MULTIPLE_SEE_TARGETS = 'multiple_see_targets'
    NO_TERM_FOUND = 'no_term_found'
    UNSUPPORTED_SORT_MARKUP = 'unsupported_sort_markup'


@dataclass(frozen=True)
class Diagnostic:
    kind: DiagnosticKind
    message: str
    entry: str = ''

    def as_comment(self) -> str:
        # "--" is not allowed inside an XML comment
        text = self.message.replace('--', '- -')
        return f'<!-- Output Error: {text} -->\n'


class DiagnosticLog:
    """Collects diagnostics for one rendering pass and logs each of them."""

    def __init__(self):
        self.items: list[Diagnostic] = []

    def report(self, kind: DiagnosticKind, message: str, entry: str = '') -> Diagnostic:
        diagnostic = Diagnostic(kind, message, entry)
        logger.warning("%s: %s", kind.value, message)
        self.items.append(diagnostic)
        return diagnostic

    def of_kind(self, kind: DiagnosticKind) -> list[Diagnostic]:
        return [d for d in self.items if d.kind is kind]

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(self.items)
