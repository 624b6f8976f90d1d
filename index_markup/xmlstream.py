"""Small helpers for writing XML and XHTML fragments as text."""

import re
from typing import Mapping, Optional
from xml.sax.saxutils import escape as _escape


INVALID_ID_CHARS = re.compile(r'[^\w.\-]')


def escape(text: str) -> str:
    return _escape(text)


def escape_attr(value: str) -> str:
    return _escape(value, {'"': '&quot;', "'": '&apos;'})


def format_attrs(attrs: Optional[Mapping[str, str]] = None, quote: str = '"') -> str:
    if not attrs:
        return ''
    return ''.join(f' {name}={quote}{escape_attr(value)}{quote}' for name, value in attrs.items())


def start_tag(name: str, attrs: Optional[Mapping[str, str]] = None, quote: str = '"') -> str:
    return f'<{name}{format_attrs(attrs, quote)}>'


def end_tag(name: str) -> str:
    return f'</{name}>'


def comp_tag(name: str, attrs: Optional[Mapping[str, str]] = None, quote: str = '"') -> str:
    return f'<{name}{format_attrs(attrs, quote)} />'


def element(name: str, text: str, attrs: Optional[Mapping[str, str]] = None,
            quote: str = '"') -> str:
    return start_tag(name, attrs, quote) + escape(text) + end_tag(name)


def clean_id(text: str) -> str:
    """Turn arbitrary text into a legal XML id.

    The same input always yields the same id; uniqueness is up to the caller.
    """
    cleaned = INVALID_ID_CHARS.sub('_', text)
    if not cleaned or not (cleaned[0].isalpha() or cleaned[0] == '_'):
        cleaned = '_' + cleaned
    return cleaned
