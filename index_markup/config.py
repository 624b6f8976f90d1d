"""Rendering settings.

Settings are read from the ``settings`` block of an occurrence document and
can be overridden from the command line.
"""

import logging
from dataclasses import dataclass, fields, replace
from typing import Optional


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Settings:
    escape_char: str = '"'
    use_indices: bool = False
    encoding: str = 'utf-8'
    separator: str = ' ! '
    heading: str = 'Index'
    heading_tag: str = 'h2'
    css_class: str = 'tocentry'
    dry_run: bool = False

    @classmethod
    def from_mapping(cls, data: Optional[dict]) -> 'Settings':
        """Build settings from a mapping, ignoring unknown keys."""
        known = {f.name: f for f in fields(cls)}
        values = {}
        for key, value in (data or {}).items():
            if key not in known:
                logger.warning("Ignoring unknown setting '%s'", key)
                continue
            if isinstance(known[key].default, bool):
                value = _as_bool(value)
            elif value is None:
                continue
            else:
                value = str(value)
            values[key] = value
        return cls(**values)

    def override(self, **changes) -> 'Settings':
        """Return a copy with every change that is not None applied."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})


def _as_bool(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ('1', 'true', 'yes', 'on')
    return bool(value)
