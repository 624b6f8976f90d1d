"""Occurrence documents.

An occurrence document lists the index entries of one document in order,
stored as YAML:

    settings:
      use_indices: true
    occurrences:
      - markup: 'LyX@\\LyX'
        plain: LyX
        position: intro.tex:12
        index: idx
"""

import os
from typing import Iterator, NamedTuple, Optional

import yaml

from index_markup.config import Settings
from index_markup.diagnostics import IndexMarkupError
from index_markup.latex import DEFAULT_INDEX


class Occurrence(NamedTuple):
    markup: str
    plain: str = ''
    position: Optional[str] = None
    index: str = DEFAULT_INDEX


class OccurrenceFile:
    """The ordered index occurrences of one document and their settings."""

    def __init__(self, path: Optional[str] = None):
        self.occurrences: list[Occurrence] = []
        self.settings: dict = {}

        if path and os.path.exists(path):
            self.load(path)
        elif path:
            raise IndexMarkupError(f"Occurrence file {path} not found")

    def load(self, path: str) -> None:
        """Load occurrences from YAML file."""
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as exc:
            raise IndexMarkupError(f"Invalid YAML in {path}: {exc}") from exc

        if data is None:
            return
        if not isinstance(data, dict):
            raise IndexMarkupError(f"{path}: expected a mapping at top level")

        settings = data.get('settings') or {}
        if not isinstance(settings, dict):
            raise IndexMarkupError(f"{path}: 'settings' must be a mapping")
        self.settings = settings

        self.occurrences = []
        for number, item in enumerate(data.get('occurrences') or [], start=1):
            if isinstance(item, str):
                item = {'markup': item}
            if not isinstance(item, dict) or 'markup' not in item:
                raise IndexMarkupError(f"{path}: occurrence {number} has no markup")
            self.add(
                str(item['markup']),
                plain=str(item.get('plain') or ''),
                position=None if item.get('position') is None else str(item['position']),
                index=str(item.get('index') or DEFAULT_INDEX),
            )

    def save(self, path: str) -> None:
        """Save occurrences to YAML file."""
        data = {'occurrences': [occ._asdict() for occ in self.occurrences]}
        if self.settings:
            data['settings'] = self.settings
        with open(path, 'w', encoding='utf-8') as f:
            yaml.dump(data, f, default_flow_style=False, allow_unicode=True, sort_keys=False)

    def add(self, markup: str, plain: str = '', position: Optional[str] = None,
            index: str = DEFAULT_INDEX) -> Occurrence:
        occurrence = Occurrence(markup, plain, position, index)
        self.occurrences.append(occurrence)
        return occurrence

    def resolved_settings(self, **overrides) -> Settings:
        return Settings.from_mapping(self.settings).override(**overrides)

    def for_index(self, index_id: str) -> list[Occurrence]:
        return [occ for occ in self.occurrences if occ.index == index_id]

    def index_ids(self) -> list[str]:
        """Index identifiers in order of first use."""
        return list(dict.fromkeys(occ.index for occ in self.occurrences))

    def __len__(self) -> int:
        return len(self.occurrences)

    def __iter__(self) -> Iterator[Occurrence]:
        return iter(self.occurrences)
