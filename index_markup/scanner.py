"""Collects index occurrences from LaTeX sources."""

import glob
import os
import re

from index_markup.latex import DEFAULT_INDEX
from index_markup.occurrences import Occurrence, OccurrenceFile
from index_markup.plaintext import latex_to_plain


# Index command patterns
# Group 1: command name (index, sindex, and the typed/langsci variants)
# Group 2: optional bracketed argument [...]
# Group 3: content inside braces
INDEX_TAG_PATTERN = re.compile(
    r'\\(isi?|ili?|ini?|index|sindex|nindex|lindex)'  # command name
    r'(\[[^\]]*\])?'  # optional [...] argument
    r'\{([^{}]*(?:\{[^{}]*\}[^{}]*)*)\}'  # content with possible nested braces (one level)
)

# Comments (% to end of line) never hold real entries
COMMENT_PATTERN = re.compile(r'(?<!\\)%.*$', re.MULTILINE)


def infer_index_from_command(cmd: str, option: str = '') -> str:
    """Infer the index identifier from command name and optional argument."""
    if option:
        return option.strip('[]').strip() or DEFAULT_INDEX
    if cmd in ('il', 'ili', 'lindex'):
        return 'language'
    elif cmd in ('in', 'ini', 'nindex'):
        return 'name'
    else:
        return DEFAULT_INDEX


def extract_from_content(content: str, source: str = '') -> list[Occurrence]:
    """Extract index occurrences from LaTeX content, in document order."""
    occurrences = []
    comments = [(m.start(), m.end()) for m in COMMENT_PATTERN.finditer(content)]

    for match in INDEX_TAG_PATTERN.finditer(content):
        start = match.start()
        if any(c_start <= start < c_end for c_start, c_end in comments):
            continue

        markup = match.group(3).strip()
        if not markup:
            continue

        line = content.count('\n', 0, start) + 1
        occurrences.append(Occurrence(
            markup=markup,
            plain=latex_to_plain(markup),
            position=f"{source}:{line}" if source else str(line),
            index=infer_index_from_command(match.group(1), match.group(2) or ''),
        ))

    return occurrences


def extract_from_file(file_path: str, source: str = '') -> list[Occurrence]:
    with open(file_path, 'r', encoding='utf-8') as f:
        content = f.read()
    return extract_from_content(content, source or file_path)


def scan_directory(dir_path: str) -> OccurrenceFile:
    """Scan all .tex files below dir_path, sorted by path."""
    result = OccurrenceFile()
    files = sorted(glob.glob(os.path.join(dir_path, '**', '*.tex'), recursive=True))
    for file_path in files:
        source = os.path.relpath(file_path, dir_path)
        for occurrence in extract_from_file(file_path, source):
            result.occurrences.append(occurrence)
    return result
