"""Plain-text rendering of LaTeX index markup, used for sort keys."""

import re


LATEX_COMMAND_PATTERN = re.compile(r'\\[a-zA-Z]+\*?(?:\[[^\]]*\])?')
LATEX_GROUPING_PATTERN = re.compile(r'(?<!\\)[{}$]')
LATEX_ESCAPED_PATTERN = re.compile(r'\\([#$%&_{}])')


def latex_to_plain(text: str) -> str:
    """Strip LaTeX commands, keeping their arguments and the index separators.

    A level made of a bare command (e.g. "\\LyX") comes out empty; callers
    fall back to the LaTeX text in that case.
    """
    text = LATEX_COMMAND_PATTERN.sub('', text)
    text = LATEX_GROUPING_PATTERN.sub('', text)
    text = LATEX_ESCAPED_PATTERN.sub(r'\1', text)
    text = text.replace('~', ' ')
    text = re.sub(r'[ \t\n]+', ' ', text).strip()
    return text
