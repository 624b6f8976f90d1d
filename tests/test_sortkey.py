import pytest

from index_markup.diagnostics import DiagnosticKind, DiagnosticLog
from index_markup.sortkey import CodecValidator, build_sort_key, needs_sort_key


class FixedValidator:
    """Validator returning a canned transliteration."""

    def __init__(self, result, uncodable=''):
        self.result = result
        self.uncodable = uncodable
        self.calls = []

    def latex_string(self, text, dry_run=False):
        self.calls.append((text, dry_run))
        return self.result, self.uncodable


@pytest.mark.parametrize("level, expected", [
    ("\\LyX", True),
    ("\\textbf{text}", True),
    ("plain", False),
    ("LyX@\\LyX", False),
    ('mail"@\\address', True),
])
def test_needs_sort_key(level, expected):
    assert needs_sort_key(level) is expected


def test_plain_text_is_preferred():
    key = build_sort_key("\\LyX", "LyX", CodecValidator())
    assert key == "LyX"


def test_empty_plain_text_falls_back_to_level():
    key = build_sort_key("\\LyX", "", CodecValidator())
    assert key == "LyX"


def test_quotes_are_escaped():
    key = build_sort_key('\\emph{"quoted"}', '"quoted"', CodecValidator())
    assert key == '\\"quoted\\"'


def test_transliteration_reports_mismatch():
    diagnostics = DiagnosticLog()
    key = build_sort_key("\\emph{café}", "café", CodecValidator('ascii'),
                         diagnostics=diagnostics)
    assert key == "caf'{e}"
    assert [d.kind for d in diagnostics] == [DiagnosticKind.SORT_KEY_MISMATCH]


def test_dry_run_suppresses_mismatch_advisory():
    diagnostics = DiagnosticLog()
    validator = FixedValidator("other")
    key = build_sort_key("\\x", "x", validator, dry_run=True, diagnostics=diagnostics)
    assert key == "other"
    assert validator.calls == [("x", True)]
    assert len(diagnostics) == 0


def test_uncodable_characters_warn_and_continue(caplog):
    diagnostics = DiagnosticLog()
    with caplog.at_level("WARNING"):
        key = build_sort_key("\\sym", "a☺b", CodecValidator('latin-1'),
                             diagnostics=diagnostics)
    assert key == "ab"
    kinds = [d.kind for d in diagnostics]
    assert kinds == [DiagnosticKind.UNCODABLE_SORT_CHARACTER, DiagnosticKind.SORT_KEY_MISMATCH]
    assert "Sorting might be wrong" in caplog.text


def test_codec_validator_macros():
    validator = CodecValidator('ascii')
    assert validator.latex_string("Straße") == ("Stra\\ss{}e", "")
    assert validator.latex_string("naïve") == ('na\\"{i}ve', "")
    assert validator.latex_string("x☺", dry_run=True) == ("x☺", "☺")


def test_codec_validator_rejects_unknown_encoding():
    with pytest.raises(LookupError):
        CodecValidator('no-such-encoding')
