"""Snapshot ownership: text updates rebuild, pointer moves only read."""

import pytest

from shapebook.analysis import AnalysisResult, AnalyzerError, OverlaySession
from shapebook.lsp.types import Diagnostic, HoverEntry, Position, Range
from shapebook.overlay.hover_locator import CharMetrics

METRICS = CharMetrics(char_width=8, line_height=16)


def _range(start, end):
    return Range(Position(*start), Position(*end))


class FakeAnalyzer:
    def __init__(self, result=None, error=None):
        self.result = result if result is not None else AnalysisResult()
        self.error = error
        self.calls = []

    def analyze(self, text):
        self.calls.append(text)
        if self.error is not None:
            raise self.error
        return self.result


class HoverBackend(FakeAnalyzer):
    def __init__(self, payload):
        super().__init__()
        self.payload = payload
        self.hover_calls = []

    def hover(self, position):
        self.hover_calls.append(position)
        return self.payload


def _hover_result():
    return AnalysisResult(
        diagnostics=(Diagnostic(range=_range((0, 0), (0, 2)), message="rank mismatch"),),
        hover_entries=(HoverEntry(range=_range((0, 2), (0, 4)), payload={"kind": "markdown", "value": "Float[B S]"}),),
    )


def test_update_replaces_snapshot_and_bumps_revision():
    analyzer = FakeAnalyzer(_hover_result())
    session = OverlaySession(analyzer)
    first = session.snapshot
    assert first.revision == 0
    assert first.lines[0].text == ""

    snapshot = session.update_text("abcdef")
    assert session.snapshot is snapshot
    assert snapshot is not first
    assert snapshot.revision == 1
    assert analyzer.calls == ["abcdef"]
    assert snapshot.lines[0].virtual_texts == ("rank mismatch",)
    assert [(item.start, item.end) for item in snapshot.hovers] == [(2, 4)]

    assert session.update_text("abcdef\n").revision == 2
    assert len(session.snapshot.lines) == 2


def test_analyzer_error_renders_plain_text():
    session = OverlaySession(FakeAnalyzer(error=AnalyzerError("shapels crashed")))
    snapshot = session.update_text("ab\ncd")
    assert snapshot.error == "shapels crashed"
    assert [line.text for line in snapshot.lines] == ["ab", "cd"]
    assert not any(seg.is_diagnostic for line in snapshot.lines for seg in line.segments)
    assert snapshot.diagnostics == () and snapshot.hovers == ()


def test_other_analyzer_failures_propagate():
    session = OverlaySession(FakeAnalyzer(error=ValueError("bug")))
    with pytest.raises(ValueError):
        session.update_text("abc")
    assert session.snapshot.revision == 0


def test_hover_at_reads_current_snapshot():
    analyzer = FakeAnalyzer(_hover_result())
    session = OverlaySession(analyzer)
    session.update_text("abcdef")

    popup = session.hover_at(20, 5, METRICS)
    assert popup is not None
    assert popup.text == "Float[B S]"
    assert popup.line == 0
    assert (popup.top, popup.left) == (16.0, 28.0)
    assert analyzer.calls == ["abcdef"]


def test_hover_at_applies_scroll_offsets():
    session = OverlaySession(FakeAnalyzer(_hover_result()))
    session.update_text("abcdef")
    popup = session.hover_at(20, 5, METRICS, scroll_top=4, scroll_left=10)
    assert (popup.top, popup.left) == (12.0, 18.0)


def test_hover_at_misses_outside_entries():
    session = OverlaySession(FakeAnalyzer(_hover_result()))
    session.update_text("abcdef")
    assert session.hover_at(4, 5, METRICS) is None
    assert session.hover_at(20, 5, CharMetrics(0, 0)) is None


def test_hover_provider_is_asked_when_no_entry_matches():
    backend = HoverBackend("direct")
    session = OverlaySession(backend)
    session.update_text("abcdef")

    popup = session.hover_at(9, 5, METRICS)
    assert popup.text == "direct"
    assert backend.hover_calls == [Position(0, 1)]

    assert session.hover_at(800, 5, METRICS) is None
    assert backend.hover_calls == [Position(0, 1)]


def test_empty_hover_payload_shows_nothing():
    session = OverlaySession(HoverBackend({"kind": "plaintext", "value": "  "}))
    session.update_text("abcdef")
    assert session.hover_at(9, 5, METRICS) is None



def test_hover_after_tab_uses_tab_stops():
    result = AnalysisResult(hover_entries=(HoverEntry(range=_range((0, 1), (0, 2)), payload="x: Float[B]"),))
    session = OverlaySession(FakeAnalyzer(result))
    session.update_text("\tx = y")

    popup = session.hover_at(33, 5, METRICS, tab_size=4)
    assert popup is not None
    assert popup.text == "x: Float[B]"
    assert session.hover_at(33, 5, METRICS) is None
