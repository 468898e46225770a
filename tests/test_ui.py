"""Tests for UI modules."""

import io
import json
from dataclasses import replace

import pytest


def _state(**kwargs):
    from ffbar.metrics import ProgressState

    return replace(ProgressState.start(0.0), **kwargs)


class TTYStringIO(io.StringIO):
    """StringIO that claims to be a terminal."""

    def isatty(self):
        return True


class TestProgressBar:
    """Tests for the bar and line formatting helpers."""

    def test_half(self):
        from ffbar.ui.terminal import progress_bar

        assert progress_bar(50, 20) == "[" + "#" * 10 + " " * 10 + "]"

    def test_bounds(self):
        from ffbar.ui.terminal import progress_bar

        assert progress_bar(0, 10) == "[" + " " * 10 + "]"
        assert progress_bar(100, 10) == "[" + "#" * 10 + "]"
        assert progress_bar(150, 10) == "[" + "#" * 10 + "]"

    def test_floor(self):
        from ffbar.ui.terminal import progress_bar

        assert progress_bar(19.9, 10) == "[#" + " " * 9 + "]"

    def test_zero_width(self):
        from ffbar.ui.terminal import placeholder_line, progress_bar

        assert progress_bar(50, 0) == ""
        assert placeholder_line(0) == "0%"

    def test_placeholder(self):
        from ffbar.ui.terminal import placeholder_line

        assert placeholder_line(10) == "[" + " " * 10 + "] 0%"

    def test_full_line(self):
        from ffbar.ui.terminal import format_progress_line

        state = _state(percent=50.0, current_bytes=1200.0, estimated_total_bytes=2400.0, bitrate=300.0, eta_secs=5.0)
        line = format_progress_line(state, 10)
        assert line == "[#####     ] 50.0%/1.2MB of ~2.4MB at 300.0KB/s ETA 5s"

    def test_unknown_values(self):
        from ffbar.ui.terminal import format_progress_line

        state = _state(percent=10.0, current_bytes=10.0)
        line = format_progress_line(state, 0)
        assert line == "10.0%/10.0KB of ~? at ?/s ETA ?"

    def test_reduced_line(self):
        from ffbar.ui.terminal import format_progress_line

        state = _state(percent=12.34, current_bytes=1.0, bitrate=1.0, eta_secs=1.0)
        assert format_progress_line(state, 10, stats=False) == "[#         ] 12.3%"
        assert format_progress_line(state, 0, stats=False) == "12.3%"

    def test_summary_line(self):
        from ffbar.ui.terminal import format_summary_line

        assert format_summary_line(5000.0, 10.0, 500.0, 10) == "[##########] 100% of 5.0MB in 10s at 500.0KB/s"
        assert format_summary_line(5000.0, 90.0, 0.0, 0, stats=False) == "100% in 1m 30s"


class TestTerminalRenderer:
    """Tests for in-place rendering."""

    def test_start_shows_placeholder(self, out):
        from ffbar.ui.terminal import TerminalRenderer

        ui = TerminalRenderer(bar_width=4, stream=out)
        ui.start(_state())

        assert out.getvalue() == "[    ] 0%"
        assert ui.rendered_line == "[    ] 0%"

    def test_show_erases_previous_line(self, out):
        from ffbar.ui.terminal import BACKSPACE, TerminalRenderer

        ui = TerminalRenderer(stream=out)
        ui.show("abc")
        ui.show("hello")

        assert out.getvalue() == "abc" + BACKSPACE * 3 + "hello"
        assert ui.rendered_line == "hello"

    def test_progress_without_metrics_is_silent(self, out):
        from ffbar.ui.terminal import TerminalRenderer

        ui = TerminalRenderer(stream=out)
        ui.progress(_state())

        assert out.getvalue() == ""

    def test_prompt_replaces_line(self, out):
        from ffbar.ui.terminal import BACKSPACE, TerminalRenderer

        ui = TerminalRenderer(bar_width=0, stream=out)
        ui.start(_state())
        ui.prompt("Overwrite? [y/N] ")

        assert out.getvalue() == "0%" + BACKSPACE * 2 + "Overwrite? [y/N] "
        assert ui.rendered_line == ""

    def test_summary(self, out):
        from ffbar.ui.terminal import BACKSPACE, TerminalRenderer

        ui = TerminalRenderer(bar_width=10, stream=out)
        ui.show("x")
        ui.summary(_state(current_bytes=5000.0), 10.0, 500.0)

        assert out.getvalue() == "x" + BACKSPACE + "[##########] 100% of 5.0MB in 10s at 500.0KB/s\n"

    def test_failure(self, out):
        from ffbar.ui.terminal import TerminalRenderer

        ui = TerminalRenderer(stream=out)
        ui.failure(_state(), 1.0)

        assert out.getvalue() == "Process failed!\n"

    def test_color_disabled_by_no_color(self):
        from ffbar.ui.terminal import _should_use_color

        assert _should_use_color(TTYStringIO()) is False

    def test_color_on_tty(self, monkeypatch):
        from ffbar.ui.terminal import _should_use_color

        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.delenv("FFBAR_SCRIPT_MODE", raising=False)
        assert _should_use_color(TTYStringIO()) is True
        assert _should_use_color(io.StringIO()) is False


class TestJSONRenderer:
    """Tests for JSON lines output."""

    def _events(self, out):
        return [json.loads(line) for line in out.getvalue().splitlines()]

    def test_progress_events(self, out):
        from ffbar.json_progress import JSONRenderer

        ui = JSONRenderer(stream=out, prompt_stream=io.StringIO())
        ui.start(_state())
        ui.progress(_state())
        ui.progress(_state(percent=25.0, current_bytes=500.0, total_duration_secs=100, current_time_secs=25))

        events = self._events(out)
        assert [e["event"] for e in events] == ["start", "progress"]
        assert events[0]["progress_percent"] == 0.0
        assert events[1]["progress_percent"] == 25.0
        assert events[1]["size_kb"] == 500.0
        assert events[1]["duration_secs"] == 100

    def test_prompt_goes_to_prompt_stream(self, out):
        from ffbar.json_progress import JSONRenderer

        prompt_out = io.StringIO()
        ui = JSONRenderer(stream=out, prompt_stream=prompt_out)
        ui.prompt("Overwrite? [y/N] ")

        assert prompt_out.getvalue() == "Overwrite? [y/N] "
        assert self._events(out)[0]["event"] == "prompt"
        assert self._events(out)[0]["text"] == "Overwrite? [y/N] "

    @pytest.mark.parametrize("success", [True, False])
    def test_final_event(self, out, success):
        from ffbar.json_progress import JSONRenderer

        ui = JSONRenderer(stream=out, prompt_stream=io.StringIO())
        if success:
            ui.summary(_state(current_bytes=100.0), 4.0, 25.0)
        else:
            ui.failure(_state(), 4.0)

        event = self._events(out)[0]
        assert event["event"] == ("complete" if success else "failed")
        assert event["elapsed_seconds"] == 4.0
        if success:
            assert event["progress_percent"] == 100.0
            assert event["throughput_kb_s"] == 25.0
