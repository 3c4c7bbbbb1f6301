"""Tests for tick bookkeeping and console logging helpers."""

import pytest

from libreconomy.cadence import CurrentTick, TickInterval
from libreconomy.logging_utils import (
    LOG_TAG_DECISION,
    Color,
    colored,
    is_verbose,
    log_decision,
    log_error,
)


def test_current_tick_advances_by_one():
    tick = CurrentTick()

    assert tick.value == 0
    assert tick.advance() == 1
    assert tick.advance() == 2
    assert int(tick) == 2


def test_current_tick_rejects_negative_start():
    with pytest.raises(ValueError):
        CurrentTick(-1)


def test_tick_interval_every_n():
    interval = TickInterval(every=3)

    due = [tick for tick in range(1, 10) if interval.is_due(tick=tick)]

    assert due == [3, 6, 9]


def test_tick_interval_every_tick_and_last_run():
    interval = TickInterval(every=1)

    assert interval.is_due(tick=5, last_run_tick=None)
    assert interval.is_due(tick=5, last_run_tick=4)
    assert not interval.is_due(tick=5, last_run_tick=5)


def test_tick_interval_offset():
    interval = TickInterval(every=4, offset=1)

    assert interval.is_due(tick=1)
    assert interval.is_due(tick=5)
    assert not interval.is_due(tick=4)


def test_colored_respects_no_color(monkeypatch):
    monkeypatch.setenv("LIBRECONOMY_NO_COLOR", "1")
    assert colored("plain", Color.BLUE) == "plain"

    monkeypatch.delenv("LIBRECONOMY_NO_COLOR")
    text = colored("tinted", Color.RED, bold=True)
    assert text.startswith(Color.BOLD.value + Color.RED.value)
    assert text.endswith(Color.RESET.value)


def test_verbose_flag(monkeypatch):
    monkeypatch.delenv("LIBRECONOMY_VERBOSE", raising=False)
    assert not is_verbose()

    monkeypatch.setenv("LIBRECONOMY_VERBOSE", "true")
    assert is_verbose()


def test_log_helpers_print_tags(monkeypatch, capsys):
    monkeypatch.setenv("LIBRECONOMY_NO_COLOR", "1")

    log_decision("Agent 1 rests")
    log_error("boom")

    out = capsys.readouterr().out.splitlines()
    assert out[0] == f"{LOG_TAG_DECISION} Agent 1 rests"
    assert out[1].endswith("boom")
