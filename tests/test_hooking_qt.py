"""Tests for the Qt-to-session bridge, using a mock window in place of the widget."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from fimcomplete.core.core import AutocompleteCore
from fimcomplete.core.orchestrator import CompletionOrchestrator
from fimcomplete.hooking import hooking_qt


@pytest.fixture
def window():
    return MagicMock()


@pytest.fixture
def core():
    coalescer = MagicMock()
    coalescer.should_suppress = AsyncMock(return_value=False)
    client = MagicMock()
    client.get_suggestion = MagicMock(return_value="()")
    return AutocompleteCore(CompletionOrchestrator(coalescer, client, min_prefix_length=5))


@pytest.fixture
def hooks(core, window):
    hooking_qt.start_qt_hooks(core, window)
    yield hooking_qt
    hooking_qt.stop_qt_hooks()


def _drain(hooks):
    """Wait until everything already queued on the session loop has run."""
    asyncio.run_coroutine_threadsafe(asyncio.sleep(0), hooks._loop).result(timeout=2)


def test_start_wires_window_signals(hooks, core, window):
    window.edited.connect.assert_called_once_with(hooking_qt.on_text_edited)
    window.accepted.connect.assert_called_once_with(hooking_qt.on_accept_clicked)
    window.dismissed.connect.assert_called_once_with(hooking_qt.on_dismiss_clicked)
    assert core.on_update == window.show_state


def test_edit_runs_on_session_loop_and_updates_window(hooks, core, window):
    result = hooks.on_text_edited("print", 5).result(timeout=2)

    assert result.text == "()"
    state, loading = window.show_state.call_args.args
    assert state.pending_completion == result
    assert loading is False


def test_accept_pushes_new_buffer_to_window(hooks, core, window):
    hooks.on_text_edited("print", 5).result(timeout=2)

    hooks.on_accept_clicked()
    _drain(hooks)

    previous_text, state = window.load_text.call_args.args
    assert previous_text == "print"
    assert state.text == "print()"
    assert state.cursor_position == 7


def test_accept_without_pending_leaves_window_alone(hooks, window):
    hooks.on_accept_clicked()
    _drain(hooks)
    window.load_text.assert_not_called()


def test_dismiss_drops_pending_without_touching_buffer(hooks, core, window):
    hooks.on_text_edited("print", 5).result(timeout=2)
    assert core.pending_completion is not None

    hooks.on_dismiss_clicked()
    _drain(hooks)

    assert core.pending_completion is None
    assert core.editor_state.text == "print"
    state, _ = window.show_state.call_args.args
    assert state.pending_completion is None
    window.load_text.assert_not_called()
