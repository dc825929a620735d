"""
hooking_qt.py

Connects the Qt editor window to the completion session. The session lives
on an asyncio event loop in a background thread; Qt signals hand edits and
accept clicks over to that loop, so session state is only ever touched by
one thread.
"""

import asyncio
import logging
import threading

logger = logging.getLogger(__name__)


# Module-level references, set once by start_qt_hooks()
_core = None
_window = None
_loop = None
_loop_thread = None


def _run_loop(loop):
    asyncio.set_event_loop(loop)
    loop.run_forever()
    loop.close()


def start_qt_hooks(core, window):
    """
    Entry point: start the session loop thread and wire the window's signals.
    Call once from main.py after the core and window exist.

    :param core:   An AutocompleteCore.
    :param window: An EditorWindow (core/overlay.py).
    """
    global _core, _window, _loop, _loop_thread
    _core = core
    _window = window
    _loop = asyncio.new_event_loop()
    _loop_thread = threading.Thread(target=_run_loop, args=(_loop,), name="fimcomplete-loop",
                                    daemon=True)
    _loop_thread.start()

    core.on_update = window.show_state
    window.edited.connect(on_text_edited)
    window.accepted.connect(on_accept_clicked)
    window.dismissed.connect(on_dismiss_clicked)


def stop_qt_hooks():
    """Stop the session loop thread."""
    global _loop, _loop_thread
    if _loop is None or _loop_thread is None:
        return
    _loop.call_soon_threadsafe(_loop.stop)
    _loop_thread.join(timeout=2)
    _loop_thread = None
    _loop = None


def on_text_edited(text, cursor_position):
    """Qt slot: forward an edit snapshot to the session loop. Returns the concurrent future."""
    if _core is None or _loop is None:
        return
    future = asyncio.run_coroutine_threadsafe(_core.on_text_changed(text, cursor_position), _loop)
    future.add_done_callback(_log_failure)
    return future


def on_accept_clicked():
    """Qt slot: accept the pending completion on the session loop."""
    if _core is None or _loop is None:
        return
    _loop.call_soon_threadsafe(_accept)


def on_dismiss_clicked():
    """Qt slot: drop the pending completion on the session loop."""
    if _core is None or _loop is None:
        return
    _loop.call_soon_threadsafe(_dismiss)


def _accept():
    try:
        previous_text = _core.editor_state.text
        if _core.pending_completion is None:
            return
        state = _core.accept_suggestion()
        _window.load_text(previous_text, state)
    except Exception:
        logger.exception("Accepting the completion failed")


def _dismiss():
    try:
        _core.reject_suggestion()
    except Exception:
        logger.exception("Dismissing the completion failed")


def _log_failure(future):
    if future.cancelled():
        return
    exc = future.exception()
    if exc is not None:
        logger.error("Completion task failed", exc_info=exc)
