import logging

from .editor import EditorBridge

logger = logging.getLogger(__name__)


class AutocompleteCore:
    """
    The main, UI-agnostic logic for one editor session: text edits go through
    the orchestrator, results that are still current become the pending
    completion, and accepting it writes it back into the buffer.

    Every method runs on the session's event loop. The UI layer (hooking_qt.py)
    forwards edits with `on_text_changed(...)` and accept clicks with
    `accept_suggestion()`, and listens through `on_update`.
    """

    def __init__(self, orchestrator, bridge=None, on_update=None):
        """
        :param orchestrator: A CompletionOrchestrator (core/orchestrator.py)
        :param bridge:       An EditorBridge (core/editor.py); a blank one if omitted
        :param on_update:    Optional callback(state, is_loading) after each visible change
        """
        self.orchestrator = orchestrator
        self.bridge = bridge or EditorBridge()
        self.on_update = on_update

        # Bumped on every edit; a result is only shown if no edit came after its request
        self._generation = 0

        # Keep any busy listener the orchestrator already has and add ours after it
        self._busy_listener = orchestrator.on_busy_changed
        self.orchestrator.on_busy_changed = self._on_busy_changed

    @property
    def editor_state(self):
        return self.bridge.state

    @property
    def pending_completion(self):
        return self.bridge.state.pending_completion

    @property
    def is_loading(self):
        return self.orchestrator.in_flight

    async def on_text_changed(self, text, cursor_position):
        """
        Called for every edit with the new buffer and cursor.

        :return: The CompletionResult that became pending, or None.
        """
        self._generation += 1
        generation = self._generation

        state = self.bridge.update(text, cursor_position)
        self._notify()

        result = await self.orchestrator.request_completion(state)
        if result is None:
            return None

        if generation != self._generation:
            logger.debug("Dropping stale completion for edit %d (latest is %d).",
                         generation, self._generation)
            return None

        self.bridge.set_pending(result)
        self._notify()
        return result

    def accept_suggestion(self):
        """
        Inserts the pending completion at the cursor offset it was requested for
        and moves the cursor past it. Does nothing if nothing is pending.
        """
        if self.bridge.state.pending_completion is None:
            return self.bridge.state
        state = self.bridge.accept()
        self._notify()
        return state

    def reject_suggestion(self):
        """Discard the pending completion without touching the buffer."""
        if self.bridge.state.pending_completion is None:
            return
        self.bridge.clear_pending()
        self._notify()

    def _on_busy_changed(self, busy):
        if self._busy_listener:
            self._busy_listener(busy)
        self._notify()

    def _notify(self):
        if not self.on_update:
            return
        try:
            self.on_update(self.bridge.state, self.is_loading)
        except Exception:
            logger.exception("Update listener failed")
