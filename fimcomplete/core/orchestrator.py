"""
orchestrator.py

Turns an editor snapshot into at most one outstanding completion request.
"""

import asyncio
import logging
from dataclasses import dataclass

from ..config import settings
from .editor import CompletionResult
from .llm_client import CompletionError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CompletionRequest:
    prefix: str
    suffix: str
    cursor_offset: int

    @classmethod
    def from_state(cls, state):
        """Split the buffer at the cursor."""
        pos = max(0, min(state.cursor_position, len(state.text)))
        return cls(prefix=state.text[:pos], suffix=state.text[pos:], cursor_offset=pos)


class CompletionOrchestrator:
    """
    Gates each edit through the coalescer, the in-flight flag and the minimum
    length check, then asks the LLM client for a completion.

    All of its state is touched from the event loop only; the blocking HTTP
    call itself runs in a worker thread.
    """

    def __init__(self, coalescer, llm_client, debounce_window=None, min_prefix_length=None,
                 on_busy_changed=None):
        """
        :param coalescer:         A Coalescer (core/coalescer.py).
        :param llm_client:        An LLMClient (core/llm_client.py).
        :param debounce_window:   Seconds; defaults to settings.DEBOUNCE_WINDOW.
        :param min_prefix_length: Defaults to settings.MIN_PREFIX_LENGTH.
        :param on_busy_changed:   Optional callback(bool) fired when the in-flight flag flips.
        """
        self.coalescer = coalescer
        self.llm_client = llm_client
        self.debounce_window = settings.DEBOUNCE_WINDOW if debounce_window is None else debounce_window
        self.min_prefix_length = (
            settings.MIN_PREFIX_LENGTH if min_prefix_length is None else min_prefix_length
        )
        self.on_busy_changed = on_busy_changed
        self._in_flight = False

    @property
    def in_flight(self):
        return self._in_flight

    def _set_in_flight(self, value):
        self._in_flight = value
        if self.on_busy_changed:
            self.on_busy_changed(value)

    async def request_completion(self, state):
        """
        :param state: EditorState snapshot taken when the edit happened.
        :return: A CompletionResult, or None if gated, empty, or failed.
        """
        if await self.coalescer.should_suppress(self.debounce_window):
            return None

        if self._in_flight:
            logger.debug("A completion request is already in flight; skipping.")
            return None

        if len(state.text) < self.min_prefix_length:
            return None

        request = CompletionRequest.from_state(state)

        self._set_in_flight(True)
        try:
            text = await asyncio.to_thread(self.llm_client.get_suggestion, request)
        except CompletionError as e:
            logger.error("Completion failed: %s", e)
            return None
        finally:
            self._set_in_flight(False)

        if not text:
            return None
        return CompletionResult(text=text, cursor_offset=request.cursor_offset)
