"""
coalescer.py

Leading-edge debounce for keystroke events. The first event of a burst goes
through at once; while the window is open, later events wait out the window
and only the freshest of them goes through.
"""

import asyncio
import logging
import uuid
from dataclasses import dataclass
from typing import Any, Optional

logger = logging.getLogger(__name__)


def new_token():
    """Mint an opaque token for one triggering event. Compare with `is` only."""
    return uuid.uuid4()


@dataclass
class CoalescerState:
    """Mutable debounce state for one editor session."""

    active: bool = False
    most_recent_token: Optional[Any] = None
    # Pending window-expiry timer, if one is scheduled
    expiry: Optional[asyncio.TimerHandle] = None


def _schedule_expiry(state, window):
    loop = asyncio.get_running_loop()
    state.expiry = loop.call_later(window, _expire, state)


def _expire(state):
    state.active = False
    state.expiry = None


async def should_suppress(state, window):
    """
    Decide whether the event calling this must skip its downstream work.

    :param state:  The session's CoalescerState, updated in place.
    :param window: Debounce window in seconds.
    :return: True if a newer event arrived while this one was waiting.
    """
    token = new_token()
    state.most_recent_token = token

    if not state.active:
        # Leading edge: open the window and let this event through right away.
        state.active = True
        _schedule_expiry(state, window)
        return False

    if state.expiry is not None:
        state.expiry.cancel()
        state.expiry = None

    await asyncio.sleep(window)

    if state.most_recent_token is not token:
        logger.debug("Event superseded during debounce window; suppressing.")
        return True

    # Freshest waiter: release the window once it has been quiet for a full period.
    if state.expiry is None:
        _schedule_expiry(state, window)
    return False


class Coalescer:
    """Holds one CoalescerState and applies `should_suppress` to it."""

    def __init__(self, window=0.35):
        """
        :param window: Default debounce window in seconds.
        """
        self.window = window
        self.state = CoalescerState()

    async def should_suppress(self, window=None):
        return await should_suppress(self.state, self.window if window is None else window)

    @property
    def active(self):
        return self.state.active
