"""
editor.py

Editor-side state and the insertion of accepted completions into the buffer.
"""

from dataclasses import dataclass, replace
from typing import Optional


@dataclass(frozen=True)
class CompletionResult:
    """A normalized completion and the cursor offset its request was built at."""

    text: str
    cursor_offset: int


@dataclass(frozen=True)
class EditorState:
    text: str = ""
    cursor_position: int = 0
    pending_completion: Optional[CompletionResult] = None


def _utf16_units(char):
    return len(char.encode("utf-16-le")) // 2


def index_from_utf16(text, position):
    """
    Convert a UTF-16 code unit position (what Qt text cursors report) into a
    str index into `text`. A position inside a surrogate pair rounds down.
    """
    units = 0
    for index, char in enumerate(text):
        units += _utf16_units(char)
        if units > position:
            return index
    return len(text)


def index_to_utf16(text, index):
    """Convert a str index into `text` to a UTF-16 code unit position for Qt."""
    return sum(_utf16_units(char) for char in text[:index])


def apply_completion(state, result):
    """
    Insert `result.text` at the offset recorded when the completion was requested.

    The cursor ends up right after the inserted text and the pending completion is
    cleared. An empty or missing result leaves the state untouched.

    :param state:  The EditorState to insert into.
    :param result: A CompletionResult, or None.
    :return: The new EditorState.
    """
    if result is None or not result.text:
        return state

    pos = max(0, min(result.cursor_offset, len(state.text)))
    text = state.text[:pos] + result.text + state.text[pos:]
    return EditorState(text=text, cursor_position=pos + len(result.text))


class EditorBridge:
    """
    Owns the session's EditorState. Everything else reads snapshots through
    `state` and changes it only through the methods below.
    """

    def __init__(self, text="", cursor_position=0):
        self.state = EditorState(text=text, cursor_position=cursor_position)

    def update(self, text, cursor_position):
        """Record an edit. Any pending completion no longer matches the buffer and is dropped."""
        self.state = EditorState(text=text, cursor_position=cursor_position)
        return self.state

    def set_pending(self, result):
        self.state = replace(self.state, pending_completion=result)
        return self.state

    def clear_pending(self):
        self.state = replace(self.state, pending_completion=None)
        return self.state

    def accept(self):
        """Apply the pending completion, if there is one."""
        self.state = apply_completion(self.state, self.state.pending_completion)
        return self.state
