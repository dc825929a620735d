"""
Minimal PyQt editor window for fimcomplete: a code text area, a loading label,
and a panel showing the suggested completion with Accept and Dismiss buttons.
"""

import sys

from PyQt5 import QtCore, QtGui, QtWidgets

from .editor import index_from_utf16, index_to_utf16


class EditorWindow(QtWidgets.QWidget):
    """
    Emits `edited(text, cursor_position)` when the user changes the buffer,
    `accepted()` on Accept, and `dismissed()` on Dismiss or Escape.
    `show_state(state, is_loading)` may be called from any thread; it is
    delivered to the GUI thread through a signal.
    """

    edited = QtCore.pyqtSignal(str, int)
    accepted = QtCore.pyqtSignal()
    dismissed = QtCore.pyqtSignal()
    _state_received = QtCore.pyqtSignal(object, bool)
    _text_received = QtCore.pyqtSignal(str, object)

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setWindowTitle("Code Completion")
        self.resize(800, 500)

        self.editor = QtWidgets.QPlainTextEdit(self)
        self.editor.setPlaceholderText("Start typing your code here...")
        self.editor.setFont(QtGui.QFontDatabase.systemFont(QtGui.QFontDatabase.FixedFont))

        self.loading_label = QtWidgets.QLabel("Generating...", self)
        self.loading_label.hide()

        self.suggestion_title = QtWidgets.QLabel("Suggested Completion:", self)
        self.suggestion_view = QtWidgets.QPlainTextEdit(self)
        self.suggestion_view.setReadOnly(True)
        self.suggestion_view.setFont(self.editor.font())
        self.suggestion_view.setMaximumHeight(120)
        self.button = QtWidgets.QPushButton("Accept Completion", self)
        self.dismiss_button = QtWidgets.QPushButton("Dismiss", self)

        self.suggestion_panel = QtWidgets.QWidget(self)
        panel_layout = QtWidgets.QVBoxLayout(self.suggestion_panel)
        panel_layout.setContentsMargins(0, 0, 0, 0)
        panel_layout.addWidget(self.suggestion_title)
        panel_layout.addWidget(self.suggestion_view)
        buttons = QtWidgets.QHBoxLayout()
        buttons.addWidget(self.button)
        buttons.addWidget(self.dismiss_button)
        buttons.addStretch(1)
        panel_layout.addLayout(buttons)
        self.suggestion_panel.hide()

        layout = QtWidgets.QVBoxLayout()
        layout.setContentsMargins(8, 8, 8, 8)
        layout.addWidget(self.editor)
        layout.addWidget(self.loading_label)
        layout.addWidget(self.suggestion_panel)
        self.setLayout(layout)

        self.editor.textChanged.connect(self._handle_text_changed)
        self.button.clicked.connect(self.accepted.emit)
        self.dismiss_button.clicked.connect(self.dismissed.emit)
        escape = QtWidgets.QShortcut(QtGui.QKeySequence(QtCore.Qt.Key_Escape), self)
        escape.activated.connect(self.dismissed.emit)
        self._state_received.connect(self._apply_state)
        self._text_received.connect(self._apply_text)

    def show_state(self, state, is_loading):
        """Thread-safe entry point for session updates."""
        self._state_received.emit(state, is_loading)

    def load_text(self, previous_text, state):
        """
        Thread-safe: replace the buffer with `state` after a completion was accepted.
        Skipped if the buffer no longer reads `previous_text`, i.e. the user typed
        in the meantime and that edit is already on its way to the session.
        """
        self._text_received.emit(previous_text, state)

    def _handle_text_changed(self):
        # Qt cursor positions count UTF-16 code units; the session indexes str code points.
        text = self.editor.toPlainText()
        position = index_from_utf16(text, self.editor.textCursor().position())
        self.edited.emit(text, position)

    def _apply_text(self, previous_text, state):
        if self.editor.toPlainText() != previous_text:
            return
        # Not a user edit; don't send it back to the session.
        self.editor.blockSignals(True)
        self.editor.setPlainText(state.text)
        self.editor.blockSignals(False)
        cursor = self.editor.textCursor()
        cursor.setPosition(index_to_utf16(state.text, state.cursor_position))
        self.editor.setTextCursor(cursor)
        self.editor.setFocus()

    def _apply_state(self, state, is_loading):
        self.loading_label.setVisible(is_loading)

        if state.pending_completion is not None:
            self.suggestion_view.setPlainText(state.pending_completion.text)
            self.suggestion_panel.show()
        else:
            self.suggestion_panel.hide()


class Overlay:
    """
    A higher-level wrapper that:
      - Owns the QApplication (if needed)
      - Owns the EditorWindow instance
    """

    def __init__(self):
        # If an application instance doesn't exist, create one.
        if not QtWidgets.QApplication.instance():
            self.app = QtWidgets.QApplication(sys.argv)
        else:
            self.app = QtWidgets.QApplication.instance()

        self.window = EditorWindow()

    def exec_(self):
        """Show the window and block in the Qt event loop. Returns the exit code."""
        self.window.show()
        return self.app.exec_()
