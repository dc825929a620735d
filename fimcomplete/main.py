"""
Main entry point for the fimcomplete editor.
"""

import sys
import signal
import logging

# Third-party
from PyQt5 import QtCore

# Local imports from our package structure
from .config import settings
from .core.coalescer import Coalescer
from .core.core import AutocompleteCore
from .core.llm_client import LLMClient
from .core.orchestrator import CompletionOrchestrator
from .core.overlay import Overlay
from .hooking.hooking_qt import start_qt_hooks, stop_qt_hooks


def main():
    """
    Entry point that opens the editor window and runs the completion session.
    """
    logging.basicConfig(level=settings.LOG_LEVEL, format="%(asctime)s [%(levelname)s] %(message)s")
    logger = logging.getLogger(__name__)

    logger.info("Initializing LLM client (%s), orchestrator, and editor window...", settings.LLM_ENDPOINT)
    llm_client = LLMClient()
    orchestrator = CompletionOrchestrator(Coalescer(settings.DEBOUNCE_WINDOW), llm_client)
    core = AutocompleteCore(orchestrator)
    overlay = Overlay()

    logger.info("Starting completion session loop...")
    start_qt_hooks(core, overlay.window)

    # Let Ctrl+C close the window instead of being swallowed by the Qt loop
    def handle_signal(signum, frame):
        logger.info("Received signal %s. Shutting down gracefully.", signum)
        overlay.app.quit()

    signal.signal(signal.SIGINT, handle_signal)
    signal.signal(signal.SIGTERM, handle_signal)

    # Python only runs signal handlers between bytecodes; wake up regularly so it gets the chance
    wakeup = QtCore.QTimer()
    wakeup.timeout.connect(lambda: None)
    wakeup.start(250)

    logger.info("Launching the Qt event loop. Press Ctrl+C to exit.")
    exit_code = overlay.exec_()
    stop_qt_hooks()
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
