"""Copy/cut and context-menu blocking."""

from __future__ import annotations

import logging

from quizplay.core.detectors.base import Detector, DetectorContext
from quizplay.core.events import SessionEventType

logger = logging.getLogger(__name__)


class ClipboardBlocker(Detector):
    """Deterrent only: suppresses the action without reporting anything."""

    name = "clipboard"

    def _on_start(self, context: DetectorContext) -> None:
        self._subscribe(SessionEventType.CLIPBOARD, self._block_clipboard)
        self._subscribe(SessionEventType.CONTEXT_MENU, self._block_context_menu)

    def _block_clipboard(self, action: str) -> bool:
        logger.debug("Blocked clipboard action: %s", action)
        return True

    def _block_context_menu(self) -> bool:
        return True
