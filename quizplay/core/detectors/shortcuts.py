"""Devtools and screenshot keyboard shortcut blocking."""

from __future__ import annotations

import logging

from quizplay.core.detectors.base import Detector, DetectorContext
from quizplay.core.events import KeyStroke, SessionEventType
from quizplay.core.models import IntegrityEventKind

logger = logging.getLogger(__name__)

_PRINT_SCREEN_KEYS = {"PRINTSCREEN", "PRINT", "SNAPSHOT"}
_DEVTOOLS_LETTERS = {"I", "J", "C"}
_MAC_SCREENSHOT_DIGITS = {"3", "4", "5"}


def describe_keystroke(stroke: KeyStroke) -> str:
    parts = [
        name
        for name, held in (
            ("Ctrl", stroke.ctrl),
            ("Meta", stroke.meta),
            ("Alt", stroke.alt),
            ("Shift", stroke.shift),
        )
        if held
    ]
    parts.append(stroke.key)
    return "+".join(parts)


def classify_keystroke(stroke: KeyStroke) -> IntegrityEventKind | None:
    """Return the kind of blocked shortcut ``stroke`` is, or None if it is allowed."""
    key = stroke.key.upper()

    if key == "F12":
        return IntegrityEventKind.DEVTOOLS_SHORTCUT
    if stroke.primary_modifier and stroke.shift and key in _DEVTOOLS_LETTERS:
        return IntegrityEventKind.DEVTOOLS_SHORTCUT
    if stroke.primary_modifier and not stroke.shift and key == "U":
        return IntegrityEventKind.DEVTOOLS_SHORTCUT

    if key in _PRINT_SCREEN_KEYS:
        return IntegrityEventKind.SCREENSHOT_SHORTCUT
    # macOS Cmd+Shift+3/4/5
    if stroke.meta and stroke.shift and key in _MAC_SCREENSHOT_DIGITS:
        return IntegrityEventKind.SCREENSHOT_SHORTCUT
    # Windows snipping tool, Win+Shift+S
    if stroke.meta and stroke.shift and key == "S":
        return IntegrityEventKind.SCREENSHOT_SHORTCUT
    return None


class ShortcutBlocker(Detector):
    name = "shortcuts"

    def _on_start(self, context: DetectorContext) -> None:
        self._subscribe(SessionEventType.KEY, self._handle_key)

    def _handle_key(self, stroke: KeyStroke) -> bool:
        kind = classify_keystroke(stroke)
        if kind is None:
            return False
        shortcut = describe_keystroke(stroke)
        logger.debug("Blocked shortcut %s", shortcut)
        self._report(kind, f"Blocked shortcut {shortcut}")
        return True
