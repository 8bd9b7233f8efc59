"""Passive integrity detectors for a quiz-play session."""

from .activity import ActivityDetector
from .base import Detector, DetectorContext
from .clipboard import ClipboardBlocker
from .extensions import ExtensionScanner, scan_environment
from .gesture import GestureDetector
from .shortcuts import ShortcutBlocker, classify_keystroke
from .visibility import VisibilityDetector, classify_hidden_duration


def default_detectors() -> list[Detector]:
    """Fresh instances of every detector a session runs."""
    return [
        VisibilityDetector(),
        ActivityDetector(),
        ShortcutBlocker(),
        ClipboardBlocker(),
        GestureDetector(),
        ExtensionScanner(),
    ]


__all__ = [
    "ActivityDetector",
    "ClipboardBlocker",
    "Detector",
    "DetectorContext",
    "ExtensionScanner",
    "GestureDetector",
    "ShortcutBlocker",
    "VisibilityDetector",
    "classify_hidden_duration",
    "classify_keystroke",
    "default_detectors",
    "scan_environment",
]
