"""Publish/subscribe hub for raw input events during a play session."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from enum import Enum
from typing import Callable


class SessionEventType(str, Enum):
    VISIBILITY = "visibility"
    ACTIVITY = "activity"
    KEY = "key"
    CLIPBOARD = "clipboard"
    CONTEXT_MENU = "context_menu"
    TOUCH = "touch"
    BLUR = "blur"


@dataclass(frozen=True, slots=True)
class KeyStroke:
    """Platform-neutral key press. ``key`` uses names like "F12", "I", "PrintScreen"."""

    key: str
    ctrl: bool = False
    shift: bool = False
    alt: bool = False
    meta: bool = False

    @property
    def primary_modifier(self) -> bool:
        """Ctrl on Windows/Linux, Cmd on macOS."""
        return self.ctrl or self.meta


# A handler returns True to ask for the default action to be suppressed
EventHandler = Callable[..., "bool | None"]


class SessionEventHub:
    """Fan-out of input events to whichever detectors are subscribed."""

    def __init__(self) -> None:
        self._handlers: dict[SessionEventType, list[EventHandler]] = defaultdict(list)

    def subscribe(self, event_type: SessionEventType, handler: EventHandler) -> Callable[[], None]:
        """Register ``handler`` and return a callable that removes it again."""
        self._handlers[event_type].append(handler)

        def unsubscribe() -> None:
            handlers = self._handlers[event_type]
            if handler in handlers:
                handlers.remove(handler)

        return unsubscribe

    def publish(self, event_type: SessionEventType, *args: object) -> bool:
        """Deliver an event. Returns True when any handler asked to suppress it."""
        suppress = False
        for handler in list(self._handlers[event_type]):
            if handler(*args):
                suppress = True
        return suppress

    def subscriber_count(self, event_type: SessionEventType) -> int:
        return len(self._handlers[event_type])

    # Convenience publishers used by the UI layer

    def visibility_changed(self, hidden: bool) -> None:
        self.publish(SessionEventType.VISIBILITY, hidden)

    def user_activity(self, kind: str) -> None:
        self.publish(SessionEventType.ACTIVITY, kind)

    def key_pressed(self, stroke: KeyStroke) -> bool:
        return self.publish(SessionEventType.KEY, stroke)

    def clipboard_action(self, action: str) -> bool:
        return self.publish(SessionEventType.CLIPBOARD, action)

    def context_menu_requested(self) -> bool:
        return self.publish(SessionEventType.CONTEXT_MENU)

    def touch_started(self, point_count: int) -> None:
        self.publish(SessionEventType.TOUCH, point_count)

    def window_blurred(self) -> None:
        self.publish(SessionEventType.BLUR)
