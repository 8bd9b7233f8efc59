"""Background task runner that hands results back to the Qt event loop."""

from __future__ import annotations

from functools import partial
import logging
from threading import Lock, Thread
from typing import Any, Callable

from PySide6.QtCore import QObject, Qt, Signal, Slot

logger = logging.getLogger(__name__)


class _ResultRelay(QObject):
    """Lives on the GUI thread; callbacks emitted from workers run there."""

    delivered = Signal(object)

    @Slot(object)
    def invoke(self, callback: Callable[[], None]) -> None:
        callback()


class QtTaskRunner:
    """Implements the core ``TaskRunner`` protocol with worker threads.

    Tasks run one at a time on daemon threads so the shared HTTP session
    never sees concurrent requests. Construct it on the GUI thread.
    """

    def __init__(self, parent: QObject | None = None) -> None:
        self._relay = _ResultRelay(parent)
        self._relay.delivered.connect(self._relay.invoke, Qt.ConnectionType.QueuedConnection)
        self._lock = Lock()

    def run(
        self,
        task: Callable[[], Any],
        on_success: Callable[[Any], None],
        on_failure: Callable[[Exception], None],
    ) -> None:
        def work() -> None:
            with self._lock:
                try:
                    result = task()
                except Exception as exc:
                    logger.debug("Background task failed: %s", exc)
                    self._relay.delivered.emit(partial(on_failure, exc))
                    return
            self._relay.delivered.emit(partial(on_success, result))

        Thread(target=work, name="QuizPlayTask", daemon=True).start()
