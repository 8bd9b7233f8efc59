"""Qt window in which a player takes one timed quiz."""

from __future__ import annotations

import logging
import sys

from PySide6.QtCore import QEvent, QObject, Qt
from PySide6.QtGui import QGuiApplication, QKeySequence
from PySide6.QtWebEngineWidgets import QWebEngineView
from PySide6.QtWidgets import (
    QApplication,
    QButtonGroup,
    QHBoxLayout,
    QLabel,
    QListWidget,
    QMainWindow,
    QProgressBar,
    QPushButton,
    QStackedWidget,
    QVBoxLayout,
    QWidget,
)

from quizplay.constants.ui_constants import (
    LOADING_MESSAGE,
    LOW_TIME_WARNING,
    NEXT_QUESTION_BUTTON,
    QUIZZES_ROUTE,
    SUBMIT_QUIZ_BUTTON,
    TOAST_DURATION_MS,
    WINDOW_TITLE,
)
from quizplay.core.errors import ApiError
from quizplay.core.events import KeyStroke, SessionEventHub
from quizplay.core.models import LeaderboardEntry, Notification, NotificationLevel
from quizplay.core.quiz_session import QuizSession
from quizplay.core.scheduler import TaskRunner
from quizplay.core.services.quiz_api import QuizApiClient
from quizplay.core.services.sequencer import SessionState
from quizplay.styling.styles import Styles
from quizplay.ui.dialog_helpers import confirm_leave_quiz, show_error, show_info
from quizplay.ui.environment_probe import PROBE_SCRIPT, snapshot_from_probe
from quizplay.ui.question_renderer import option_label, render_question

logger = logging.getLogger(__name__)

_NAMED_KEYS = {
    int(Qt.Key_F12): "F12",
    int(Qt.Key_Print): "PrintScreen",
}


def key_stroke_from_event(event) -> KeyStroke:
    """Translate a QKeyEvent into the platform-neutral KeyStroke."""
    key = int(event.key())
    if key in _NAMED_KEYS:
        name = _NAMED_KEYS[key]
    elif int(Qt.Key_A) <= key <= int(Qt.Key_Z) or int(Qt.Key_0) <= key <= int(Qt.Key_9):
        name = chr(key)
    else:
        name = QKeySequence(key).toString() or event.text()

    modifiers = event.modifiers()
    control = bool(modifiers & Qt.ControlModifier)
    meta = bool(modifiers & Qt.MetaModifier)
    if sys.platform == "darwin":
        # Qt reports Cmd as Control on macOS
        control, meta = meta, control
    return KeyStroke(
        key=name,
        ctrl=control,
        shift=bool(modifiers & Qt.ShiftModifier),
        alt=bool(modifiers & Qt.AltModifier),
        meta=meta,
    )


class SessionInputFilter(QObject):
    """Application-wide event filter that feeds raw input into the session hub."""

    _ACTIVITY_EVENTS = {
        QEvent.MouseMove: "mousemove",
        QEvent.HoverMove: "mousemove",
        QEvent.MouseButtonPress: "mousedown",
        QEvent.Wheel: "scroll",
    }

    def __init__(self, hub: SessionEventHub, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._hub = hub

    def eventFilter(self, watched: QObject, event: QEvent) -> bool:
        event_type = event.type()
        if event_type in self._ACTIVITY_EVENTS:
            self._hub.user_activity(self._ACTIVITY_EVENTS[event_type])
            return False
        if event_type == QEvent.KeyPress:
            self._hub.user_activity("keydown")
            if event.matches(QKeySequence.StandardKey.Copy):
                return self._hub.clipboard_action("copy")
            if event.matches(QKeySequence.StandardKey.Cut):
                return self._hub.clipboard_action("cut")
            return self._hub.key_pressed(key_stroke_from_event(event))
        if event_type == QEvent.ContextMenu:
            return self._hub.context_menu_requested()
        if event_type == QEvent.TouchBegin:
            self._hub.touch_started(len(event.points()))
            return False
        if event_type == QEvent.WindowDeactivate:
            self._hub.window_blurred()
        return False


class QuizPlayWindow(QMainWindow):
    """Renders the session and forwards player input to it."""

    def __init__(
        self,
        session: QuizSession,
        client: QuizApiClient,
        runner: TaskRunner,
        quiz_id: str,
    ) -> None:
        super().__init__()
        self.setWindowTitle(WINDOW_TITLE)
        self.session = session
        self.client = client
        self.runner = runner
        self.quiz_id = quiz_id
        self._option_group: QButtonGroup | None = None
        self._rendered_question_id: str | None = None
        self._probe_requested = False

        self._build_ui()
        self.setStyleSheet(Styles.get_main_window_style())

        self._input_filter = SessionInputFilter(session.hub, self)
        QApplication.instance().installEventFilter(self._input_filter)
        QGuiApplication.instance().applicationStateChanged.connect(self._handle_application_state)

        session.add_change_listener(lambda _: self._refresh())
        session.add_tick_listener(lambda _: self._refresh_timer())
        session.add_notification_listener(self._show_notification)
        session.add_navigation_listener(self._handle_navigation)

    def _build_ui(self) -> None:
        self.stack = QStackedWidget(self)
        self.setCentralWidget(self.stack)

        # Play page
        play_page = QWidget(self)
        layout = QVBoxLayout()
        play_page.setLayout(layout)

        self.title_label = QLabel(LOADING_MESSAGE, self)
        self.title_label.setStyleSheet(Styles.get_large_label_style())
        layout.addWidget(self.title_label)

        header_row = QHBoxLayout()
        self.progress_label = QLabel("", self)
        header_row.addWidget(self.progress_label)
        header_row.addStretch()
        self.timer_label = QLabel("0:00", self)
        self.timer_label.setStyleSheet(Styles.get_timer_label_style(low_time=False))
        header_row.addWidget(self.timer_label)
        layout.addLayout(header_row)

        self.progress_bar = QProgressBar(self)
        self.progress_bar.setRange(0, 1000)
        self.progress_bar.setTextVisible(False)
        layout.addWidget(self.progress_bar)

        self.question_view = QWebEngineView(self)
        self.question_view.setContextMenuPolicy(Qt.NoContextMenu)
        self.question_view.loadFinished.connect(self._handle_page_loaded)
        layout.addWidget(self.question_view, stretch=1)

        self.options_container = QWidget(self)
        self.options_layout = QVBoxLayout()
        self.options_container.setLayout(self.options_layout)
        layout.addWidget(self.options_container)

        self.feedback_label = QLabel("", self)
        self.feedback_label.setVisible(False)
        layout.addWidget(self.feedback_label)

        action_row = QHBoxLayout()
        action_row.addStretch()
        self.next_button = QPushButton(NEXT_QUESTION_BUTTON, self)
        self.next_button.setEnabled(False)
        self.next_button.clicked.connect(self._handle_next)
        action_row.addWidget(self.next_button)
        layout.addLayout(action_row)

        self.warning_label = QLabel(LOW_TIME_WARNING, self)
        self.warning_label.setStyleSheet(Styles.get_warning_banner_style())
        self.warning_label.setVisible(False)
        layout.addWidget(self.warning_label)

        self.stack.addWidget(play_page)

        # Results page
        results_page = QWidget(self)
        results_layout = QVBoxLayout()
        results_page.setLayout(results_layout)
        self.results_title = QLabel("Leaderboard", self)
        self.results_title.setStyleSheet(Styles.get_large_label_style())
        results_layout.addWidget(self.results_title)
        self.leaderboard_list = QListWidget(self)
        results_layout.addWidget(self.leaderboard_list, stretch=1)
        close_button = QPushButton("Close", self)
        close_button.clicked.connect(self.close)
        results_layout.addWidget(close_button)
        self.stack.addWidget(results_page)

    # --- Lifecycle ---

    def begin(self) -> None:
        """Start fetching the quiz; the first question renders once the session is ready."""
        self.session.initialize(self.quiz_id)

    def _handle_page_loaded(self, ok: bool) -> None:
        # The first question page is where the environment probe runs
        if self._probe_requested:
            return
        self._probe_requested = True
        self.question_view.page().runJavaScript(PROBE_SCRIPT, 0, self._handle_probe_result)

    def _handle_probe_result(self, result: object) -> None:
        snapshot = snapshot_from_probe(result)
        snapshot.outer_width = snapshot.outer_width or self.frameGeometry().width()
        snapshot.outer_height = snapshot.outer_height or self.frameGeometry().height()
        self.session.start(snapshot)
        self._refresh()

    def closeEvent(self, event) -> None:
        if self.session.is_active() and not confirm_leave_quiz(self):
            event.ignore()
            return
        QApplication.instance().removeEventFilter(self._input_filter)
        self.session.close()
        super().closeEvent(event)

    # --- Session -> UI ---

    def _render_question(self) -> None:
        question = self.session.current_question
        if question is None or question.id == self._rendered_question_id:
            return
        self._rendered_question_id = question.id
        self.question_view.setHtml(render_question(question))

        while self.options_layout.count():
            item = self.options_layout.takeAt(0)
            widget = item.widget()
            if widget is not None:
                widget.deleteLater()
        self._option_group = QButtonGroup(self)
        self._option_group.setExclusive(True)
        for index, option in enumerate(question.options):
            button = QPushButton(f"{option_label(index)}.  {option.text}", self)
            button.setCheckable(True)
            button.clicked.connect(lambda _=False, option_id=option.id: self._handle_option(option_id))
            self._option_group.addButton(button)
            self.options_layout.addWidget(button)

    def _refresh(self) -> None:
        session = self.session
        state = session.state
        if state is SessionState.LOADING:
            return
        if state is SessionState.READY:
            # Rendering the first page triggers the environment check, which starts the session
            self.title_label.setText(session.quiz.title)
            self._render_question()
            return

        self._render_question()
        self.progress_label.setText(f"Question {session.question_number} of {session.question_count}")
        self.progress_bar.setValue(int(session.progress_fraction * 1000))

        answering = state is SessionState.ANSWERING and not session.all_answered
        if self._option_group is not None:
            for button in self._option_group.buttons():
                button.setEnabled(answering)

        feedback = session.feedback
        if feedback is not None:
            if feedback.is_correct is None:
                text = "Answer recorded."
            elif feedback.is_correct:
                text = "Correct!"
            else:
                text = f"Incorrect. The correct answer was: {feedback.correct_option_text}"
            self.feedback_label.setText(text)
            self.feedback_label.setStyleSheet(Styles.get_feedback_style(feedback.is_correct))
        self.feedback_label.setVisible(feedback is not None)

        is_last = session.question_number == session.question_count
        self.next_button.setText(SUBMIT_QUIZ_BUTTON if is_last else NEXT_QUESTION_BUTTON)
        if session.all_answered:
            # A failed final submission can be retried from here
            self.next_button.setEnabled(state is SessionState.ANSWERING)
        else:
            self.next_button.setEnabled(answering and session.selected_option_id is not None)
        self._refresh_timer()

    def _refresh_timer(self) -> None:
        self.timer_label.setText(self.session.formatted_time)
        low_time = self.session.is_low_time
        self.timer_label.setStyleSheet(Styles.get_timer_label_style(low_time=low_time))
        self.warning_label.setVisible(low_time and self.session.is_active())

    def _show_notification(self, notification: Notification) -> None:
        text = f"{notification.title}: {notification.message}"
        self.statusBar().showMessage(text, TOAST_DURATION_MS)
        if notification.level is not NotificationLevel.ERROR:
            return
        if self.session.state is SessionState.ABANDONED or self.session.load_error is not None:
            show_error(self, notification.title, notification.message)

    def _handle_navigation(self, route: str) -> None:
        if route == QUIZZES_ROUTE:
            self.close()
            return
        self._show_leaderboard()

    def _show_leaderboard(self) -> None:
        self.leaderboard_list.clear()
        result = self.session.result
        if result is not None:
            self.results_title.setText(f"You scored {result.total_score} points (rank #{result.rank})")
        self.stack.setCurrentIndex(1)
        self.runner.run(
            lambda: self.client.get_leaderboard(self.quiz_id),
            self._fill_leaderboard,
            self._handle_leaderboard_failed,
        )

    def _fill_leaderboard(self, entries: list[LeaderboardEntry]) -> None:
        for entry in entries:
            self.leaderboard_list.addItem(
                f"#{entry.rank}  {entry.display_name}  {entry.total_score} pts"
                f"  ({entry.correct_answers}/{entry.total_questions} correct)"
            )

    def _handle_leaderboard_failed(self, error: Exception) -> None:
        if not isinstance(error, ApiError):
            raise error
        show_info(self, "Leaderboard", error.message)

    # --- UI -> session ---

    def _handle_option(self, option_id: str) -> None:
        self.session.select_option(option_id)

    def _handle_next(self) -> None:
        if self.session.all_answered:
            self.session.submit()
        else:
            self.session.confirm_answer()

    def _handle_application_state(self, state: Qt.ApplicationState) -> None:
        self.session.hub.visibility_changed(state != Qt.ApplicationActive)
