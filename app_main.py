"""Application entry point for the QuizPlay client."""

from __future__ import annotations

import argparse
import sys

from PySide6.QtWidgets import QApplication

from quizplay.config import Config, get_config
from quizplay.core.errors import ApiError
from quizplay.core.models import UserIdentity
from quizplay.core.quiz_session import QuizSession
from quizplay.core.services.pending_queue import PendingSubmissionQueue
from quizplay.core.services.quiz_api import QuizApiClient
from quizplay.ui.qt_scheduler import QtScheduler
from quizplay.ui.qt_task_runner import QtTaskRunner
from quizplay.ui.quiz_play_window import QuizPlayWindow
from quizplay.utils.logging_config import configure_logging


def _parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Take a timed quiz.")
    parser.add_argument("quiz_id", nargs="?", help="Identifier of the quiz to play")
    parser.add_argument("--list", action="store_true", help="List available quizzes and exit")
    return parser.parse_args(argv)


def _list_quizzes(client: QuizApiClient) -> int:
    try:
        quizzes = client.list_quizzes()
    except ApiError as exc:
        print(f"Could not load quizzes: {exc.message}", file=sys.stderr)
        return 1
    for quiz in quizzes:
        print(f"{quiz.id}\t{quiz.status.value}\t{quiz.title}")
    return 0


def main(argv: list[str] | None = None, config_class: type[Config] | None = None) -> None:
    """Initialize logging, build the session, and launch the Qt play window."""
    args = _parse_args(sys.argv[1:] if argv is None else argv)
    config = config_class or get_config()
    logger = configure_logging(config.LOG_LEVEL)

    client = QuizApiClient(
        config.API_URL,
        identity=UserIdentity(user_id=config.USER_ID, token=config.API_TOKEN),
        timeout=config.REQUEST_TIMEOUT,
    )
    if args.list:
        sys.exit(_list_quizzes(client))
    if not args.quiz_id:
        print("A quiz id is required (use --list to see available quizzes).", file=sys.stderr)
        sys.exit(2)

    logger.info("Starting QuizPlay for quiz %s against %s", args.quiz_id, config.API_URL)
    app = QApplication(sys.argv[:1])
    runner = QtTaskRunner(app)
    session = QuizSession(
        client,
        QtScheduler(app),
        pending_queue=PendingSubmissionQueue(config.PENDING_SUBMISSIONS_PATH),
        reveal_feedback=config.REVEAL_FEEDBACK,
        shuffle_seed=config.SHUFFLE_SEED,
        runner=runner,
    )
    window = QuizPlayWindow(session=session, client=client, runner=runner, quiz_id=args.quiz_id)
    window.show()
    window.begin()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
