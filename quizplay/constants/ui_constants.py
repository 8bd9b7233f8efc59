"""Qt UI constants and user-facing strings."""

WINDOW_TITLE: str = "QuizPlay"
TOAST_DURATION_MS: int = 4000

NEXT_QUESTION_BUTTON: str = "Next Question"
SUBMIT_QUIZ_BUTTON: str = "Submit Quiz"
LOW_TIME_WARNING: str = "Hurry! Less than 30 seconds remaining!"
LOADING_MESSAGE: str = "Loading quiz..."

QUIZZES_ROUTE: str = "/quizzes"
LEADERBOARD_ROUTE_TEMPLATE: str = "/quizzes/{quiz_id}/leaderboard"
