"""Quiz-play timing constants shared across core and UI layers."""

COUNTDOWN_TICK_INTERVAL_MS: int = 100
LOW_TIME_THRESHOLD_MS: int = 30_000
FEEDBACK_DISPLAY_MS: int = 1_500
