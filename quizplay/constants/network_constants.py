"""Network configuration constants for the quiz client."""

DEFAULT_API_URL: str = "http://localhost:5000/api"
REQUEST_TIMEOUT_SECONDS: float = 10.0

SUBMIT_MAX_ATTEMPTS: int = 3
SUBMIT_INITIAL_BACKOFF_MS: int = 1_000
SUBMIT_BACKOFF_MULTIPLIER: float = 2.0
