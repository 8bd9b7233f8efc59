"""Thresholds used by the integrity detectors."""

# Hidden -> visible round trips
TAB_SWITCH_MIN_HIDDEN_MS: int = 500
SCREENSHOT_MIN_HIDDEN_MS: int = 50

# Inactivity
AFK_THRESHOLD_MS: int = 10_000
AFK_CHECK_INTERVAL_MS: int = 5_000

# Multi-touch followed by blur within this window looks like a screenshot gesture
GESTURE_BLUR_WINDOW_MS: int = 1_000
GESTURE_MIN_TOUCH_POINTS: int = 2

# Outer minus inner window size above this suggests a docked devtools panel
DEVTOOLS_SIZE_DELTA_PX: int = 200

EXTENSION_URL_SCHEMES: tuple[str, ...] = (
    "chrome-extension://",
    "moz-extension://",
    "safari-extension://",
    "safari-web-extension://",
    "ms-browser-extension://",
)

EXTENSION_DOM_MARKERS: tuple[str, ...] = (
    "data-extension-id",
    "data-grammarly",
    "data-gr-ext",
    "data-lastpass",
    "data-new-gr-c-s-check-loaded",
    "data-darkreader",
    "data-chatgpt",
)

SCREENSHOT_EXTENSION_PATTERNS: tuple[str, ...] = (
    "lightshot",
    "nimbus",
    "awesome-screenshot",
    "awesomescreenshot",
    "gofullpage",
    "fireshot",
    "screencastify",
    "loom.com",
)

AI_ASSISTANT_EXTENSION_PATTERNS: tuple[str, ...] = (
    "chatgpt",
    "openai",
    "gemini",
    "copilot",
    "monica",
    "merlin",
    "perplexity",
    "quillbot",
    "sider.ai",
)
