"""Qt UI components for the quiz-play client.

Submodules are imported directly so that the Qt-free helpers
(``question_renderer``, ``environment_probe``) load without PySide6.
"""
