"""Question rendering utilities for the play window."""

from __future__ import annotations

from quizplay.core.markdown_math_renderer import renderer
from quizplay.core.models import QuizQuestion


def option_label(index: int) -> str:
    return chr(ord("A") + index)


def render_question(question: QuizQuestion, font_size: int = 14) -> str:
    """Render the question text and its point value as a full HTML document.

    Options are rendered as Qt buttons by the window, not in the page.
    """
    points = "point" if question.points == 1 else "points"
    body = renderer.render_fragment(question.text)
    body += f'<p class="points">{question.points} {points}</p>'
    return renderer.wrap_with_mathjax(body, font_size=font_size)
