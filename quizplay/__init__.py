"""QuizPlay: timed quiz client with integrity monitoring."""

__version__ = "0.1.0"
