"""Styling module for the QuizPlay window."""

from .color_palette import ColorPalette, Theme

__all__ = ["ColorPalette", "Theme"]
