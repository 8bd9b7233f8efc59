"""Qt stylesheets for the play window."""

from .color_palette import ColorPalette, Theme


class Styles:
    """Helper class to generate Qt stylesheets based on the current theme."""

    @staticmethod
    def get_main_window_style(theme: Theme = Theme.LIGHT) -> str:
        return f"""
            QMainWindow, QWidget {{
                background-color: {ColorPalette.BACKGROUND_PRIMARY.get(theme)};
                color: {ColorPalette.TEXT_PRIMARY.get(theme)};
                font-family: 'Segoe UI', 'Roboto', sans-serif;
                font-size: 14px;
            }}
            QPushButton {{
                background-color: {ColorPalette.BUTTON_SECONDARY_BG.get(theme)};
                color: {ColorPalette.TEXT_PRIMARY.get(theme)};
                border: 1px solid {ColorPalette.BORDER_PRIMARY.get(theme)};
                border-radius: 6px;
                padding: 12px 18px;
                text-align: left;
            }}
            QPushButton:hover {{
                background-color: {ColorPalette.BUTTON_HOVER_BG.get(theme)};
            }}
            QPushButton:checked {{
                background-color: {ColorPalette.BUTTON_PRIMARY_BG.get(theme)};
                color: {ColorPalette.BUTTON_PRIMARY_TEXT.get(theme)};
                border: 1px solid {ColorPalette.BUTTON_PRIMARY_BG.get(theme)};
            }}
            QProgressBar {{
                border: none;
                border-radius: 4px;
                background-color: {ColorPalette.BACKGROUND_SECONDARY.get(theme)};
                max-height: 8px;
            }}
            QProgressBar::chunk {{
                border-radius: 4px;
                background-color: {ColorPalette.ACCENT_PRIMARY.get(theme)};
            }}
        """

    @staticmethod
    def get_timer_label_style(low_time: bool, theme: Theme = Theme.LIGHT) -> str:
        color = ColorPalette.ERROR.get(theme) if low_time else ColorPalette.TEXT_PRIMARY.get(theme)
        return f"font-size: 16pt; font-weight: bold; color: {color};"

    @staticmethod
    def get_feedback_style(is_correct: bool | None, theme: Theme = Theme.LIGHT) -> str:
        if is_correct is None:
            color = ColorPalette.TEXT_MUTED.get(theme)
        elif is_correct:
            color = ColorPalette.SUCCESS.get(theme)
        else:
            color = ColorPalette.ERROR.get(theme)
        return f"font-size: 13pt; font-weight: bold; color: {color};"

    @staticmethod
    def get_warning_banner_style(theme: Theme = Theme.LIGHT) -> str:
        return (
            f"background-color: {ColorPalette.ERROR.get(theme)}; color: #FFFFFF;"
            " border-radius: 6px; padding: 8px 12px;"
        )

    @staticmethod
    def get_large_label_style() -> str:
        return "font-size: 16pt; font-weight: bold;"
