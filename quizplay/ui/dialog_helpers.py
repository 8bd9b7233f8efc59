"""Helper functions for dialogs shown by the play window."""

from __future__ import annotations

from PySide6.QtWidgets import QMessageBox, QWidget


def show_error(parent: QWidget, title: str, message: str) -> None:
    QMessageBox.critical(parent, title, message)


def show_info(parent: QWidget, title: str, message: str) -> None:
    """Show information dialog.

    Args:
        parent: Parent widget for the dialog
        title: Dialog title
        message: Information message
    """
    msg_box = QMessageBox(parent)
    msg_box.setIcon(QMessageBox.Information)
    msg_box.setWindowTitle(title)
    msg_box.setText(message)
    msg_box.setStandardButtons(QMessageBox.Ok)
    msg_box.exec()


def confirm_leave_quiz(parent: QWidget) -> bool:
    """Ask before closing the window while a quiz is still running.

    Returns:
        True if the player wants to leave, False otherwise
    """
    reply = QMessageBox.question(
        parent,
        "Leave Quiz",
        "Leaving now ends this attempt without submitting your answers. Leave anyway?",
        QMessageBox.Yes | QMessageBox.No,
        QMessageBox.No,
    )
    return reply == QMessageBox.Yes
