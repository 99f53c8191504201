from PySide6.QtGui import QColor, QPalette
from PySide6.QtWidgets import QApplication


def font_stylesheet(size: float, color: str) -> str:
    """Stylesheet fragment for the user's font preferences."""
    return f"QWidget {{ font-size: {size:.0f}px; color: {color}; }}"


def apply_dark_theme(app: QApplication) -> None:
    """Dark Fusion palette plus styling for the analyzer's panels."""
    app.setStyle("Fusion")
    palette = QPalette()
    palette.setColor(QPalette.Window, QColor(18, 18, 18))
    palette.setColor(QPalette.WindowText, QColor(224, 224, 224))
    palette.setColor(QPalette.Base, QColor(24, 24, 24))
    palette.setColor(QPalette.AlternateBase, QColor(30, 30, 30))
    palette.setColor(QPalette.ToolTipBase, QColor(255, 255, 255))
    palette.setColor(QPalette.ToolTipText, QColor(0, 0, 0))
    palette.setColor(QPalette.Text, QColor(224, 224, 224))
    palette.setColor(QPalette.Button, QColor(30, 30, 30))
    palette.setColor(QPalette.ButtonText, QColor(224, 224, 224))
    palette.setColor(QPalette.BrightText, QColor(255, 0, 0))
    palette.setColor(QPalette.Highlight, QColor(53, 132, 228))
    palette.setColor(QPalette.HighlightedText, QColor(0, 0, 0))
    app.setPalette(palette)
    app.setStyleSheet(
        """
        QWidget { background-color: #121212; color: #e0e0e0; }
        QMainWindow { background-color: #0d0d0d; }

        QLabel#Status {
            color: #b0b0b0;
            font-size: 10pt;
            padding: 0 6px;
        }
        QLabel#Legend {
            color: #d0d0d0;
            padding: 4px;
        }

        QToolBar {
            background-color: #1a1a1a;
            border-bottom: 2px solid #2a2a2a;
            spacing: 8px;
            padding: 8px;
        }
        QToolBar QLabel {
            color: #b0b0b0;
            font-size: 10pt;
            padding: 0 4px;
        }
        QToolBar QSpinBox, QToolBar QComboBox {
            background-color: #252525;
            border: 1px solid #3a3a3a;
            border-radius: 4px;
            padding: 4px 8px;
            color: #e0e0e0;
            min-width: 80px;
        }
        QPushButton {
            background-color: #2a2a2a;
            border: 1px solid #3a3a3a;
            border-radius: 4px;
            padding: 6px 12px;
            color: #e0e0e0;
        }
        QPushButton:hover {
            background-color: #333333;
            border: 1px solid #4a4a4a;
        }

        QTreeWidget {
            background-color: #1a1a1a;
            alternate-background-color: #1e1e1e;
            selection-background-color: #3584e4;
        }
        QHeaderView::section {
            background-color: #252525;
            color: #b0b0b0;
            padding: 6px;
            border: 1px solid #2a2a2a;
            font-weight: 600;
        }
        """
    )
