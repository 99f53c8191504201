"""Unit tests for system_analyzer.utils.theme module."""

#      Copyright (c) 2025 predator. All rights reserved.

import unittest
from unittest.mock import MagicMock

from system_analyzer.utils.theme import apply_dark_theme, font_stylesheet


class TestApplyDarkTheme(unittest.TestCase):
    """Test apply_dark_theme function."""

    def test_apply_dark_theme(self):
        """Test applying dark theme to QApplication."""
        mock_app = MagicMock()

        apply_dark_theme(mock_app)

        mock_app.setStyle.assert_called_once_with("Fusion")
        mock_app.setPalette.assert_called_once()
        mock_app.setStyleSheet.assert_called_once()

    def test_dark_theme_stylesheet(self):
        """Test that the stylesheet covers the status and legend labels."""
        mock_app = MagicMock()

        apply_dark_theme(mock_app)

        stylesheet_arg = mock_app.setStyleSheet.call_args[0][0]
        self.assertIsInstance(stylesheet_arg, str)
        self.assertIn('QWidget', stylesheet_arg)
        self.assertIn('QLabel#Status', stylesheet_arg)
        self.assertIn('QLabel#Legend', stylesheet_arg)


class TestFontStylesheet(unittest.TestCase):
    """Test font_stylesheet function."""

    def test_font_stylesheet(self):
        """Test size and color in the generated rule."""
        self.assertEqual(
            font_stylesheet(14.0, "#d3d3d3"),
            "QWidget { font-size: 14px; color: #d3d3d3; }",
        )


if __name__ == '__main__':
    unittest.main()
