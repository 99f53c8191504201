"""pytest configuration for system_analyzer tests.

This module sets up global mocking for PySide6 to allow
testing Qt-based components without requiring a display server.
QWidget and QMainWindow are real classes so that widgets subclassing
them stay real classes too; any Qt method they call becomes a mock.
"""

#      Copyright (c) 2025 predator. All rights reserved.

import sys
from unittest.mock import MagicMock


class _QtWidgetStub:
    """Stand-in base for QWidget subclasses; unknown Qt methods become mocks."""

    def __init__(self, *args, **kwargs):
        pass

    def __getattr__(self, name):
        if name.startswith('_'):
            raise AttributeError(name)
        attr = MagicMock(name=name)
        object.__setattr__(self, name, attr)
        return attr


# Mock PySide6 modules before any imports
def _setup_pyside6_mocks():
    """Setup PySide6 mocks globally for all tests."""
    if 'PySide6' not in sys.modules:
        sys.modules['PySide6'] = MagicMock()
        sys.modules['PySide6.QtCore'] = MagicMock()
        sys.modules['PySide6.QtGui'] = MagicMock()
        sys.modules['PySide6.QtWidgets'] = MagicMock()
        sys.modules['PySide6.QtCharts'] = MagicMock()
        widgets = sys.modules['PySide6.QtWidgets']
        widgets.QWidget = type('QWidget', (_QtWidgetStub,), {})
        widgets.QMainWindow = type('QMainWindow', (widgets.QWidget,), {})


# Setup mocks before any tests run
_setup_pyside6_mocks()
