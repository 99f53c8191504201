"""Presentation state for the analyzer window."""
