"""Utility helpers for the system analyzer application."""
