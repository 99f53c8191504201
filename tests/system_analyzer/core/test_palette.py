"""Unit tests for system_analyzer.core.palette module."""

#      Copyright (c) 2025 predator. All rights reserved.

import unittest

from system_analyzer.core.palette import LIGHT_GRAY, Color, group_palette, theme_color, tint


class TestThemeColor(unittest.TestCase):
    """Test theme color lookup."""

    def test_known_group(self):
        """Test a group with a theme color."""
        self.assertEqual(theme_color("cpu"), Color(220, 30, 30))

    def test_unknown_group(self):
        """Test that unknown groups are light gray."""
        self.assertEqual(theme_color("acpi"), LIGHT_GRAY)

    def test_hex(self):
        """Test hex formatting."""
        self.assertEqual(Color(220, 30, 0).hex(), "#dc1e00")


class TestTint(unittest.TestCase):
    """Test tint and group_palette."""

    def test_tint_zero_is_base(self):
        """Test that a zero factor keeps the color."""
        self.assertEqual(tint(Color(10, 20, 30), 0.0), Color(10, 20, 30))

    def test_tint_one_is_white(self):
        """Test that a factor of one gives white."""
        self.assertEqual(tint(Color(10, 20, 30), 1.0), Color(255, 255, 255))

    def test_palette_first_shade(self):
        """Test the first shade of the cpu palette."""
        # 220 + 35 * 0.15 = 225.25, 30 + 225 * 0.15 = 63.75
        self.assertEqual(group_palette("cpu", 1), [Color(225, 63, 63)])

    def test_palette_gets_lighter(self):
        """Test that successive shades move toward white."""
        shades = group_palette("gpu", 6)

        self.assertEqual(len(shades), 6)
        for darker, lighter in zip(shades, shades[1:]):
            self.assertLess(darker.r, lighter.r)

    def test_palette_cycles_every_six(self):
        """Test that the seventh shade repeats the first."""
        shades = group_palette("ssd", 7)

        self.assertEqual(shades[6], shades[0])

    def test_palette_empty(self):
        """Test that an empty palette still yields the base color."""
        self.assertEqual(group_palette("eth", 0), [theme_color("eth")])


if __name__ == '__main__':
    unittest.main()
