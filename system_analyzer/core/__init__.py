"""Sensor discovery, grouping, rolling series and sampling."""
