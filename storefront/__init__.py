"""Browsable, filterable product catalogue."""

__version__ = "0.1.0"
