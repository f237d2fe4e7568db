"""Formatting gate for PowerShell repositories."""

__version__ = "1.0.0"
