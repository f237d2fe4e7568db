"""Formatting gate pipeline: configuration, file selection, check loop."""
