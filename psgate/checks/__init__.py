"""Per-file style checks."""

from psgate.checks.registry import create_checkers


__all__ = ["create_checkers"]
