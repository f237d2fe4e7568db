"""Helpers shared by the gate: git, PowerShell, files, output, retry."""
