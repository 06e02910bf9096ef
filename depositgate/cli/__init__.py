"""Depositgate CLI — Typer-based command-line interface.

Provides the ``depositgate`` command with subcommands for validating a
deposit from local files, serving the HTTP API, and listing supported
checksum algorithms.

All output uses Rich for formatted terminal display.
"""
