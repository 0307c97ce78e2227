"""Command-line interface for fraunhofer."""

from __future__ import annotations

from fraunhofer.cli.entry_points import main
from fraunhofer.cli.parser import create_parser


__all__ = ["main", "create_parser"]
