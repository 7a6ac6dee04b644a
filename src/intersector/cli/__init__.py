"""Command-line interface for intersector.

This module provides the CLI using Typer with rich output for
user-friendly feedback and progress reporting.

Key features:
- Polynomial root finding
- Shape intersection from JSON descriptions
- Nearest point on a Bezier curve
- Parallel batch intersection with a progress bar
"""

from intersector.cli.app import cli, main

__all__ = ["cli", "main"]
