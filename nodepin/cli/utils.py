"""
Shared utilities for CLI commands.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

from nodepin.context import NodePinContext

logger = logging.getLogger(__name__)


def print_error(message: str, details: Optional[str] = None):
    """
    Print error message to stderr in consistent format.

    Args:
        message: Main error message
        details: Optional additional details
    """
    print(f"ERROR: {message}", file=sys.stderr)
    if details:
        print(f"  {details}", file=sys.stderr)


def print_warning(message: str):
    """Print warning message to stderr."""
    print(f"WARNING: {message}", file=sys.stderr)


def resolve_project_root(path: Optional[Path] = None) -> Path:
    """
    Resolve project root directory.

    Args:
        path: Optional path (defaults to current directory)

    Returns:
        Resolved absolute path
    """
    if path is None:
        path = Path.cwd()
    return path.resolve()


def create_context(args) -> NodePinContext:
    """
    Build the context for a command from the global options.

    Args:
        args: Parsed arguments with project_root and config

    Returns:
        NodePinContext with settings loaded for the project

    Raises:
        SettingsError: If the settings file is missing or invalid
    """
    project_root = resolve_project_root(getattr(args, "project_root", None))
    config = getattr(args, "config", None)
    logger.debug(f"Project root: {project_root}, settings file: {config}")
    return NodePinContext.from_project(project_root, config)


__all__ = [
    "create_context",
    "print_error",
    "print_warning",
    "resolve_project_root",
]
