"""
Resolve command implementation.

Prints the Node version the project requires and where it came from.
"""

import asyncio
import logging

from nodepin.cli.utils import create_context, print_error, resolve_project_root

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the resolve command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 when a version is configured)
    """
    project_root = resolve_project_root(args.project_root)
    context = create_context(args)

    config = asyncio.run(context.get_project_version_config(project_root))
    if config is None:
        print_error(f"No Node version configured in {project_root}")
        return 1

    print(f"{config.version} ({config.source.value})")
    return 0
