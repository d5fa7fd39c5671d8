"""
Status command implementation.

Compares the active Node version with the project's requirement.
"""

import asyncio
import logging

from nodepin.cli.utils import create_context, print_warning, resolve_project_root

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the status command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (1 when the active version needs to be switched, else 0)
    """
    project_root = resolve_project_root(args.project_root)
    context = create_context(args)

    status = asyncio.run(context.check_project(project_root))

    if not status.has_config:
        print(f"No Node version configured in {project_root}")
        return 0

    print(f"Required: {status.required_version} ({status.source.value})")

    if status.current_version is None:
        print_warning("Could not determine the active Node version")
        return 0

    print(f"Current:  {status.current_version}")

    if status.needs_switch:
        target = status.target_version or status.required_version
        print(f"Switch needed: use Node {target}")
        return 1

    print("OK: current version satisfies the project")
    return 0
