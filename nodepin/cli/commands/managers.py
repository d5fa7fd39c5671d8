"""
Managers command implementation.

Lists the detected Node version managers and the one that would be used.
"""

import asyncio
import logging

from nodepin.cli.utils import create_context, print_error

logger = logging.getLogger(__name__)


async def _detect(context):
    managers = await context.detect_all_managers()
    preferred = await context.get_preferred_manager()
    return managers, preferred


def run(args) -> int:
    """
    Run the managers command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 when a manager is available)
    """
    context = create_context(args)
    managers, preferred = asyncio.run(_detect(context))

    for manager in managers:
        if manager.available:
            details = " ".join(p for p in (manager.version, manager.path) if p)
            print(f"{manager.type.value:<6} available  {details}".rstrip())
        else:
            print(f"{manager.type.value:<6} not found  ({manager.error})")

    if preferred is None:
        print_error("No Node version manager found", "Install nvm or n")
        return 1

    print(f"Preferred: {preferred.type.value} {preferred.version or ''}".rstrip())
    return 0
