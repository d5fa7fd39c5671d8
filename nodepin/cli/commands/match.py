"""
Match command implementation.

Checks a version against a requirement without touching the project.
"""

import logging

from nodepin.cli.utils import create_context

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the match command.

    Args:
        args: Parsed command-line arguments with current and required

    Returns:
        Exit code (0 on match, 1 otherwise)
    """
    context = create_context(args)
    result = context.match_version(args.current, args.required)

    target = f" (target {result.target_version})" if result.target_version else ""
    if result.matches:
        print(f"{args.current} satisfies {args.required}{target}")
        return 0

    print(f"{args.current} does not satisfy {args.required}{target}")
    return 1
