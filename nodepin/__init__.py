"""
nodepin - Node.js version resolution for projects.

Detects installed Node version managers (nvm, n), resolves the Node version a
project requires from its pin files and package.json, and checks whether the
active Node version satisfies it. Expensive results are cached in memory with
per-input lifetimes.
"""

from .context import NodePinContext, ProjectVersionStatus

__version__ = "0.1.0"

__all__ = ["NodePinContext", "ProjectVersionStatus", "__version__"]
