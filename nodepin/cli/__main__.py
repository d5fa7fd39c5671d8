"""
Entry point for running the nodepin CLI as a module.

Usage: python -m nodepin.cli [command] [options]
"""

from .parser import main

if __name__ == "__main__":
    main()
