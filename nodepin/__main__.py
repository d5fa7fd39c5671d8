"""
Entry point for running nodepin as a module.

Usage: python -m nodepin [command] [options]
"""

from nodepin.cli.parser import main

if __name__ == "__main__":
    main()
