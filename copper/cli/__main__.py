"""
Entry point for running the CLI as a module.

Usage: python -m copper.cli
"""

from .parser import main

if __name__ == "__main__":
    main()
