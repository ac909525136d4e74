"""
Entry point for running copper as a module.

Usage: python -m copper
"""

from copper.cli.parser import main

if __name__ == "__main__":
    main()
