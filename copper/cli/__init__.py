"""
copper command-line interface.
"""

from . import utils
from .parser import CLI, main

__all__ = ["CLI", "main", "utils"]
