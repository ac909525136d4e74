"""
copper - a version manager for developer runtimes.

Downloads, verifies and switches between versions of node, zig and go,
exposing the active version to the shell through ``PATH``.
"""

EXE_NAME = "copper"

# Get version from package
try:
    from importlib.metadata import version

    __version__ = version("copper")
except Exception:
    __version__ = "0.1.0"

__all__ = ["EXE_NAME", "__version__"]
