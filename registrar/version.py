"""
registrar.version — package version string.

Kept import-free so packaging and the subpackages can read it cheaply.
"""

# Bump on every tagged release (semver). Must match pyproject.toml.
__version__ = "0.3.0"

__all__ = ["__version__"]
