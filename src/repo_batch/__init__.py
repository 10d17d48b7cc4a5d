"""Run one operation across sibling repositories with prompt replay."""

__version__ = "0.1.0"

__all__ = ["__version__"]
