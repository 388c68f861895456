"""Fuzzy text selector for the terminal, with ranked matching and an interactive chooser."""

__version__ = "1.1.0"
__all__ = ["__version__"]