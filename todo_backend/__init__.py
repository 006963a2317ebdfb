"""REST backend for the to-do list demo."""

__version__ = "1.0.0"
