"""Create release branches across a core repository and its dependents."""

__version__ = "0.3.0"
