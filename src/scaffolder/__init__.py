"""Project scaffolding bootstrapper."""

__version__ = "0.3.0"
