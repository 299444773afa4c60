"""Browser-driven end-to-end tests for the Kong Manager admin UI."""

__version__ = "1.0.0"
