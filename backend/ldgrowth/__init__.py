"""LD Growth automatic evaluation scheduler."""

__version__ = "1.0.0"
