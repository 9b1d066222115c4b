"""Group availability polling service."""

__version__ = "1.0.0"
