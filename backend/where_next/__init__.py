"""Where Next suggestion backend."""

__version__ = "0.1.0"
