"""Task management API with pluggable storage backends."""

__version__ = "1.0.0"
