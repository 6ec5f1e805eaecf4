"""Storage layer and JSON action endpoints for a blockchain explorer index."""

__version__ = "0.1.0"