"""Encore - song catalog and request backend."""
__version__ = "0.4.0"
