"""LMS calendar raw event retrieval."""

__version__ = "0.1.0"
