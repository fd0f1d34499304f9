"""Spaced repetition vocabulary reviewer."""

__version__ = "0.1.0"
