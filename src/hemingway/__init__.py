"""Hemingway: write chosen copy back into the source file it came from."""

__version__ = "0.1.0"
