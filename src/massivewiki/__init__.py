"""Massive Wiki: a file-backed markdown wiki."""

__version__ = "0.1.0"
