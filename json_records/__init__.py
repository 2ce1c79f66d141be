"""Flat-file JSON records service."""

__version__ = "0.1.0"
