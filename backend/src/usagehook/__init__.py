"""Synthetic usage event generator and usage hook client."""

__version__ = "0.1.0"
