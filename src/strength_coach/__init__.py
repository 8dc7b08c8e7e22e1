"""Offline strength-training coach: progression, stall detection and exercise matching."""

__version__ = "0.1.0"
