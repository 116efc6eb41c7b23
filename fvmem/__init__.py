"""Simulated block-based memory pool with allocation headers, reference-counted pointers and a benchmark command."""

__version__ = "0.1.0"
__all__ = ["header", "block", "pool", "ptr", "cli"]