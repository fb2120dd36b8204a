"""Halo Infinite UGC stats collector."""

__version__ = "0.1.0"
