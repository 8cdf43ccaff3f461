"""Nursery tree-tag lifecycle client."""

__version__ = "0.1.0"
