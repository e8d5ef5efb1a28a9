"""Livestock web client: components, facades, stores and data access."""

__version__ = "1.0.0"
