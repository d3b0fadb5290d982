"""Cardshelf API - personal collection tracking service."""

__version__ = "0.4.0"
