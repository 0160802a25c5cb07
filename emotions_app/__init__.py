"""Emotions App mental-health support platform backend."""

__version__ = "0.1.0"
