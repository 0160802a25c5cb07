"""
Exception handlers for the Emotions App server.

This package contains the handler for domain errors raised by the service
layer, the catch-all handler for unexpected failures, and a setup function
registering both with the FastAPI application.
"""

from .global_handler import setup_exception_handlers

__all__ = ["setup_exception_handlers"]
