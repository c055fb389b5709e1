"""
Exception handlers for the ContentMagic server.

This package maps application, validation, HTTP and database errors onto the
JSON error envelope and provides a setup function to register them with the
FastAPI application.
"""

from .global_handler import error_response, setup_exception_handlers

__all__ = ["error_response", "setup_exception_handlers"]
