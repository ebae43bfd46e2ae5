"""
Batch Document Conversion Service package.

This module provides a FastAPI application that converts uploaded PDF, DOCX
and TXT documents into TXT or DOCX and serves the results through short-lived
download links.
"""

__all__ = ["__version__"]

__version__ = "0.1.0"
