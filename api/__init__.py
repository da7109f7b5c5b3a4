"""
FastAPI application for the callsheet service.

This package contains the REST API for uploading lead spreadsheets,
tracking calls and recording call feedback.
"""

__version__ = "1.0.0"
