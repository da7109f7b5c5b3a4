"""
Service layer for the callsheet service.

This package contains framework-agnostic business logic (spreadsheet
ingestion, file storage, calls and feedback) used by both the API and
the admin CLI.
"""

__version__ = "1.0.0"
