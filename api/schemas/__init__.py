"""
Pydantic schemas for request/response validation.

This package contains all Pydantic models used for API request validation
and response serialization.
"""

from api.schemas.common import APIModel, ErrorResponse, HealthCheckResponse
from api.schemas.file_schema import (
    FileSummary, FileListItem, FileDetail, FileUploadResponse, FileListResponse,
    FileDetailResponse, FileRowsResponse, FileDeleteResponse
)
from api.schemas.call_schema import (
    CallStartRequest, CallStartResponse, CallEndRequest, CallEndResponse,
    CallResponse, WeeklyChartResponse
)
from api.schemas.feedback_schema import (
    FeedbackCreateRequest, FeedbackResponse, FeedbackCreateResponse
)

__all__ = [
    # Common
    'APIModel',
    'ErrorResponse',
    'HealthCheckResponse',

    # File
    'FileSummary',
    'FileListItem',
    'FileDetail',
    'FileUploadResponse',
    'FileListResponse',
    'FileDetailResponse',
    'FileRowsResponse',
    'FileDeleteResponse',

    # Call
    'CallStartRequest',
    'CallStartResponse',
    'CallEndRequest',
    'CallEndResponse',
    'CallResponse',
    'WeeklyChartResponse',

    # Feedback
    'FeedbackCreateRequest',
    'FeedbackResponse',
    'FeedbackCreateResponse',
]
