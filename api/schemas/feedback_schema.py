"""
Feedback-related Pydantic schemas.
"""

from typing import Any, Optional
from pydantic import ConfigDict, Field
from datetime import datetime

from api.schemas.common import APIModel


class FeedbackCreateRequest(APIModel):
    """Request body for a feedback entry; validated by the service."""

    start_call_time: Optional[Any] = Field(None, description="ISO 8601 start time")
    end_call_time: Optional[Any] = Field(None, description="ISO 8601 end time")
    feedback_message: Optional[Any] = Field(None, description="Feedback text")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "startCallTime": "2025-01-20T10:00:00Z",
                "endCallTime": "2025-01-20T10:05:30Z",
                "feedbackMessage": "Interested, send pricing"
            }
        }
    )


class FeedbackResponse(APIModel):
    id: str
    file_id: str
    file_name: str
    start_call_time: datetime
    end_call_time: datetime
    duration: int
    formatted_duration: str
    feedback_message: str
    created_at: datetime

    @classmethod
    def from_record(cls, feedback, file_record):
        return cls(
            id=feedback.id,
            file_id=feedback.file_id,
            file_name=file_record.original_name,
            start_call_time=feedback.start_call_time,
            end_call_time=feedback.end_call_time,
            duration=feedback.duration,
            formatted_duration=feedback.formatted_duration,
            feedback_message=feedback.feedback_message,
            created_at=feedback.created_at
        )


class FeedbackCreateResponse(APIModel):
    success: bool = True
    message: str = "Feedback created successfully"
    feedback: FeedbackResponse
