"""
Call-related Pydantic schemas.
"""

from typing import List, Optional
from pydantic import ConfigDict, Field
from datetime import datetime

from api.schemas.common import APIModel


class CallStartRequest(APIModel):
    file_id: Optional[str] = Field(None, description="Related file ID")


class CallStartResponse(APIModel):
    message: str = "Call started"
    call_id: str = Field(..., description="New call ID")
    start_call_time: datetime


class CallEndRequest(APIModel):
    call_id: Optional[str] = Field(None, description="Call to end")
    feedback_message: Optional[str] = Field(None, description="Free text feedback")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "callId": "6a0d7f49-2c7e-4c43-9d9b-6a3f2b0c1d55",
                "feedbackMessage": "Customer asked for a callback next week"
            }
        }
    )


class CallEndResponse(APIModel):
    message: str = "Call ended"
    duration: int = Field(..., description="Call duration in seconds")
    end_call_time: datetime


class CallResponse(APIModel):
    """Stored call."""

    id: str
    file_id: Optional[str] = None
    start_call_time: datetime
    end_call_time: Optional[datetime] = None
    duration: int
    feedback_message: str
    created_at: datetime


class DailyCount(APIModel):
    day: str
    count: int


class WeeklyChartResponse(APIModel):
    """Calls longer than the minimum duration, bucketed per weekday."""

    total_calls: int = Field(..., description="Qualifying calls this week")
    change_percent: int = Field(..., description="Change versus last week, in percent")
    per_day: int = Field(..., description="Average calls per day (rounded)")
    daily_counts: List[DailyCount]
    week_start: datetime = Field(..., description="Local start of the current week")
    timezone: str = Field(..., description="Time zone used for bucketing")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "totalCalls": 12,
                "changePercent": 50,
                "perDay": 2,
                "dailyCounts": [
                    {"day": "Sun", "count": 0}, {"day": "Mon", "count": 4},
                    {"day": "Tue", "count": 8}, {"day": "Wed", "count": 0},
                    {"day": "Thu", "count": 0}, {"day": "Fri", "count": 0},
                    {"day": "Sat", "count": 0}
                ],
                "weekStart": "2025-10-12T00:00:00+05:30",
                "timezone": "Asia/Kolkata"
            }
        }
    )
