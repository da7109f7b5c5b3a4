"""
Calls router - Call start/end lifecycle and weekly reporting.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, status

from api.dependencies import get_call_service
from api.schemas.call_schema import (
    CallEndRequest, CallEndResponse, CallResponse, CallStartRequest,
    CallStartResponse, WeeklyChartResponse
)
from services.call_service import CallService

logger = logging.getLogger(__name__)

# Create router
router = APIRouter(prefix='/calls', tags=['calls'])


@router.post('/start', response_model=CallStartResponse, status_code=status.HTTP_201_CREATED)
def start_call(
    payload: Optional[CallStartRequest] = None,
    service: CallService = Depends(get_call_service)
):
    """Start a call, optionally linked to a file."""
    call = service.start_call(payload.file_id if payload else None)

    return CallStartResponse(
        call_id=call.id,
        start_call_time=call.start_call_time
    )


@router.post('/end', response_model=CallEndResponse)
def end_call(
    payload: CallEndRequest,
    service: CallService = Depends(get_call_service)
):
    """
    End a call and store its feedback.

    Returns 400 if the call does not exist or was already ended.
    """
    call = service.end_call(payload.call_id, payload.feedback_message)

    return CallEndResponse(
        duration=call.duration,
        end_call_time=call.end_call_time
    )


@router.get('/getAll', response_model=List[CallResponse])
def list_calls(service: CallService = Depends(get_call_service)):
    """All calls, newest first."""
    return [CallResponse.model_validate(call) for call in service.list_calls()]


@router.get('/getChart', response_model=WeeklyChartResponse)
def weekly_chart(service: CallService = Depends(get_call_service)):
    """
    Weekly usage chart.

    Counts this week's calls longer than a minute per weekday (Sun..Sat)
    in the report time zone and compares the total with last week.
    """
    return WeeklyChartResponse(**service.weekly_chart())
