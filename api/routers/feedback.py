"""
Feedback router - Record call feedback against a file.
"""

import logging

from fastapi import APIRouter, Depends, status

from api.dependencies import get_feedback_service
from api.schemas.feedback_schema import (
    FeedbackCreateRequest, FeedbackCreateResponse, FeedbackResponse
)
from services.feedback_service import FeedbackService

logger = logging.getLogger(__name__)

# Create router
router = APIRouter(prefix='/feedback', tags=['feedback'])


@router.post('/{file_id}', response_model=FeedbackCreateResponse, status_code=status.HTTP_201_CREATED)
def create_feedback(
    file_id: str,
    payload: FeedbackCreateRequest,
    service: FeedbackService = Depends(get_feedback_service)
):
    """
    Create a feedback entry for a file.

    **Body:**
    ```json
    {
        "startCallTime": "2025-01-20T10:00:00Z",
        "endCallTime": "2025-01-20T10:05:30Z",
        "feedbackMessage": "Interested, send pricing"
    }
    ```

    **Returns:**
    - 201 with the stored feedback, file name and formatted duration
    - 400 on missing fields, bad dates or end <= start
    - 404 if the file does not exist
    """
    feedback, file_record = service.create_feedback(
        file_id,
        payload.start_call_time,
        payload.end_call_time,
        payload.feedback_message
    )

    return FeedbackCreateResponse(
        feedback=FeedbackResponse.from_record(feedback, file_record)
    )
