"""
Feedback Service - Validate and store call feedback for a file.
"""

import logging
import math
from datetime import datetime, timezone
from typing import Any, Optional, Tuple

from sqlalchemy.orm import Session

from backend.models.feedback import FeedbackRecord
from backend.models.schema import FileRecord
from services.exceptions import NotFoundError, ValidationError
from services.file_service import validate_record_id

logger = logging.getLogger(__name__)


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Parse an ISO 8601 string or epoch milliseconds into naive UTC.

    Returns None when the value cannot be parsed.
    """
    if isinstance(value, bool):
        return None

    try:
        if isinstance(value, (int, float)):
            parsed = datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        elif isinstance(value, str):
            text = value.strip()
            if text.endswith(('Z', 'z')):
                text = text[:-1] + '+00:00'
            parsed = datetime.fromisoformat(text)
        else:
            return None
    except (ValueError, OverflowError, OSError):
        return None

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


class FeedbackService:
    """Framework-agnostic feedback service."""

    def __init__(self, db_session: Session):
        self.session = db_session

    def create_feedback(self, file_id: Any, start_call_time: Any, end_call_time: Any,
                        feedback_message: Any) -> Tuple[FeedbackRecord, FileRecord]:
        """
        Validate and persist a feedback entry.

        Returns:
            (feedback, file) so callers can show the file's display name

        Raises:
            ValidationError: On missing fields, unparseable dates or an end
                             time not after the start time
            NotFoundError: If the file does not exist (or is soft deleted)
        """
        message = feedback_message.strip() if isinstance(feedback_message, str) else feedback_message
        if start_call_time in (None, '') or end_call_time in (None, '') or not message:
            raise ValidationError(
                "All fields are required: startCallTime, endCallTime, feedbackMessage"
            )
        if not isinstance(message, str):
            raise ValidationError("feedbackMessage must be a string")

        file_id = validate_record_id(file_id)
        file_record = self.session.query(FileRecord).filter(
            FileRecord.id == file_id,
            FileRecord.is_deleted.is_(False)
        ).first()
        if file_record is None:
            raise NotFoundError("File not found", detail={'file_id': file_id})

        start = parse_timestamp(start_call_time)
        end = parse_timestamp(end_call_time)
        if start is None or end is None:
            raise ValidationError(
                "Invalid date format. Use ISO 8601 format (e.g., 2025-01-20T10:00:00Z)"
            )

        if end <= start:
            raise ValidationError("End call time must be after start call time")

        duration = int(math.floor((end - start).total_seconds()))

        feedback = FeedbackRecord(
            file_id=file_id,
            start_call_time=start,
            end_call_time=end,
            duration=duration,
            feedback_message=message,
            created_at=datetime.utcnow()
        )
        self.session.add(feedback)
        self.session.commit()

        logger.info(f"Feedback {feedback.id} created for file {file_id} ({duration}s)")
        return feedback, file_record
