"""
Call Service - Call lifecycle and weekly usage reporting.

Ending a call is a single conditional UPDATE keyed on the call still
having no end time, so two concurrent end requests cannot both succeed.
"""

import logging
import math
from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Dict, List, Optional
from zoneinfo import ZoneInfo

from sqlalchemy.orm import Session

from backend.models.call import CallRecord
from services.exceptions import ValidationError
from services.file_service import validate_record_id

logger = logging.getLogger(__name__)

DEFAULT_REPORT_TIMEZONE = 'Asia/Kolkata'
DEFAULT_MIN_DURATION_SECONDS = 60
DAY_NAMES = ['Sun', 'Mon', 'Tue', 'Wed', 'Thu', 'Fri', 'Sat']


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves towards +infinity."""
    return int(math.floor(value + 0.5))


def change_percent(current: int, previous: int) -> float:
    """Percent change of ``current`` versus ``previous``."""
    if previous == 0:
        return 100.0 if current > 0 else 0.0
    return (current - previous) / previous * 100


def day_index(local_dt: datetime) -> int:
    """Day-of-week index with Sunday as 0."""
    return (local_dt.weekday() + 1) % 7


class CallService:
    """Framework-agnostic call tracking service."""

    def __init__(
        self,
        db_session: Session,
        report_timezone: str = DEFAULT_REPORT_TIMEZONE,
        min_duration_seconds: int = DEFAULT_MIN_DURATION_SECONDS
    ):
        """
        Initialize call service.

        Args:
            db_session: SQLAlchemy database session
            report_timezone: IANA zone used for week boundaries and day buckets
            min_duration_seconds: Calls must last longer than this to be charted
        """
        self.session = db_session
        self.tz = ZoneInfo(report_timezone)
        self.min_duration_seconds = min_duration_seconds

    def start_call(self, file_id: Optional[Any] = None) -> CallRecord:
        """Create a call starting now. ``file_id`` is optional."""
        if file_id in (None, ''):
            file_id = None
        else:
            file_id = validate_record_id(file_id)

        now = datetime.utcnow()
        call = CallRecord(
            file_id=file_id,
            start_call_time=now,
            created_at=now
        )
        self.session.add(call)
        self.session.commit()

        logger.info(f"Call {call.id} started (file: {file_id})")
        return call

    def end_call(self, call_id: Any, feedback_message: Optional[str] = None) -> CallRecord:
        """
        End a call and record its duration and feedback.

        Raises:
            ValidationError: If the call does not exist or has already ended
        """
        if call_id in (None, ''):
            raise ValidationError("Call not found or already ended")
        call_id = validate_record_id(call_id, label='call')

        call = self.session.get(CallRecord, call_id)
        if call is None or call.is_ended():
            raise ValidationError("Call not found or already ended", detail={'call_id': call_id})

        end_time = datetime.utcnow()
        elapsed = (end_time - call.start_call_time).total_seconds()
        duration = max(0, int(math.floor(elapsed)))

        updated = self.session.query(CallRecord)\
            .filter(CallRecord.id == call_id, CallRecord.end_call_time.is_(None))\
            .update(
                {
                    CallRecord.end_call_time: end_time,
                    CallRecord.duration: duration,
                    CallRecord.feedback_message: feedback_message or '',
                },
                synchronize_session=False
            )

        if updated == 0:
            self.session.rollback()
            logger.warning(f"Call {call_id} was ended concurrently")
            raise ValidationError("Call not found or already ended", detail={'call_id': call_id})

        self.session.commit()
        self.session.refresh(call)

        logger.info(f"Call {call_id} ended after {duration}s")
        return call

    def list_calls(self) -> List[CallRecord]:
        """All calls, newest first."""
        return self.session.query(CallRecord)\
            .order_by(CallRecord.created_at.desc())\
            .all()

    def week_bounds(self, now: Optional[datetime] = None) -> Dict[str, datetime]:
        """
        Compute this and last week's boundaries.

        Weeks start on Sunday at local midnight in the report time zone.
        Returned values are naive UTC, matching stored timestamps, plus the
        aware local start of this week.
        """
        if now is None:
            now = datetime.now(timezone.utc)
        elif now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)

        local_now = now.astimezone(self.tz)
        week_start_date: date = local_now.date() - timedelta(days=day_index(local_now))

        this_week_local = datetime.combine(week_start_date, time.min, tzinfo=self.tz)
        last_week_local = datetime.combine(week_start_date - timedelta(days=7), time.min, tzinfo=self.tz)
        next_week_local = datetime.combine(week_start_date + timedelta(days=7), time.min, tzinfo=self.tz)

        def to_naive_utc(dt: datetime) -> datetime:
            return dt.astimezone(timezone.utc).replace(tzinfo=None)

        return {
            'week_start_local': this_week_local,
            'this_week_start': to_naive_utc(this_week_local),
            'last_week_start': to_naive_utc(last_week_local),
            'next_week_start': to_naive_utc(next_week_local),
        }

    def _qualifying_calls(self, start: datetime, end: datetime):
        return self.session.query(CallRecord.created_at).filter(
            CallRecord.duration > self.min_duration_seconds,
            CallRecord.created_at >= start,
            CallRecord.created_at < end
        )

    def weekly_chart(self, now: Optional[datetime] = None) -> Dict[str, Any]:
        """
        Count this week's calls longer than the minimum duration per day.

        Returns:
            {
                'total_calls': int,
                'change_percent': int,   # versus last week
                'per_day': int,          # rounded average over 7 days
                'daily_counts': [{'day': 'Sun', 'count': int}, ...],
                'week_start': datetime,
                'timezone': str
            }
        """
        bounds = self.week_bounds(now)

        this_week = [
            created_at for (created_at,) in
            self._qualifying_calls(bounds['this_week_start'], bounds['next_week_start']).all()
        ]
        last_week_count = self._qualifying_calls(
            bounds['last_week_start'], bounds['this_week_start']
        ).count()

        counts = [0] * 7
        for created_at in this_week:
            local = created_at.replace(tzinfo=timezone.utc).astimezone(self.tz)
            counts[day_index(local)] += 1

        total = len(this_week)

        logger.debug(f"Weekly chart: {total} calls this week, {last_week_count} last week")

        return {
            'total_calls': total,
            'change_percent': round_half_up(change_percent(total, last_week_count)),
            'per_day': round_half_up(total / 7),
            'daily_counts': [
                {'day': name, 'count': counts[idx]} for idx, name in enumerate(DAY_NAMES)
            ],
            'week_start': bounds['week_start_local'],
            'timezone': str(self.tz),
        }
