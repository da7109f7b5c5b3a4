"""
Call tracking model.

A call is started once and ended at most once; the duration is written
together with the end time.
"""

from datetime import datetime
from sqlalchemy import Column, Integer, String, Text, TIMESTAMP, Index

from backend.models.schema import Base, new_id


class CallRecord(Base):
    """Represents a single call session."""

    __tablename__ = 'calls'
    __table_args__ = (
        Index('idx_calls_created_at', 'created_at'),
        Index('idx_calls_file_id', 'file_id'),
        {'comment': 'Call sessions with duration and feedback'}
    )

    id = Column(
        String(36),
        primary_key=True,
        default=new_id,
        nullable=False
    )
    file_id = Column(
        String(36),
        nullable=True,
        comment='Related file (non-owning reference)'
    )
    start_call_time = Column(
        TIMESTAMP,
        default=datetime.utcnow,
        nullable=False
    )
    end_call_time = Column(
        TIMESTAMP,
        nullable=True,
        comment='Set once when the call ends'
    )
    duration = Column(
        Integer,
        default=0,
        nullable=False,
        comment='Whole seconds between start and end'
    )
    feedback_message = Column(
        Text,
        default='',
        nullable=False
    )
    created_at = Column(
        TIMESTAMP,
        default=datetime.utcnow,
        nullable=False
    )

    def __repr__(self):
        return f"<CallRecord(id='{self.id}', duration={self.duration})>"

    def is_ended(self) -> bool:
        """Check if the call already has an end time."""
        return self.end_call_time is not None
