"""
Feedback model linked to uploaded files.
"""

from datetime import datetime
from sqlalchemy import Column, Integer, String, Text, TIMESTAMP, Index

from backend.models.schema import Base, new_id


class FeedbackRecord(Base):
    """Immutable feedback entry for a call made about a file."""

    __tablename__ = 'feedback'
    __table_args__ = (
        Index('idx_feedback_file_id', 'file_id'),
        {'comment': 'Call feedback entries linked to files'}
    )

    id = Column(
        String(36),
        primary_key=True,
        default=new_id,
        nullable=False
    )
    file_id = Column(
        String(36),
        nullable=False,
        comment='Related file (non-owning reference)'
    )
    start_call_time = Column(TIMESTAMP, nullable=False)
    end_call_time = Column(TIMESTAMP, nullable=False)
    duration = Column(
        Integer,
        nullable=False,
        comment='Whole seconds between start and end'
    )
    feedback_message = Column(Text, nullable=False)
    created_at = Column(
        TIMESTAMP,
        default=datetime.utcnow,
        nullable=False
    )

    def __repr__(self):
        return f"<FeedbackRecord(id='{self.id}', file_id='{self.file_id}')>"

    @property
    def formatted_duration(self) -> str:
        """Duration rendered as 'Xm Ys'."""
        if not self.duration:
            return '0m 0s'
        minutes, seconds = divmod(self.duration, 60)
        return f"{minutes}m {seconds}s"
