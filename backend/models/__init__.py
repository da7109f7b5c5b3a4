"""Models package for the callsheet service."""
from backend.models.schema import Base, FileRecord
from backend.models.call import CallRecord
from backend.models.feedback import FeedbackRecord

__all__ = ['Base', 'FileRecord', 'CallRecord', 'FeedbackRecord']
