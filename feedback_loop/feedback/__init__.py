"""
Feedback storage: rating records written by the report UI and read by the
fine-tune pipeline.
"""

from .schema import FeedbackRecord, FeedbackSubmission
from .store import SupabaseFeedbackStore

__all__ = [
    "FeedbackRecord",
    "FeedbackSubmission",
    "SupabaseFeedbackStore",
]
