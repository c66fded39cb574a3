"""Pydantic domain models for the feedback tracker."""

from feedback_tracker.models.feedback import FeedbackRecord, StatsSummary, VoteAction

__all__ = ["FeedbackRecord", "StatsSummary", "VoteAction"]
