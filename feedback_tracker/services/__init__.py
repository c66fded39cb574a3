"""Business-logic services for the feedback tracker."""

from feedback_tracker.services.feedback_store import FeedbackStore

__all__ = ["FeedbackStore"]
