"""Feedback tracker: collect, browse, vote on and delete feedback messages."""

__version__ = "1.0.0"
