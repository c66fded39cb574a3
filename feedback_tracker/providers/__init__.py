"""Concrete adapters for the interfaces in ``feedback_tracker.interfaces``."""
