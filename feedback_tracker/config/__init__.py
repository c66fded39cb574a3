"""Configuration module - exports Settings and load_config."""

from feedback_tracker.config.loader import load_config
from feedback_tracker.config.settings import Settings

__all__ = ["Settings", "load_config"]
