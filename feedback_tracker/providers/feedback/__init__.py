"""Feedback persistence providers (whole-collection load/save).

- JsonFileFeedbackRepository stores the collection in data/feedback.json.
- SQLiteFeedbackRepository stores the same JSON document in data/feedback.db.
- MemoryFeedbackRepository keeps it in process memory.
"""
