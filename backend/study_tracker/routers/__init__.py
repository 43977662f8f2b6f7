"""API routers."""

from study_tracker.routers import health, study_sessions, study_topics, subjects

__all__ = ["health", "study_sessions", "study_topics", "subjects"]
