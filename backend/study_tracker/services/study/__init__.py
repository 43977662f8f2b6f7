"""
Study Scheduling Services

Modules:
- due_selector: Fixed spaced repetition schedule and due-topic filtering
- repository: Statement-level storage access
- materializer: Lock-guarded, idempotent creation of today's sessions
- completer: Session completion
- study_service: Facade used by the API and the scheduler

Usage:
    from study_tracker.services.study import StudyRepository, StudyService
"""

from study_tracker.services.study.completer import SessionCompleter
from study_tracker.services.study.due_selector import (
    REVIEW_MILESTONE_DAYS,
    STEADY_STATE_INTERVAL_DAYS,
    days_since,
    is_due,
    select_due_topics,
    utc_today,
)
from study_tracker.services.study.materializer import (
    SessionMaterializer,
    get_materialization_lock,
)
from study_tracker.services.study.repository import StudyRepository
from study_tracker.services.study.study_service import StudyService

__all__ = [
    # Schedule
    "REVIEW_MILESTONE_DAYS",
    "STEADY_STATE_INTERVAL_DAYS",
    "days_since",
    "is_due",
    "select_due_topics",
    "utc_today",
    # Services
    "StudyRepository",
    "SessionMaterializer",
    "get_materialization_lock",
    "SessionCompleter",
    "StudyService",
]
