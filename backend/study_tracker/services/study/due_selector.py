"""
Due-Topic Selector

Decides which study topics are due for review on a given day.

Review schedule (days since the topic was created):
    0, 1, 3, 7, 21, 30, 45, 60, then every 60 days (120, 180, ...)

The schedule is fixed and global; there is no per-topic ease or interval
state. Dates are ISO-8601 calendar days, compared in UTC.

Usage:
    from study_tracker.services.study.due_selector import is_due, select_due_topics

    is_due(date(2024, 1, 1), date(2024, 1, 22))  # True (21 days)
    due = select_due_topics(topics, today=utc_today())
"""

import logging
from datetime import date, datetime, timezone
from typing import Iterable

from study_tracker.middleware.error_handling import DateParseError
from study_tracker.models.study import StudyTopicResponse

logger = logging.getLogger(__name__)

REVIEW_MILESTONE_DAYS: frozenset[int] = frozenset({0, 1, 3, 7, 21, 30, 45, 60})
STEADY_STATE_INTERVAL_DAYS: int = 60

ISO_DATE_FORMAT = "%Y-%m-%d"


def utc_today() -> date:
    """Current calendar day in UTC."""
    return datetime.now(timezone.utc).date()


def parse_iso_date(raw: str) -> date:
    """
    Parse a stored YYYY-MM-DD date.

    Raises:
        DateParseError: If the value is not a valid ISO calendar date
    """
    try:
        return datetime.strptime(raw, ISO_DATE_FORMAT).date()
    except (TypeError, ValueError) as e:
        raise DateParseError(
            f"Invalid date {raw!r}: {e}", details={"value": raw}
        ) from e


def days_since(raw: str, today: date) -> int:
    """Whole days from the stored date `raw` to `today`."""
    return (today - parse_iso_date(raw)).days


def is_due_after(days: int) -> bool:
    """Whether a topic `days` old is on the review schedule."""
    if days < 0:
        return False
    return days in REVIEW_MILESTONE_DAYS or days % STEADY_STATE_INTERVAL_DAYS == 0


def is_due(creation_date: date, today: date) -> bool:
    """Whether a topic created on `creation_date` is due on `today`."""
    return is_due_after((today - creation_date).days)


def select_due_topics(
    topics: Iterable[StudyTopicResponse], today: date
) -> list[StudyTopicResponse]:
    """
    Filter topics down to those due on `today`.

    A topic whose creation date cannot be parsed is skipped with a warning;
    the remaining topics are still evaluated.
    """
    due = []
    for topic in topics:
        try:
            created = parse_iso_date(topic.creation_date)
        except DateParseError as e:
            logger.warning(
                f"Skipping topic {topic.id} with unparseable creation date: {e.message}",
                extra={
                    "study_topic_id": topic.id,
                    "creation_date": topic.creation_date,
                },
            )
            continue

        if is_due(created, today):
            due.append(topic)

    return due
