"""
Base Models for API Request/Response Validation

Request bodies reject unknown fields, so a client cannot set server-owned
values such as creation_date or the session counters. Response models read
straight from ORM rows.

Usage:
    class StudyTopicCreate(StrictRequest):
        name: str
        subject_name: str

    class StudyTopicResponse(StrictResponse):
        id: int
        name: str

    StudyTopicResponse.model_validate(orm_topic)
"""

from pydantic import BaseModel, ConfigDict


class StrictRequest(BaseModel):
    """
    Base model for API request bodies.

    extra="forbid" turns unknown fields into a 422; strings are stripped.
    """

    model_config = ConfigDict(
        extra="forbid",
        validate_default=True,
        str_strip_whitespace=True,
        from_attributes=True,
    )


class StrictResponse(BaseModel):
    """Base model for API responses, built from ORM rows or joined result rows."""

    model_config = ConfigDict(
        extra="ignore",
        validate_default=True,
        from_attributes=True,
    )


class SuccessResponse(StrictResponse):
    """Acknowledgement for writes without a resource to return."""

    success: bool = True
    message: str
