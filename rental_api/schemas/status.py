# This project was developed with assistance from AI tools.
"""Application status response schemas."""

from datetime import datetime

from pydantic import BaseModel


class StatusInfo(BaseModel):
    """Human-readable info about the current application status."""

    label: str
    description: str
    next_step: str


class ApplicationStatusResponse(BaseModel):
    """Aggregated status summary for an application."""

    application_id: int
    status: str
    status_info: StatusInfo
    allowed_transitions: list[str]
    open_requirement_count: int
    payment_status: str
    version: int
    expires_at: datetime | None = None
