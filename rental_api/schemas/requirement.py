# This project was developed with assistance from AI tools.
"""Schemas for conditional-approval requirement endpoints."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from rental_db.enums import RequirementType


class RequirementIn(BaseModel):
    """One checklist item supplied with a conditional approval."""

    type: RequirementType = RequirementType.DOCUMENT
    description: str = Field(min_length=1)
    required: bool = True


class RequirementItem(BaseModel):
    """Single requirement in an application response."""

    model_config = ConfigDict(from_attributes=True)

    id: int | None = None
    position: int = 0
    type: RequirementType
    description: str
    required: bool = True
    satisfied: bool = False
    satisfied_at: datetime | None = None
    satisfied_by: str | None = None
    notes: str | None = None
    file_id: str | None = None


class SatisfyRequirementRequest(BaseModel):
    """Request body for marking a requirement satisfied."""

    notes: str | None = None
    file_id: str | None = Field(
        default=None,
        description="Opaque Document Storage reference for the supporting upload.",
    )
