# This project was developed with assistance from AI tools.
"""Draft (autosave) request schemas and intake step definitions."""

from pydantic import BaseModel, Field


class DraftUpsertRequest(BaseModel):
    """Request body for POST /applications/drafts."""

    property_id: str = Field(min_length=1)
    step: int
    fields: dict = {}
    revision: int | None = Field(
        default=None,
        description="Client save counter; writes at or below the stored revision are ignored.",
    )


class DraftPatchRequest(BaseModel):
    """Request body for PATCH /applications/{id}/draft."""

    property_id: str | None = None
    step: int
    fields: dict = {}
    revision: int | None = None


class IntakeStepItem(BaseModel):
    """One step of the intake form."""

    number: int
    label: str
    fields: list[str]
    required: list[str]


class IntakeStepsResponse(BaseModel):
    """Response for GET /applications/intake-steps."""

    data: list[IntakeStepItem]
    step_count: int
