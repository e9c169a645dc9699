# This project was developed with assistance from AI tools.
"""Client-side helpers for the intake form."""

from .autosave import AutosaveCoordinator, AutosaveError, ResumedDraft, SaveStatus

__all__ = ["AutosaveCoordinator", "AutosaveError", "ResumedDraft", "SaveStatus"]
