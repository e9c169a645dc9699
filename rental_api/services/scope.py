# This project was developed with assistance from AI tools.
"""Shared data scope filtering for service queries.

Centralizes the DataScope -> SQL WHERE logic so that every application
query applies the same rules: renters see their own applications, landlords
see applications for properties they own, property managers and admins see
everything.
"""

from rental_db import Application

from ..schemas.auth import DataScope, UserContext


def apply_data_scope(stmt, scope: DataScope, user: UserContext):
    """Apply data scope filtering to a SQLAlchemy query on Application.

    Args:
        stmt: A SQLAlchemy select statement.
        scope: The caller's DataScope.
        user: The caller's UserContext.

    Returns:
        The filtered statement.
    """
    if scope.own_data_only:
        return stmt.where(Application.applicant_id == (scope.user_id or user.user_id))
    if scope.property_owner_id:
        return stmt.where(Application.property_owner_id == scope.property_owner_id)
    if scope.full_pipeline:
        return stmt
    # Unknown scope -- see nothing
    return stmt.where(Application.id.is_(None))
