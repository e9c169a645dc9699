# This project was developed with assistance from AI tools.
"""Pure auth utility functions with no FastAPI or HTTP dependencies.

These are used by both the middleware layer (HTTP request auth) and the
service layer (actor resolution for lifecycle transitions).  Keeping them
separate from ``middleware/auth.py`` avoids pulling FastAPI/Starlette
imports into code that runs outside the request lifecycle, such as the
expiry sweep.
"""

from rental_db.enums import Actor, UserRole

from ..schemas.auth import DataScope, UserContext

SYSTEM_USER = UserContext(
    user_id="system",
    role=UserRole.ADMIN,
    email="",
    name="System",
    data_scope=DataScope(full_pipeline=True, pii_mask=False),
)


def build_data_scope(role: UserRole, user_id: str) -> DataScope:
    """Build data scope rules based on the user's role."""
    if role == UserRole.RENTER:
        return DataScope(own_data_only=True, user_id=user_id, pii_mask=False)
    if role == UserRole.LANDLORD:
        return DataScope(property_owner_id=user_id)
    if role == UserRole.PROPERTY_MANAGER:
        return DataScope(full_pipeline=True)
    if role == UserRole.ADMIN:
        return DataScope(full_pipeline=True, pii_mask=False)
    return DataScope()


def resolve_actor(user: UserContext, applicant_id: str) -> Actor:
    """Map an authenticated user onto the lifecycle actor for one application.

    The system user is recognised by identity, not by role, so a client
    can never claim the SYSTEM actor.
    """
    if user is SYSTEM_USER:
        return Actor.SYSTEM
    if user.role == UserRole.RENTER:
        if user.user_id == applicant_id:
            return Actor.APPLICANT
        raise PermissionError(f"User {user.user_id} is not the applicant")
    if user.role in (UserRole.LANDLORD, UserRole.PROPERTY_MANAGER):
        return Actor.LANDLORD
    return Actor.ADMIN
