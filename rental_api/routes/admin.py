# This project was developed with assistance from AI tools.
"""Admin endpoints for lifecycle maintenance."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from rental_db import get_db
from rental_db.enums import UserRole

from ..middleware.auth import require_roles
from ..schemas.application import ExpireStaleResponse
from ..services.expiry import expire_stale_applications

router = APIRouter()


@router.post(
    "/expire-stale",
    response_model=ExpireStaleResponse,
    dependencies=[Depends(require_roles(UserRole.ADMIN))],
)
async def expire_stale(
    session: AsyncSession = Depends(get_db),
) -> ExpireStaleResponse:
    """Move every application past its expiry deadline to expired."""
    expired_ids = await expire_stale_applications(session)
    return ExpireStaleResponse(expired_ids=expired_ids, count=len(expired_ids))
