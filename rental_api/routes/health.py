# This project was developed with assistance from AI tools.
"""Liveness and database health."""

from fastapi import APIRouter, Depends

from rental_db import DatabaseService, get_db_service

from .. import __version__
from ..schemas.health import HealthItem

router = APIRouter()


@router.get("/", response_model=list[HealthItem])
async def health(db: DatabaseService = Depends(get_db_service)) -> list[HealthItem]:
    """Report API and database health. Unauthenticated."""
    db_ok = await db.health_check()
    return [
        HealthItem(
            name="API",
            status="healthy",
            message="Rental application API is running",
            version=__version__,
        ),
        HealthItem(
            name="Database",
            status="healthy" if db_ok else "unhealthy",
            message="PostgreSQL reachable" if db_ok else "PostgreSQL unreachable",
        ),
    ]
