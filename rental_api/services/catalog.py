# This project was developed with assistance from AI tools.
"""Read-only client for the property catalog service.

The lifecycle never mutates property records. It reads a property once,
when an applicant's first draft is created, and snapshots the title,
address, application fee and owner onto the application.
"""

import logging
from decimal import Decimal

import httpx
from pydantic import BaseModel, ConfigDict, Field

from ..core.config import settings
from .errors import ApplicationError

logger = logging.getLogger(__name__)


class CatalogUnavailableError(ApplicationError):
    """The catalog could not be reached or answered with a server error."""

    code = "catalog_unavailable"
    status_code = 503


class PropertySnapshot(BaseModel):
    """The subset of a catalog property the application keeps."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", coerce_numbers_to_str=True)

    id: str
    title: str | None = None
    address: str | None = None
    application_fee: Decimal | None = Field(default=None, alias="applicationFee")
    owner_id: str | None = Field(default=None, alias="ownerId")


class PropertyCatalog:
    """HTTP client for ``GET {base_url}/properties/{id}``."""

    def __init__(self, base_url: str, timeout: float, transport: httpx.AsyncBaseTransport | None = None):
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    async def get_property(self, property_id: str) -> PropertySnapshot | None:
        """Return the property, or None when the catalog has no such id."""
        url = f"{self._base_url}/properties/{property_id}"
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.get(url)
        except httpx.HTTPError as exc:
            logger.error("Property catalog request failed for %s: %s", property_id, exc)
            raise CatalogUnavailableError("Property catalog unavailable") from exc

        if response.status_code == 404:
            return None
        if response.status_code >= 400:
            logger.error(
                "Property catalog returned %s for %s", response.status_code, property_id
            )
            raise CatalogUnavailableError("Property catalog unavailable")

        body = response.json()
        # Catalog wraps payloads as {"data": {...}}
        if isinstance(body, dict) and isinstance(body.get("data"), dict):
            body = body["data"]
        return PropertySnapshot.model_validate(body)


_catalog: PropertyCatalog | None = None


def get_property_catalog() -> PropertyCatalog:
    """FastAPI dependency returning the process-wide catalog client."""
    global _catalog  # noqa: PLW0603
    if _catalog is None:
        _catalog = PropertyCatalog(
            settings.PROPERTY_CATALOG_URL,
            timeout=settings.PROPERTY_CATALOG_TIMEOUT,
        )
    return _catalog
