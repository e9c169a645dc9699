# This project was developed with assistance from AI tools.
"""Bearer-token authentication for renters, landlords, managers and admins.

Tokens are Keycloak-issued RS256 JWTs. The caller's rental role comes from
``realm_access.roles``; Keycloak's built-in roles are ignored and a token
without any rental role is refused.

Set AUTH_DISABLED=true to bypass validation (tests / local dev without Keycloak).
"""

import logging
import time
from typing import Annotated

import httpx
import jwt
from fastapi import Depends, HTTPException, Request, status

from rental_db.enums import UserRole

from ..core.auth import build_data_scope
from ..core.config import settings
from ..schemas.auth import DataScope, TokenPayload, UserContext

logger = logging.getLogger(__name__)

# Highest first: a landlord who also rents keeps landlord access
ROLE_PRIORITY = (
    UserRole.ADMIN,
    UserRole.PROPERTY_MANAGER,
    UserRole.LANDLORD,
    UserRole.RENTER,
)


def _realm_url() -> str:
    return f"{settings.KEYCLOAK_URL}/realms/{settings.KEYCLOAK_REALM}"


class _SigningKeys:
    """Realm signing keys by ``kid``, refreshed on TTL expiry or an unknown kid."""

    def __init__(self) -> None:
        self._keys: dict[str, jwt.PyJWK] = {}
        self._loaded_at = 0.0

    def _refresh(self) -> None:
        try:
            response = httpx.get(f"{_realm_url()}/protocol/openid-connect/certs", timeout=5)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.error("Could not load realm signing keys: %s", exc)
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Authentication service unavailable",
            ) from exc
        key_set = jwt.PyJWKSet.from_dict(response.json())
        self._keys = {key.key_id: key for key in key_set.keys}
        self._loaded_at = time.time()

    def get(self, kid: str | None) -> jwt.PyJWK:
        if time.time() - self._loaded_at > settings.JWKS_CACHE_TTL:
            self._refresh()
        key = self._keys.get(kid)
        if key is None:
            # Key rotation: one forced reload before giving up
            self._refresh()
            key = self._keys.get(kid)
        if key is None:
            raise jwt.InvalidTokenError(f"No signing key for kid={kid}")
        return key


_signing_keys = _SigningKeys()


def _decode_token(token: str) -> TokenPayload:
    kid = jwt.get_unverified_header(token).get("kid")
    claims = jwt.decode(
        token,
        _signing_keys.get(kid).key,
        algorithms=["RS256"],
        issuer=_realm_url(),
        options={"verify_aud": False},
    )
    return TokenPayload(**claims)


def _resolve_role(token_payload: TokenPayload) -> UserRole:
    """Pick the caller's rental role by ``ROLE_PRIORITY``."""
    granted = set(token_payload.realm_access.get("roles", []))
    for role in ROLE_PRIORITY:
        if role.value in granted:
            return role

    logger.warning(
        "Token for %s carries no rental role (realm roles: %s)",
        token_payload.sub,
        sorted(granted),
    )
    raise HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail="No rental role assigned to this account",
    )


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


_DEV_ADMIN = UserContext(
    user_id="dev-user",
    role=UserRole.ADMIN,
    email="dev@rentals.local",
    name="Dev User",
    data_scope=DataScope(full_pipeline=True, pii_mask=False),
)


async def get_current_user(request: Request) -> UserContext:
    """Authenticate the request and record whether its responses need redaction."""
    if settings.AUTH_DISABLED:
        request.state.pii_mask = _DEV_ADMIN.data_scope.pii_mask
        return _DEV_ADMIN

    scheme, _, token = request.headers.get("Authorization", "").partition(" ")
    if scheme != "Bearer" or not token:
        raise _unauthorized("Missing authentication token")

    try:
        claims = _decode_token(token)
    except jwt.ExpiredSignatureError as exc:
        raise _unauthorized("Token has expired") from exc
    except jwt.InvalidTokenError as exc:
        raise _unauthorized("Invalid token") from exc

    role = _resolve_role(claims)
    scope = build_data_scope(role, claims.sub)
    request.state.pii_mask = scope.pii_mask
    return UserContext(
        user_id=claims.sub,
        role=role,
        email=claims.email,
        name=claims.name or claims.preferred_username,
        data_scope=scope,
    )


CurrentUser = Annotated[UserContext, Depends(get_current_user)]


def require_roles(*allowed_roles: UserRole):
    """Dependency factory: 403 unless the caller holds one of ``allowed_roles``."""

    async def _check(user: CurrentUser) -> UserContext:
        if user.role not in allowed_roles:
            logger.warning(
                "User %s (%s) denied; route allows %s",
                user.user_id,
                user.role.value,
                ", ".join(r.value for r in allowed_roles),
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )
        return user

    return _check
