from dataclasses import dataclass
from typing import Optional

import httpx
import logging
from fastapi import Request

from wayguard.core.config import settings
from wayguard.core.errors import DependencyError, Unauthenticated

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Identity:
    user_id: str
    email: Optional[str] = None


def get_bearer_token(request: Request) -> Optional[str]:
    """Extract the token from an `Authorization: Bearer <token>` header."""
    auth_header = request.headers.get("authorization", "")
    scheme, _, token = auth_header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


async def verify_identity_token(token: Optional[str]) -> Optional[Identity]:
    """
    Resolves a bearer token to an identity using the external identity provider.

    Returns None for a missing or rejected token. Raises DependencyError when
    the provider cannot be reached.
    """
    if not token:
        return None

    if settings.ENV == "development" and token == settings.DEV_IDENTITY_TOKEN:
        logger.warning("Using mock identity token for development.")
        return Identity(user_id=settings.DEV_USER_ID)

    if not settings.AUTH_USER_URL:
        logger.error("AUTH_USER_URL is not configured; rejecting token.")
        return None

    headers = {"Authorization": f"Bearer {token}"}
    if settings.AUTH_API_KEY:
        headers["apikey"] = settings.AUTH_API_KEY

    try:
        async with httpx.AsyncClient(timeout=settings.AUTH_TIMEOUT) as client:
            response = await client.get(settings.AUTH_USER_URL, headers=headers)
    except httpx.TimeoutException as e:
        logger.error("Identity provider timed out.")
        raise DependencyError("Identity provider timed out.") from e
    except httpx.HTTPError as e:
        logger.error(f"Identity provider request failed: {e}")
        raise DependencyError("Identity provider is unavailable.") from e

    if response.status_code in (401, 403):
        logger.info("Identity provider rejected token.")
        return None
    if response.status_code >= 400:
        logger.error(f"Identity provider returned status {response.status_code}")
        raise DependencyError("Identity provider is unavailable.")

    try:
        user = response.json()
    except ValueError as e:
        logger.error("Identity provider returned a non-JSON body.")
        raise DependencyError("Identity provider is unavailable.") from e
    user_id = user.get("id") if isinstance(user, dict) else None
    if not user_id:
        logger.warning("Identity provider response carried no user id.")
        return None
    return Identity(user_id=str(user_id), email=user.get("email"))


async def get_optional_identity(request: Request) -> Optional[Identity]:
    """Identity when a valid token is presented; never raises.

    Used by routes that must keep working without authentication.
    """
    try:
        return await verify_identity_token(get_bearer_token(request))
    except DependencyError as e:
        logger.warning(f"Continuing without identity: {e.detail}")
        return None


async def require_identity(request: Request) -> Identity:
    identity = await verify_identity_token(get_bearer_token(request))
    if identity is None:
        raise Unauthenticated("A valid bearer token is required.")
    return identity
