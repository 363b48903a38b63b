"""OpenID Connect provider calls: discovery, code exchange, ID token checks, userinfo and groups."""

import logging
from functools import lru_cache
from typing import Any, Dict, List
from urllib.parse import urlencode

import httpx
from jose import JWTError, jwt

from keybuilder.config import settings
from keybuilder.exceptions import ForbiddenError

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def discover() -> Dict[str, Any]:
    response = httpx.get(settings.OIDC_DISCOVERY_ENDPOINT, timeout=settings.HTTP_TIMEOUT)
    response.raise_for_status()
    return response.json()


def authorization_url(state: str) -> str:
    params = {
        "response_type": "code",
        "client_id": settings.OIDC_CLIENT_ID,
        "redirect_uri": settings.OIDC_REDIRECT_URI,
        "scope": settings.OIDC_SCOPE,
        "state": state,
    }
    return f"{discover()['authorization_endpoint']}?{urlencode(params)}"


def end_session_url() -> str:
    params = {
        "client_id": settings.OIDC_CLIENT_ID,
        "post_logout_redirect_uri": settings.OIDC_LOGOUT_URI,
    }
    return f"{discover()['end_session_endpoint']}?{urlencode(params)}"


def exchange_code(code: str) -> Dict[str, Any]:
    """Trade an authorization code for a token set (client_secret_post)."""
    response = httpx.post(
        discover()["token_endpoint"],
        data={
            "grant_type": "authorization_code",
            "code": code,
            "redirect_uri": settings.OIDC_REDIRECT_URI,
            "client_id": settings.OIDC_CLIENT_ID,
            "client_secret": settings.OIDC_CLIENT_SECRET,
        },
        timeout=settings.HTTP_TIMEOUT,
    )
    response.raise_for_status()
    return response.json()


def verify_id_token(id_token: str, access_token: str) -> Dict[str, Any]:
    """Check the ID token signature against the provider JWKS, plus issuer and audience."""
    response = httpx.get(discover()["jwks_uri"], timeout=settings.HTTP_TIMEOUT)
    response.raise_for_status()
    try:
        return jwt.decode(
            id_token,
            response.json(),
            algorithms=["RS256"],
            audience=settings.OIDC_CLIENT_ID,
            issuer=settings.oidc_issuer_url,
            access_token=access_token,
        )
    except JWTError as exc:
        logger.warning("[auth] rejected id token: %s", exc)
        raise ForbiddenError("Invalid ID token")


def fetch_userinfo(access_token: str) -> Dict[str, Any]:
    response = httpx.get(
        discover()["userinfo_endpoint"],
        headers={"Authorization": f"Bearer {access_token}"},
        timeout=settings.HTTP_TIMEOUT,
    )
    response.raise_for_status()
    return response.json()


def fetch_organization_groups(access_token: str) -> List[str]:
    """Ids of the caller's IdP groups that represent organizations."""
    response = httpx.get(
        f"{settings.IDP_GROUPS_API}/me/groups",
        headers={"Authorization": f"Bearer {access_token}"},
        timeout=settings.HTTP_TIMEOUT,
    )
    response.raise_for_status()
    return [
        group["id"]
        for group in response.json() or []
        if group.get("type") == settings.IDP_ORGANIZATION_GROUP_TYPE
    ]
