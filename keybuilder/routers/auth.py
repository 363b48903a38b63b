"""Login through the OpenID Connect provider and the session profile."""

import logging

import httpx

from fastapi import APIRouter, Depends
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from keybuilder.config import settings
from keybuilder.database import get_db
from keybuilder.exceptions import KeyBuilderError
from keybuilder.middleware.auth_middleware import get_current_user
from keybuilder.models.user import User
from keybuilder.schemas.auth import LogoutUrlOut, SessionOut
from keybuilder.services import auth_service, oidc_client

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.get("/oidc")
def login():
    return RedirectResponse(oidc_client.authorization_url(auth_service.create_state_token()))


@router.get("/oidc/callback")
def login_callback(code: str, state: str, db: Session = Depends(get_db)):
    try:
        token = auth_service.complete_login(db, code, state)
    except (KeyBuilderError, httpx.HTTPError) as exc:
        logger.warning("[auth] login failed: %s", exc)
        return RedirectResponse(f"{settings.BUILDER_URL_BASE}/signin/error")
    return RedirectResponse(f"{settings.BUILDER_URL_BASE}/signin/callback#access_token={token}")


@router.get("/profile", response_model=SessionOut)
def profile(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return SessionOut(user=auth_service.get_profile(db, current_user))


@router.get("/logout/url", response_model=LogoutUrlOut)
def logout_url(_current_user: User = Depends(get_current_user)):
    return LogoutUrlOut(logout_url=oidc_client.end_session_url())


@router.get("/logout/callback")
def logout_callback():
    return RedirectResponse(settings.BUILDER_URL_BASE)
