"""FastAPI dependencies: services from app.state and the caller's identity"""

from typing import Optional

from fastapi import Header, Request

from ..auth import TokenVerifier
from ..errors import AuthenticationError
from ..database import TrackmateRepository


def get_repository(request: Request) -> TrackmateRepository:
    return request.app.state.repository


def get_verifier(request: Request) -> TokenVerifier:
    return request.app.state.verifier


def current_user_id(request: Request, authorization: Optional[str] = Header(default=None)) -> str:
    """Authenticated user id; AuthenticationError (401) otherwise"""
    return get_verifier(request).authenticate(authorization)


def optional_user_id(request: Request, authorization: Optional[str] = Header(default=None)) -> Optional[str]:
    """Viewer id when a valid token is sent, else None"""
    if not authorization:
        return None
    verifier = get_verifier(request)
    try:
        return verifier.authenticate(authorization)
    except AuthenticationError:
        return None
