"""
Identity for Trackmate

- TokenVerifier: bearer token -> user id, backed by the access_tokens table
- SessionContext: one identity shared by every view of a client, with
  subscribe/notify on sign-in and sign-out

Usage:
    verifier = TokenVerifier(repository)
    token = verifier.issue_token(user_id)

    context = SessionContext(verifier)
    unsubscribe = context.subscribe(lambda user_id: print('now', user_id))
    context.hydrate(token)
    context.sign_out()
"""

import logging
import secrets
import threading
from typing import Callable, List, Optional

from .errors import AuthenticationError

logger = logging.getLogger(__name__)

BEARER_PREFIX = 'bearer '


def extract_bearer_token(header: Optional[str]) -> str:
    """
    Pull the token out of an Authorization header

    Raises:
        AuthenticationError: header missing, not a bearer header, or empty token
    """
    if not header or not header.lower().startswith(BEARER_PREFIX):
        raise AuthenticationError('Missing or invalid Authorization header')

    token = header[len(BEARER_PREFIX):].strip()
    if not token:
        raise AuthenticationError('Empty bearer token')
    return token


class TokenVerifier:
    """Verifies and issues opaque bearer tokens"""

    def __init__(self, repository):
        self.repository = repository

    def verify(self, token: str) -> Optional[str]:
        """User id for the token, or None"""
        if not token:
            return None
        return self.repository.get_token_user(token)

    def authenticate(self, header: Optional[str]) -> str:
        """
        Resolve an Authorization header to a user id

        Raises:
            AuthenticationError: on any failure
        """
        token = extract_bearer_token(header)
        user_id = self.verify(token)
        if user_id is None:
            logger.warning("[Auth] Rejected unknown or revoked token")
            raise AuthenticationError('Unauthorized')
        return user_id

    def issue_token(self, user_id: str) -> str:
        token = secrets.token_urlsafe(32)
        self.repository.add_access_token(token, user_id)
        logger.info("[Auth] Issued token for user %s", user_id)
        return token

    def revoke_token(self, token: str) -> bool:
        """Revoke a token; False if it was never issued"""
        revoked = self.repository.revoke_token(token)
        if revoked:
            logger.info("[Auth] Revoked a token")
        return revoked


class SessionContext:
    """
    Current identity with change notifications

    Lifecycle: hydrate on load, sign_in/sign_out on auth events. Listeners
    receive the new user id (None after sign-out).
    """

    def __init__(self, verifier: Optional[TokenVerifier] = None):
        self._verifier = verifier
        self._lock = threading.Lock()
        self._listeners: List[Callable[[Optional[str]], None]] = []
        self.user_id: Optional[str] = None
        self.token: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None

    def require_user(self) -> str:
        if self.user_id is None:
            raise AuthenticationError('You must be logged in.')
        return self.user_id

    def subscribe(self, listener: Callable[[Optional[str]], None]) -> Callable[[], None]:
        """
        Register a listener

        Returns:
            A callable that removes the listener
        """
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe():
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def hydrate(self, token: Optional[str]) -> Optional[str]:
        """Restore identity from a stored token; an invalid token signs out"""
        user_id = self._verifier.verify(token) if (self._verifier and token) else None
        if user_id is None:
            self.sign_out()
            return None
        self._set(user_id, token)
        return user_id

    def sign_in(self, user_id: str, token: Optional[str] = None) -> None:
        self._set(user_id, token)

    def sign_out(self) -> None:
        self._set(None, None)

    def _set(self, user_id: Optional[str], token: Optional[str]):
        with self._lock:
            changed = user_id != self.user_id
            self.user_id = user_id
            self.token = token
            listeners = list(self._listeners)

        if changed:
            for listener in listeners:
                listener(user_id)
