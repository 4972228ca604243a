"""OAuth password-grant authentication and token bookkeeping."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Any, Mapping

from .endpoints import ENDPOINT_ACCESS_TOKEN, reddit_url
from .errors import AuthenticationError

if TYPE_CHECKING:  # pragma: no cover
    from .api import RedditAPI

logger = logging.getLogger(__name__)

GRANT_TYPE_PASSWORD = "password"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(slots=True)
class Token:
    """A bearer token together with the moment it stops being accepted."""

    access_token: str
    token_type: str = "bearer"
    scope: str = ""
    expires_in: int = 0
    expiry: datetime | None = None

    @classmethod
    def from_response(cls, payload: Any, *, now: datetime | None = None) -> Token:
        if not isinstance(payload, Mapping):
            raise AuthenticationError("unable to decode token response")
        error = payload.get("error")
        if error:
            raise AuthenticationError(f"reddit returned error: {error}")
        access_token = payload.get("access_token")
        if not access_token:
            raise AuthenticationError("blank token")
        try:
            expires_in = int(payload.get("expires_in") or 0)
        except (TypeError, ValueError) as exc:
            raise AuthenticationError(f"invalid expires_in: {payload.get('expires_in')!r}") from exc
        issued = now or _utcnow()
        return cls(
            access_token=str(access_token),
            token_type=str(payload.get("token_type") or "bearer"),
            scope=str(payload.get("scope") or ""),
            expires_in=expires_in,
            expiry=issued + timedelta(seconds=expires_in),
        )

    def is_expired(self, now: datetime | None = None) -> bool:
        if self.expiry is None:
            return True
        return (now or _utcnow()) >= self.expiry

    def is_valid(self, now: datetime | None = None) -> bool:
        return bool(self.access_token) and not self.is_expired(now)


@dataclass(slots=True)
class RedditAccount:
    """The account a :class:`~reddit_api.api.RedditAPI` acts on behalf of.

    The password is only used for the login request and never stored.
    """

    api: RedditAPI
    username: str
    token: Token | None = None

    def password_login(self, password: str) -> Token:
        data = {
            "grant_type": GRANT_TYPE_PASSWORD,
            "username": self.username,
            "password": password,
        }
        response = self.api.post_form(reddit_url(ENDPOINT_ACCESS_TOKEN), data)
        if response.status_code != 200:
            raise AuthenticationError(
                f"bad status code: {response.status_code}",
                status_code=response.status_code,
            )
        try:
            payload = response.json()
        except ValueError as exc:
            raise AuthenticationError(f"unable to decode json: {exc}") from exc

        token = Token.from_response(payload)
        self.token = token
        logger.info("Authenticated as %s (token expires %s)", self.username, token.expiry)
        return token


__all__ = ["GRANT_TYPE_PASSWORD", "RedditAccount", "Token"]
