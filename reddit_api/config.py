"""Client settings, loaded from the environment or given explicitly."""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping

DEFAULT_USER_AGENT = "python:reddit-api-client:0.1.0"

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(slots=True)
class ClientConfig:
    """Credentials and switches needed to build a :class:`~reddit_api.api.RedditAPI`."""

    client_id: str
    client_secret: str
    username: str = ""
    password: str = ""
    user_agent: str = DEFAULT_USER_AGENT
    debug: bool = False

    def __post_init__(self) -> None:
        self.client_id = self.client_id.strip()
        self.client_secret = self.client_secret.strip()
        self.username = self.username.strip()
        if not self.client_id or not self.client_secret:
            raise ValueError("A client id and client secret are required")
        if not self.user_agent or not self.user_agent.strip():
            self.user_agent = DEFAULT_USER_AGENT

    @property
    def can_login(self) -> bool:
        return bool(self.username and self.password)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ClientConfig:
        env = os.environ if environ is None else environ
        return cls(
            client_id=env.get("REDDIT_CLIENT_ID", ""),
            client_secret=env.get("REDDIT_CLIENT_SECRET", ""),
            username=env.get("REDDIT_USERNAME", ""),
            password=env.get("REDDIT_PASSWORD", ""),
            user_agent=env.get("REDDIT_USER_AGENT", DEFAULT_USER_AGENT),
            debug=env.get("REDDIT_DEBUG", "").strip().lower() in _TRUTHY,
        )


__all__ = ["ClientConfig", "DEFAULT_USER_AGENT"]
