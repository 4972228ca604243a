"""Hosts and endpoint paths of the Reddit API."""
from __future__ import annotations

from urllib.parse import urlsplit, urlunsplit

SCHEME = "https"
REDDIT_HOST = "www.reddit.com"
OAUTH_HOST = "oauth.reddit.com"

# Served by www.reddit.com with HTTP basic auth.
ENDPOINT_ACCESS_TOKEN = "/api/v1/access_token"

# Served by oauth.reddit.com with a bearer token.
ENDPOINT_ME = "/api/v1/me"
ENDPOINT_STYLESHEET = "/r/{}/stylesheet"
ENDPOINT_SET_STYLESHEET = "/r/{}/api/subreddit_stylesheet"
ENDPOINT_STYLESHEET_TEMPLATE = "/r/{}/about/stylesheet.json"
ENDPOINT_SUBMIT = "/api/submit"
ENDPOINT_SET_STICKY = "/api/set_subreddit_sticky"
ENDPOINT_SET_CONTEST_MODE = "/api/set_contest_mode"
ENDPOINT_REMOVE = "/api/remove"
ENDPOINT_COMPOSE = "/api/compose"


def _build_url(host: str, endpoint: str, args: tuple[str, ...]) -> str:
    path = endpoint.format(*args)
    return urlunsplit((SCHEME, host, path, "", ""))


def reddit_url(endpoint: str, *args: str) -> str:
    return _build_url(REDDIT_HOST, endpoint, args)


def oauth_url(endpoint: str, *args: str) -> str:
    return _build_url(OAUTH_HOST, endpoint, args)


def post_json_url(permalink: str) -> str:
    """Rewrite a post permalink into its JSON comments URL on the OAuth host.

    Accepts absolute URLs on any reddit host as well as bare paths such as
    ``/r/python/comments/abc123/title/``.
    """
    parsed = urlsplit(permalink)
    path = parsed.path.rstrip("/")
    if not path:
        raise ValueError(f"Post URL has no path: {permalink!r}")
    if not path.endswith(".json"):
        path += ".json"
    return urlunsplit((SCHEME, OAUTH_HOST, path, "", ""))


__all__ = [
    "ENDPOINT_ACCESS_TOKEN",
    "ENDPOINT_COMPOSE",
    "ENDPOINT_ME",
    "ENDPOINT_REMOVE",
    "ENDPOINT_SET_CONTEST_MODE",
    "ENDPOINT_SET_STICKY",
    "ENDPOINT_SET_STYLESHEET",
    "ENDPOINT_STYLESHEET",
    "ENDPOINT_STYLESHEET_TEMPLATE",
    "ENDPOINT_SUBMIT",
    "OAUTH_HOST",
    "REDDIT_HOST",
    "oauth_url",
    "post_json_url",
    "reddit_url",
]
