"""HTTP client for Reddit's OAuth API."""
from __future__ import annotations

import logging
from typing import Any, Mapping
from urllib.parse import urlsplit

import requests

from .account import RedditAccount
from .config import DEFAULT_USER_AGENT, ClientConfig
from .endpoints import (
    ENDPOINT_COMPOSE,
    ENDPOINT_ME,
    ENDPOINT_REMOVE,
    ENDPOINT_SET_CONTEST_MODE,
    ENDPOINT_SET_STICKY,
    ENDPOINT_SET_STYLESHEET,
    ENDPOINT_STYLESHEET,
    ENDPOINT_STYLESHEET_TEMPLATE,
    ENDPOINT_SUBMIT,
    OAUTH_HOST,
    REDDIT_HOST,
    oauth_url,
    post_json_url,
)
from .errors import AuthenticationError, RedditAPIError
from .listing import assemble_post
from .models import Post
from .responses import (
    MeResponse,
    StylesheetTemplate,
    SubmitPostData,
    check_base_error,
    check_json_errors,
)

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 30
MAX_STICKY_SLOT = 4


def build_session(user_agent: str) -> requests.Session:
    session = requests.Session()
    session.headers.update(
        {
            "User-Agent": user_agent,
            "Accept": "application/json",
        }
    )
    return session


def _form_bool(value: bool) -> str:
    return "true" if value else "false"


class RedditAPI:
    """Authenticated access to the Reddit API on behalf of one account.

    Requests to ``oauth.reddit.com`` carry the account's bearer token and fail
    early when there is none or it has expired; requests to
    ``www.reddit.com`` (the token endpoint) use HTTP basic auth with the
    application's client id and secret.
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        user_agent: str = DEFAULT_USER_AGENT,
        username: str = "",
        *,
        debug: bool = False,
        session: requests.Session | None = None,
        timeout: float = REQUEST_TIMEOUT,
    ) -> None:
        self.client_id = client_id
        self._client_secret = client_secret
        self.user_agent = user_agent
        self.debug = debug
        self.timeout = timeout
        self.session = session if session is not None else build_session(user_agent)
        self.account = RedditAccount(api=self, username=username)

    @classmethod
    def from_config(cls, config: ClientConfig, *, session: requests.Session | None = None) -> RedditAPI:
        return cls(
            config.client_id,
            config.client_secret,
            config.user_agent,
            config.username,
            debug=config.debug,
            session=session,
        )

    def _auth_for(self, url: str) -> tuple[dict[str, str], tuple[str, str] | None]:
        host = urlsplit(url).netloc
        headers = {"User-Agent": self.user_agent}
        if host == OAUTH_HOST:
            token = self.account.token
            if token is None or not token.access_token:
                raise AuthenticationError("no valid token")
            if token.is_expired():
                raise AuthenticationError("token expired")
            headers["Authorization"] = f"bearer {token.access_token}"
            return headers, None
        if host == REDDIT_HOST:
            return headers, (self.client_id, self._client_secret)
        return headers, None

    def _log_response(self, response: requests.Response) -> None:
        if self.debug:
            logger.info("Response %s from %s: %s", response.status_code, response.url, response.text)

    def get(self, url: str, params: Mapping[str, Any] | None = None) -> requests.Response:
        headers, auth = self._auth_for(url)
        if self.debug:
            logger.info("Sending GET %s params=%s", url, dict(params or {}))
        response = self.session.get(url, params=params, headers=headers, auth=auth, timeout=self.timeout)
        self._log_response(response)
        return response

    def post_form(self, url: str, data: Mapping[str, Any]) -> requests.Response:
        headers, auth = self._auth_for(url)
        headers["Content-Type"] = "application/x-www-form-urlencoded"
        if self.debug:
            # Never dump credentials sent to the token endpoint.
            safe = {key: ("***" if key == "password" else value) for key, value in data.items()}
            logger.info("Sending POST %s data=%s", url, safe)
        response = self.session.post(url, data=dict(data), headers=headers, auth=auth, timeout=self.timeout)
        self._log_response(response)
        return response

    def login(self, password: str) -> None:
        self.account.password_login(password)

    @staticmethod
    def _check_status(response: requests.Response, operation: str) -> None:
        if not 200 <= response.status_code < 300:
            raise RedditAPIError(
                f"{operation}: returned status code {response.status_code}",
                status_code=response.status_code,
            )

    def _json(self, response: requests.Response, operation: str) -> Any:
        self._check_status(response, operation)
        try:
            return response.json()
        except ValueError as exc:
            raise RedditAPIError(f"{operation}: response is not valid JSON") from exc

    def request_me(self) -> MeResponse:
        response = self.get(oauth_url(ENDPOINT_ME))
        return MeResponse.from_json(self._json(response, "Me"))

    def request_stylesheet(self, subreddit: str) -> str:
        response = self.get(oauth_url(ENDPOINT_STYLESHEET, subreddit))
        if response.status_code != 200:
            raise RedditAPIError(
                f"Stylesheet: returned status code {response.status_code}",
                status_code=response.status_code,
            )
        return response.text

    def request_stylesheet_template(self, subreddit: str) -> StylesheetTemplate:
        response = self.get(oauth_url(ENDPOINT_STYLESHEET_TEMPLATE, subreddit), {"raw_json": 1})
        return StylesheetTemplate.from_json(self._json(response, "StylesheetTemplate"))

    def request_set_stylesheet(self, subreddit: str, stylesheet: str, reason: str) -> None:
        data = {
            "api_type": "json",
            "op": "save",
            "reason": reason,
            "stylesheet_contents": stylesheet,
        }
        response = self.post_form(oauth_url(ENDPOINT_SET_STYLESHEET, subreddit), data)
        check_json_errors(self._json(response, "SetStylesheet"), "SetStylesheet")

    def request_submit_text_post(
        self,
        subreddit: str,
        title: str,
        text: str,
        *,
        nsfw: bool = False,
        spoiler: bool = False,
        send_replies: bool = False,
        resubmit: bool = False,
    ) -> SubmitPostData:
        data = {
            "api_type": "json",
            "kind": "self",
            "nsfw": _form_bool(nsfw),
            "resubmit": _form_bool(resubmit),
            "sendreplies": _form_bool(send_replies),
            "spoiler": _form_bool(spoiler),
            "sr": subreddit,
            "text": text,
            "title": title,
        }
        response = self.post_form(oauth_url(ENDPOINT_SUBMIT), data)
        return SubmitPostData.from_json(self._json(response, "SubmitPost"))

    def request_sticky(self, subreddit: str, name: str, state: bool, num: int = -1) -> None:
        """Sticky or unsticky a post; ``num`` picks slot 1-4, anything else means bottom."""
        data = {
            "api_type": "json",
            "id": name,
            "r": subreddit,
            "state": _form_bool(state),
        }
        if state and 1 <= num <= MAX_STICKY_SLOT:
            data["num"] = str(num)
        response = self.post_form(oauth_url(ENDPOINT_SET_STICKY), data)
        check_json_errors(self._json(response, "SetSticky"), "SetSticky")

    def request_contest_mode(self, name: str, state: bool) -> None:
        data = {
            "api_type": "json",
            "id": name,
            "state": _form_bool(state),
        }
        response = self.post_form(oauth_url(ENDPOINT_SET_CONTEST_MODE), data)
        check_json_errors(self._json(response, "SetContestMode"), "SetContestMode")

    def request_post(self, url: str, *, strict: bool = True) -> Post:
        """Fetch a post and its full comment tree from its permalink."""
        response = self.get(post_json_url(url), {"raw_json": 1})
        if response.status_code != 200:
            raise RedditAPIError(
                f"Post: returned status code {response.status_code}",
                status_code=response.status_code,
            )
        return assemble_post(response.content, strict=strict)

    def request_remove_post(self, name: str, spam: bool = False) -> None:
        data = {
            "id": name,
            "spam": _form_bool(spam),
        }
        response = self.post_form(oauth_url(ENDPOINT_REMOVE), data)
        check_base_error(self._json(response, "RemovePost"))

    def compose_message(self, to: str, subject: str, text: str) -> None:
        data = {
            "api_type": "json",
            "to": to,
            "subject": subject,
            "text": text,
        }
        response = self.post_form(oauth_url(ENDPOINT_COMPOSE), data)
        check_json_errors(self._json(response, "ComposeMessage"), "ComposeMessage")


__all__ = ["MAX_STICKY_SLOT", "REQUEST_TIMEOUT", "RedditAPI", "build_session"]
