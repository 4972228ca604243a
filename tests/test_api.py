from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest

from reddit_api.account import Token
from reddit_api.api import RedditAPI
from reddit_api.config import ClientConfig
from reddit_api.errors import AuthenticationError, RedditAPIError, UnexpectedChildCount
from reddit_api.responses import MeResponse


class FakeResponse:
    def __init__(self, payload: Any = None, *, status_code: int = 200, text: str | None = None) -> None:
        self.status_code = status_code
        self._payload = payload
        self.text = text if text is not None else json.dumps(payload)
        self.content = self.text.encode("utf-8")
        self.url = "https://fake.invalid/"

    def json(self) -> Any:
        return json.loads(self.text)


class FakeSession:
    def __init__(self, *responses: FakeResponse) -> None:
        self.responses = list(responses)
        self.calls: list[dict[str, Any]] = []

    def _next(self, **call: Any) -> FakeResponse:
        self.calls.append(call)
        assert self.responses, "Unexpected additional request"
        return self.responses.pop(0)

    def get(self, url: str, *, params=None, headers=None, auth=None, timeout=None):  # noqa: D401
        return self._next(method="GET", url=url, params=params, headers=headers, auth=auth)

    def post(self, url: str, *, data=None, headers=None, auth=None, timeout=None):  # noqa: D401
        return self._next(method="POST", url=url, data=data, headers=headers, auth=auth)


def make_api(*responses: FakeResponse, logged_in: bool = True) -> tuple[RedditAPI, FakeSession]:
    session = FakeSession(*responses)
    api = RedditAPI("cid", "secret", "test-agent/1.0", "bot", session=session)
    if logged_in:
        api.account.token = Token(
            access_token="tok",
            expires_in=3600,
            expiry=datetime.now(timezone.utc) + timedelta(hours=1),
        )
    return api, session


def post_document() -> list[dict[str, Any]]:
    post = {
        "id": "pq1",
        "name": "t3_pq1",
        "author": "op",
        "subreddit": "example",
        "created_utc": 1622548800.0,
        "title": "Post title",
    }
    reply = {
        "id": "c2",
        "name": "t1_c2",
        "author": "b",
        "subreddit": "example",
        "created_utc": 1622550100.0,
        "body": "reply",
        "parent_id": "t1_c1",
        "replies": "",
    }
    comment = {
        "id": "c1",
        "name": "t1_c1",
        "author": "a",
        "subreddit": "example",
        "created_utc": 1622550000.0,
        "edited": False,
        "body": "top",
        "parent_id": "t3_pq1",
        "replies": {"kind": "Listing", "data": {"children": [{"kind": "t1", "data": reply}]}},
    }
    return [
        {"kind": "Listing", "data": {"children": [{"kind": "t3", "data": post}]}},
        {"kind": "Listing", "data": {"children": [{"kind": "t1", "data": comment}]}},
    ]


def test_password_login_uses_basic_auth_and_stores_token():
    api, session = make_api(
        FakeResponse({"access_token": "tok", "token_type": "bearer", "expires_in": 3600, "scope": "*"}),
        logged_in=False,
    )

    api.login("hunter2")

    call = session.calls[0]
    assert call["url"] == "https://www.reddit.com/api/v1/access_token"
    assert call["auth"] == ("cid", "secret")
    assert call["data"] == {"grant_type": "password", "username": "bot", "password": "hunter2"}
    assert api.account.token is not None
    assert api.account.token.is_valid()


def test_password_login_rejects_bad_status():
    api, _ = make_api(FakeResponse({"message": "Unauthorized"}, status_code=401), logged_in=False)

    with pytest.raises(AuthenticationError) as excinfo:
        api.login("wrong")

    assert excinfo.value.status_code == 401
    assert api.account.token is None


@pytest.mark.parametrize(
    "payload",
    [{"error": "invalid_grant"}, {"access_token": "", "expires_in": 3600}],
)
def test_token_from_response_rejects_error_payloads(payload):
    with pytest.raises(AuthenticationError):
        Token.from_response(payload)


def test_token_expiry_is_computed_from_expires_in():
    now = datetime(2021, 6, 1, tzinfo=timezone.utc)

    token = Token.from_response({"access_token": "tok", "expires_in": 60}, now=now)

    assert token.expiry == now + timedelta(seconds=60)
    assert token.is_valid(now)
    assert not token.is_valid(now + timedelta(seconds=61))


def test_oauth_request_without_token_fails_before_sending():
    api, session = make_api(logged_in=False)

    with pytest.raises(AuthenticationError, match="no valid token"):
        api.request_me()

    assert session.calls == []


def test_oauth_request_with_expired_token_fails():
    api, session = make_api()
    api.account.token.expiry = datetime.now(timezone.utc) - timedelta(seconds=1)

    with pytest.raises(AuthenticationError, match="token expired"):
        api.request_me()

    assert session.calls == []


def test_request_me_sends_bearer_token():
    api, session = make_api(
        FakeResponse({"id": "u1", "name": "bot", "link_karma": 5, "created_utc": 1622548800.0, "is_mod": True})
    )

    me = api.request_me()

    assert isinstance(me, MeResponse)
    assert me.name == "bot"
    assert me.is_mod is True
    assert session.calls[0]["headers"]["Authorization"] == "bearer tok"
    assert session.calls[0]["headers"]["User-Agent"] == "test-agent/1.0"
    assert session.calls[0]["auth"] is None


def test_request_me_surfaces_error_payload():
    api, _ = make_api(FakeResponse({"error": 403, "message": "Forbidden"}))

    with pytest.raises(RedditAPIError, match="reddit error '403': Forbidden"):
        api.request_me()


def test_request_post_decodes_comment_tree():
    api, session = make_api(FakeResponse(post_document()))

    post = api.request_post("https://www.reddit.com/r/example/comments/pq1/post_title/")

    call = session.calls[0]
    assert call["url"] == "https://oauth.reddit.com/r/example/comments/pq1/post_title.json"
    assert call["params"] == {"raw_json": 1}
    assert post.title == "Post title"
    assert [c.id for c in post.walk_comments()] == ["c1", "c2"]
    assert post.replies[0].replies[0].parent_id == "t1_c1"


def test_request_post_propagates_decode_errors():
    document = post_document()
    document[0]["data"]["children"].append(document[0]["data"]["children"][0])
    api, _ = make_api(FakeResponse(document))

    with pytest.raises(UnexpectedChildCount):
        api.request_post("/r/example/comments/pq1/post_title/")


def test_request_post_rejects_non_200():
    api, _ = make_api(FakeResponse({"message": "Not Found"}, status_code=404))

    with pytest.raises(RedditAPIError) as excinfo:
        api.request_post("/r/example/comments/missing/")

    assert excinfo.value.status_code == 404


def test_request_submit_text_post_sends_flags():
    api, session = make_api(
        FakeResponse({"json": {"errors": [], "data": {"id": "new1", "name": "t3_new1", "url": "https://redd.it/new1"}}})
    )

    result = api.request_submit_text_post("example", "Title", "Text", nsfw=True)

    data = session.calls[0]["data"]
    assert data["nsfw"] == "true"
    assert data["spoiler"] == "false"
    assert data["kind"] == "self"
    assert session.calls[0]["headers"]["Content-Type"] == "application/x-www-form-urlencoded"
    assert result.name == "t3_new1"


def test_request_submit_text_post_reports_api_errors():
    api, _ = make_api(
        FakeResponse({"json": {"errors": [["SUBREDDIT_NOEXIST", "that subreddit doesn't exist", "sr"]]}})
    )

    with pytest.raises(RedditAPIError, match="SubmitPost: SUBREDDIT_NOEXIST"):
        api.request_submit_text_post("nope", "Title", "Text")


def test_request_submit_text_post_requires_post_id():
    api, _ = make_api(FakeResponse({"json": {"errors": [], "data": {}}}))

    with pytest.raises(RedditAPIError, match="empty post ID"):
        api.request_submit_text_post("example", "Title", "Text")


def test_request_sticky_only_sends_valid_slot():
    api, session = make_api(FakeResponse({"json": {"errors": []}}), FakeResponse({"json": {"errors": []}}))

    api.request_sticky("example", "t3_pq1", True, num=2)
    api.request_sticky("example", "t3_pq1", True, num=7)

    assert session.calls[0]["data"]["num"] == "2"
    assert session.calls[0]["data"]["state"] == "true"
    assert "num" not in session.calls[1]["data"]


def test_request_contest_mode_reports_too_many_errors():
    api, _ = make_api(FakeResponse({"json": {"errors": [["A", "a"], ["B", "b"]]}}))

    with pytest.raises(RedditAPIError, match="SetContestMode: too many errors"):
        api.request_contest_mode("t3_pq1", True)


def test_request_stylesheet_template_checks_kind():
    api, _ = make_api(
        FakeResponse({"kind": "stylesheet", "data": {"stylesheet": "a{}", "images": [{"url": "u", "link": "l", "name": "n"}]}}),
        FakeResponse({"kind": "t5", "data": {}}),
    )

    template = api.request_stylesheet_template("example")

    assert template.stylesheet == "a{}"
    assert template.images[0].name == "n"
    with pytest.raises(RedditAPIError, match="unexpected kind"):
        api.request_stylesheet_template("example")


def test_request_stylesheet_returns_text():
    api, _ = make_api(FakeResponse(text="body { color: red; }"))

    assert api.request_stylesheet("example") == "body { color: red; }"


def test_request_set_stylesheet_reports_message():
    api, session = make_api(FakeResponse({"message": "Forbidden", "error": 403}))

    with pytest.raises(RedditAPIError, match="reddit error: Forbidden"):
        api.request_set_stylesheet("example", "a{}", "update")

    assert session.calls[0]["data"]["stylesheet_contents"] == "a{}"


def test_request_remove_post_and_compose_message():
    api, session = make_api(FakeResponse({}), FakeResponse({"json": {"errors": []}}))

    api.request_remove_post("t3_pq1", spam=True)
    api.compose_message("/u/someone", "Subject", "Text")

    assert session.calls[0]["data"] == {"id": "t3_pq1", "spam": "true"}
    assert session.calls[1]["url"] == "https://oauth.reddit.com/api/compose"
    assert session.calls[1]["data"]["to"] == "/u/someone"


def test_from_config_copies_settings():
    config = ClientConfig(client_id="cid", client_secret="secret", username="bot", user_agent="agent/2", debug=True)

    api = RedditAPI.from_config(config, session=FakeSession())

    assert api.user_agent == "agent/2"
    assert api.debug is True
    assert api.account.username == "bot"
