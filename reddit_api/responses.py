"""Flat API responses and the error conventions of Reddit's endpoints."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping

from .errors import RedditAPIError
from .scalars import ZERO_TIMESTAMP, decode_timestamp


def check_base_error(payload: Any) -> None:
    """Raise when a plain endpoint answers with ``{"error": <code>, "message": ...}``."""
    if not isinstance(payload, Mapping):
        return
    code = payload.get("error")
    if code:
        raise RedditAPIError(f"reddit error '{code}': {payload.get('message', '')}")


def check_json_errors(payload: Any, operation: str) -> None:
    """Raise for the ``api_type=json`` error envelope ``{"json": {"errors": [...]}}``."""
    if not isinstance(payload, Mapping):
        return
    message = payload.get("message")
    if message:
        raise RedditAPIError(f"reddit error: {message}")
    body = payload.get("json")
    if not isinstance(body, Mapping):
        return
    errors = body.get("errors") or []
    if not errors:
        return
    if len(errors) > 1:
        raise RedditAPIError(f"{operation}: too many errors")
    detail = errors[0]
    if isinstance(detail, (list, tuple)):
        detail = " ".join(str(part) for part in detail)
    raise RedditAPIError(f"{operation}: {detail}")


@dataclass(frozen=True, slots=True)
class MeResponse:
    """The authenticated account as reported by ``/api/v1/me``."""

    id: str
    name: str
    comment_karma: int = 0
    link_karma: int = 0
    created: datetime = ZERO_TIMESTAMP
    created_utc: datetime = ZERO_TIMESTAMP
    has_mail: bool = False
    has_mod_mail: bool = False
    has_verified_email: bool = False
    is_gold: bool = False
    is_mod: bool = False
    over_18: bool = False

    @classmethod
    def from_json(cls, payload: Mapping[str, Any]) -> MeResponse:
        check_base_error(payload)
        return cls(
            id=str(payload.get("id") or ""),
            name=str(payload.get("name") or ""),
            comment_karma=int(payload.get("comment_karma") or 0),
            link_karma=int(payload.get("link_karma") or 0),
            created=decode_timestamp(payload.get("created", False)),
            created_utc=decode_timestamp(payload.get("created_utc", False)),
            has_mail=bool(payload.get("has_mail")),
            has_mod_mail=bool(payload.get("has_mod_mail")),
            has_verified_email=bool(payload.get("has_verified_email")),
            is_gold=bool(payload.get("is_gold")),
            is_mod=bool(payload.get("is_mod")),
            over_18=bool(payload.get("over_18")),
        )


@dataclass(frozen=True, slots=True)
class StylesheetImage:
    """An image uploaded to a subreddit for use in its stylesheet."""

    url: str
    link: str
    name: str


@dataclass(frozen=True, slots=True)
class StylesheetTemplate:
    """Stylesheet source with ``%%name%%`` placeholders instead of image URLs."""

    stylesheet: str
    images: tuple[StylesheetImage, ...] = ()

    @classmethod
    def from_json(cls, payload: Mapping[str, Any]) -> StylesheetTemplate:
        check_base_error(payload)
        kind = payload.get("kind")
        if kind != "stylesheet":
            raise RedditAPIError(f"unexpected kind: {kind}")
        data = payload.get("data") or {}
        images = tuple(
            StylesheetImage(
                url=str(image.get("url") or ""),
                link=str(image.get("link") or ""),
                name=str(image.get("name") or ""),
            )
            for image in data.get("images") or []
            if isinstance(image, Mapping)
        )
        return cls(stylesheet=str(data.get("stylesheet") or ""), images=images)


@dataclass(frozen=True, slots=True)
class SubmitPostData:
    """Identifiers of a freshly submitted post."""

    id: str
    name: str
    url: str = ""
    drafts_count: int = 0

    @classmethod
    def from_json(cls, payload: Mapping[str, Any]) -> SubmitPostData:
        check_json_errors(payload, "SubmitPost")
        data = (payload.get("json") or {}).get("data") or {}
        post_id = str(data.get("id") or "")
        if not post_id:
            raise RedditAPIError("SubmitPost: empty post ID")
        return cls(
            id=post_id,
            name=str(data.get("name") or ""),
            url=str(data.get("url") or ""),
            drafts_count=int(data.get("drafts_count") or 0),
        )


__all__ = [
    "MeResponse",
    "StylesheetImage",
    "StylesheetTemplate",
    "SubmitPostData",
    "check_base_error",
    "check_json_errors",
]
