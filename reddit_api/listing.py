"""Decoding of Reddit listing responses into posts and comment trees.

A listing is the platform's collection envelope::

    {"kind": "Listing", "data": {"children": [{"kind": "t1", "data": {...}}, ...]}}

The comments endpoint of a post returns a two element array of listings: the
first holds the post itself, the second its top-level comments. Each comment
carries its own replies in ``data["replies"]``, which is either another
listing, that listing encoded once more as a JSON string, or the empty string
when there are no replies.
"""
from __future__ import annotations

import json
import logging
from dataclasses import replace
from typing import Any, Iterable, List, Mapping, NamedTuple

from .errors import DecodeError, MalformedEnvelope, MalformedThing, UnexpectedChildCount
from .models import MORE_KIND, Comment, Post, Thing, ThingKind
from .scalars import ZERO_TIMESTAMP, decode_timestamp

logger = logging.getLogger(__name__)

# Raw JSON text of an empty string, the "no replies" marker.
EMPTY_REPLIES = '""'

_STRING = "string"
_INTEGER = "integer"
_BOOLEAN = "boolean"
_TIMESTAMP = "timestamp"

_DEFAULTS: dict[str, Any] = {
    _STRING: "",
    _INTEGER: 0,
    _BOOLEAN: False,
    _TIMESTAMP: ZERO_TIMESTAMP,
}

# (attribute, wire key, wire type, required)
_THING_FIELDS = (
    ("id", "id", _STRING, True),
    ("name", "name", _STRING, True),
    ("author", "author", _STRING, True),
    ("subreddit", "subreddit", _STRING, True),
    ("created_utc", "created_utc", _TIMESTAMP, True),
    ("author_fullname", "author_fullname", _STRING, False),
    ("subreddit_id", "subreddit_id", _STRING, False),
    ("subreddit_type", "subreddit_type", _STRING, False),
    ("edited", "edited", _TIMESTAMP, False),
    ("score", "score", _INTEGER, False),
    ("ups", "ups", _INTEGER, False),
    ("downs", "downs", _INTEGER, False),
    ("gilded", "gilded", _INTEGER, False),
    ("saved", "saved", _BOOLEAN, False),
    ("archived", "archived", _BOOLEAN, False),
    ("removed", "removed", _BOOLEAN, False),
    ("spoiler", "spoiler", _BOOLEAN, False),
    ("locked", "locked", _BOOLEAN, False),
    ("stickied", "stickied", _BOOLEAN, False),
    ("approved", "approved", _BOOLEAN, False),
    ("contest_mode", "contest_mode", _BOOLEAN, False),
)

_POST_FIELDS = _THING_FIELDS + (
    ("title", "title", _STRING, False),
    ("selftext", "selftext", _STRING, False),
    ("url", "url", _STRING, False),
    ("permalink", "permalink", _STRING, False),
    ("is_self", "is_self", _BOOLEAN, False),
    ("over_18", "over_18", _BOOLEAN, False),
    ("quarantine", "quarantine", _BOOLEAN, False),
    ("hidden", "hidden", _BOOLEAN, False),
    ("num_comments", "num_comments", _INTEGER, False),
)

_COMMENT_FIELDS = _THING_FIELDS + (
    ("body", "body", _STRING, True),
    ("parent_id", "parent_id", _STRING, True),
    ("link_id", "link_id", _STRING, False),
    ("permalink", "permalink", _STRING, False),
    ("depth", "depth", _INTEGER, False),
)


class RawThing(NamedTuple):
    """One listing child before its payload has been decoded."""

    kind: str | None
    data: Mapping[str, Any]


def _load_json(raw: Any, *, what: str) -> Any:
    if isinstance(raw, (str, bytes, bytearray)):
        try:
            return json.loads(raw)
        except ValueError as exc:
            raise MalformedEnvelope(f"{what} is not valid JSON: {exc}") from exc
    return raw


def unwrap_listing(raw: Any) -> List[RawThing]:
    """Strip a listing envelope and return its children in server order.

    Only the envelope is validated; the ``data`` payload of each child is
    handed back untouched.
    """
    listing = _load_json(raw, what="Listing")
    if not isinstance(listing, Mapping):
        raise MalformedEnvelope(f"Listing must be a JSON object, got {type(listing).__name__}")
    data = listing.get("data")
    if not isinstance(data, Mapping):
        raise MalformedEnvelope("Listing is missing its 'data' object")
    children = data.get("children")
    if not isinstance(children, list):
        raise MalformedEnvelope("Listing data is missing its 'children' array")

    unwrapped: List[RawThing] = []
    for index, child in enumerate(children):
        if not isinstance(child, Mapping) or not isinstance(child.get("data"), Mapping):
            raise MalformedEnvelope(f"Listing child {index} has no 'data' object")
        kind = child.get("kind")
        if kind is not None and not isinstance(kind, str):
            raise MalformedEnvelope(f"Listing child {index} has a non-string kind")
        unwrapped.append(RawThing(kind, child["data"]))
    return unwrapped


def _decode_field(payload: Mapping[str, Any], key: str, wire_type: str, required: bool) -> Any:
    value = payload.get(key)
    if value is None:
        if required:
            raise MalformedThing(f"Missing required field '{key}'", field=key)
        return _DEFAULTS[wire_type]

    if wire_type == _TIMESTAMP:
        # Only JSON numbers and booleans; a quoted "false" is not the unset quirk.
        if not isinstance(value, (bool, int, float)):
            raise MalformedThing(
                f"Field '{key}' should be timestamp, got {type(value).__name__}",
                field=key,
            )
        return decode_timestamp(value)
    if wire_type == _STRING:
        valid = isinstance(value, str)
    elif wire_type == _BOOLEAN:
        valid = isinstance(value, bool)
    else:
        valid = isinstance(value, int) and not isinstance(value, bool)
    if not valid:
        raise MalformedThing(
            f"Field '{key}' should be {wire_type}, got {type(value).__name__}",
            field=key,
        )
    return value


def decode_thing(
    payload: Mapping[str, Any],
    expected: ThingKind,
    *,
    kind: str | None = None,
) -> Post | Comment:
    """Decode one listing child payload into a :class:`Post` or :class:`Comment`.

    ``kind`` is the child's tag from the enclosing listing, checked against
    ``expected`` when present. The replies of a comment are left empty here;
    :func:`build_replies` materialises them.
    """
    expected = ThingKind(expected)
    if kind is not None and kind != expected.value:
        raise MalformedThing(f"Expected a {expected.label} ({expected.value}), got kind {kind!r}")
    if not isinstance(payload, Mapping):
        raise MalformedThing(f"A {expected.label} payload must be a JSON object")

    if expected is ThingKind.POST:
        spec, record_type = _POST_FIELDS, Post
    else:
        spec, record_type = _COMMENT_FIELDS, Comment

    values = {
        attr: _decode_field(payload, key, wire_type, required)
        for attr, key, wire_type, required in spec
    }
    return record_type(**values)


def _replies_listing(raw: Any) -> Mapping[str, Any] | None:
    # Strings are unwrapped one JSON layer at a time until a listing object or
    # the empty marker is reached; each layer is strictly shorter than the last.
    payload = raw
    while True:
        if payload is None:
            return None
        if isinstance(payload, Mapping):
            return payload
        if isinstance(payload, (bytes, bytearray)):
            try:
                payload = bytes(payload).decode("utf-8")
            except UnicodeDecodeError as exc:
                raise MalformedEnvelope(f"Replies payload is not UTF-8: {exc}") from exc
        if not isinstance(payload, str):
            raise MalformedEnvelope(f"Unsupported replies payload of type {type(payload).__name__}")
        text = payload.strip()
        if text in ("", EMPTY_REPLIES):
            return None
        try:
            payload = json.loads(text)
        except ValueError as exc:
            raise MalformedEnvelope(f"Replies payload is not valid JSON: {exc}") from exc


def _describe(child: RawThing) -> str:
    name = child.data.get("name")
    return name if isinstance(name, str) and name else "<unnamed>"


def _build_comment(child: RawThing, *, strict: bool) -> Comment:
    comment = decode_thing(child.data, ThingKind.COMMENT, kind=child.kind)
    replies = build_replies(child.data.get("replies"), strict=strict)
    return replace(comment, replies=replies)


def _build_comments(children: Iterable[RawThing], *, strict: bool) -> tuple[Comment, ...]:
    built: List[Comment] = []
    for child in children:
        if child.kind == MORE_KIND:
            logger.debug("Skipping 'more' stub %s", _describe(child))
            continue
        if strict:
            built.append(_build_comment(child, strict=True))
            continue
        try:
            built.append(_build_comment(child, strict=False))
        except DecodeError as exc:
            logger.warning("Dropping comment branch %s: %s", _describe(child), exc)
    return tuple(built)


def build_replies(raw_replies: Any, *, strict: bool = True) -> tuple[Comment, ...]:
    """Materialise the reply tree stored in a comment's ``replies`` field.

    Children are decoded in listing order and each child's own replies are
    built before it is attached, so the result is a fully populated tree.
    In strict mode any failure below this point propagates and no partial tree
    is returned. With ``strict=False`` a failing branch is logged and dropped
    while its siblings are kept.

    Recursion depth follows the comment nesting depth, which the platform
    caps, so the call stack is not guarded here.
    """
    if strict:
        listing = _replies_listing(raw_replies)
        if listing is None:
            return ()
        return _build_comments(unwrap_listing(listing), strict=True)

    try:
        listing = _replies_listing(raw_replies)
        children = unwrap_listing(listing) if listing is not None else []
    except DecodeError as exc:
        logger.warning("Dropping unreadable replies listing: %s", exc)
        return ()
    return _build_comments(children, strict=False)


def decode_listing(raw: Any, expected: ThingKind, *, strict: bool = True) -> List[Thing]:
    """Decode every child of a single listing, e.g. a subreddit or user page.

    Comment children get their reply trees built; ``more`` stubs are skipped.
    """
    expected = ThingKind(expected)
    children = unwrap_listing(raw)
    if expected is ThingKind.COMMENT:
        return list(_build_comments(children, strict=strict))
    return [
        decode_thing(child.data, expected, kind=child.kind)
        for child in children
        if child.kind != MORE_KIND
    ]


def assemble_post(raw: Any, *, strict: bool = True) -> Post:
    """Decode a post comments response into a :class:`Post` with its comment forest.

    ``raw`` is the two element array returned by the comments endpoint, either
    already parsed or as JSON text. Errors in the post listing always
    propagate; ``strict`` controls how failures inside the comment forest are
    handled, as for :func:`build_replies`.
    """
    document = _load_json(raw, what="Comments response")
    if not isinstance(document, list) or len(document) != 2:
        raise MalformedEnvelope("Comments response must be a JSON array of two listings")

    post_children = unwrap_listing(document[0])
    if len(post_children) != 1:
        raise UnexpectedChildCount(len(post_children))
    post_child = post_children[0]
    post = decode_thing(post_child.data, ThingKind.POST, kind=post_child.kind)

    comments = _build_comments(unwrap_listing(document[1]), strict=strict)
    return replace(post, replies=comments)


__all__ = [
    "EMPTY_REPLIES",
    "RawThing",
    "assemble_post",
    "build_replies",
    "decode_listing",
    "decode_thing",
    "unwrap_listing",
]
