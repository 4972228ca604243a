"""Typed, immutable records decoded from Reddit listings."""
from __future__ import annotations

from dataclasses import dataclass, fields
from datetime import datetime
from enum import Enum
from typing import Any, Iterable, Iterator, List

from .scalars import ZERO_TIMESTAMP, encode_timestamp, is_zero_timestamp


class ThingKind(str, Enum):
    """Fullname prefixes of the thing kinds this client decodes."""

    COMMENT = "t1"
    POST = "t3"

    @property
    def label(self) -> str:
        return "comment" if self is ThingKind.COMMENT else "post"


# Kind tag of the "load more comments" stubs found at the end of comment listings.
MORE_KIND = "more"


@dataclass(frozen=True, slots=True, kw_only=True)
class Thing:
    """Fields shared by posts and comments."""

    id: str
    name: str
    author: str
    subreddit: str
    created_utc: datetime
    author_fullname: str = ""
    subreddit_id: str = ""
    subreddit_type: str = ""
    edited: datetime = ZERO_TIMESTAMP
    score: int = 0
    ups: int = 0
    downs: int = 0
    gilded: int = 0
    saved: bool = False
    archived: bool = False
    removed: bool = False
    spoiler: bool = False
    locked: bool = False
    stickied: bool = False
    approved: bool = False
    contest_mode: bool = False

    @property
    def is_edited(self) -> bool:
        return not is_zero_timestamp(self.edited)


@dataclass(frozen=True, slots=True, kw_only=True)
class Comment(Thing):
    """A comment together with the replies it owns."""

    body: str
    parent_id: str
    link_id: str = ""
    permalink: str = ""
    depth: int = 0
    replies: tuple[Comment, ...] = ()

    def walk(self) -> Iterator[Comment]:
        """Yield this comment and every descendant, depth-first pre-order."""
        yield self
        for reply in self.replies:
            yield from reply.walk()

    def max_depth(self) -> int:
        """Number of levels in this subtree; a comment without replies has depth 1."""
        if not self.replies:
            return 1
        return 1 + max(reply.max_depth() for reply in self.replies)

    @property
    def is_top_level(self) -> bool:
        return self.parent_id.startswith(f"{ThingKind.POST.value}_")


@dataclass(frozen=True, slots=True, kw_only=True)
class Post(Thing):
    """A submission and its top-level comment forest."""

    title: str = ""
    selftext: str = ""
    url: str = ""
    permalink: str = ""
    is_self: bool = False
    over_18: bool = False
    quarantine: bool = False
    hidden: bool = False
    num_comments: int = 0
    replies: tuple[Comment, ...] = ()

    def walk_comments(self) -> Iterator[Comment]:
        for comment in self.replies:
            yield from comment.walk()

    def max_depth(self) -> int:
        """Deepest comment nesting below this post, 0 when there are no comments."""
        if not self.replies:
            return 0
        return max(comment.max_depth() for comment in self.replies)


def sort_by_score(comments: Iterable[Comment], *, descending: bool = False) -> List[Comment]:
    """Return ``comments`` ordered by score; ties keep their listing order."""
    return sorted(comments, key=lambda comment: comment.score, reverse=descending)


def thing_to_dict(thing: Thing) -> dict[str, Any]:
    """Convert a decoded record back into plain JSON-compatible data."""
    record: dict[str, Any] = {}
    for item in fields(thing):
        value = getattr(thing, item.name)
        if isinstance(value, datetime):
            value = encode_timestamp(value)
        elif item.name == "replies":
            value = [thing_to_dict(reply) for reply in value]
        record[item.name] = value
    return record


__all__ = [
    "MORE_KIND",
    "Comment",
    "Post",
    "Thing",
    "ThingKind",
    "sort_by_score",
    "thing_to_dict",
]
