"""Public package surface for the Reddit API client."""
from .api import RedditAPI, build_session
from .config import DEFAULT_USER_AGENT, ClientConfig
from .errors import (
    AuthenticationError,
    DecodeError,
    MalformedEnvelope,
    MalformedScalar,
    MalformedThing,
    RedditAPIError,
    RedditError,
    UnexpectedChildCount,
)
from .listing import (
    assemble_post,
    build_replies,
    decode_listing,
    decode_thing,
    unwrap_listing,
)
from .models import Comment, Post, Thing, ThingKind, sort_by_score
from .scalars import ZERO_TIMESTAMP, decode_timestamp

__version__ = "0.1.0"

__all__ = [
    "AuthenticationError",
    "ClientConfig",
    "Comment",
    "DEFAULT_USER_AGENT",
    "DecodeError",
    "MalformedEnvelope",
    "MalformedScalar",
    "MalformedThing",
    "Post",
    "RedditAPI",
    "RedditAPIError",
    "RedditError",
    "Thing",
    "ThingKind",
    "UnexpectedChildCount",
    "ZERO_TIMESTAMP",
    "assemble_post",
    "build_replies",
    "build_session",
    "decode_listing",
    "decode_thing",
    "decode_timestamp",
    "sort_by_score",
    "unwrap_listing",
    "__version__",
]
