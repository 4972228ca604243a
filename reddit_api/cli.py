"""Command line entry point for the Reddit API client."""
from __future__ import annotations

import argparse
import json
import logging
import textwrap
from typing import List, Sequence

import requests

from .api import RedditAPI
from .config import ClientConfig
from .errors import RedditError
from .models import Comment, Post, sort_by_score, thing_to_dict

BODY_PREVIEW_WIDTH = 120


def render_post(post: Post, *, by_score: bool = False) -> str:
    """Render a post and its comment tree as indented text."""
    lines: List[str] = [
        f"{post.title or post.name} by {post.author} "
        f"({post.score} points, {post.num_comments} comments)"
    ]

    def visit(comments: Sequence[Comment], depth: int) -> None:
        ordered = sort_by_score(comments, descending=True) if by_score else comments
        for comment in ordered:
            body = textwrap.shorten(" ".join(comment.body.split()) or "-", BODY_PREVIEW_WIDTH, placeholder="...")
            lines.append(f"{'  ' * depth}- {comment.author} ({comment.score}): {body}")
            visit(comment.replies, depth + 1)

    visit(post.replies, 1)
    return "\n".join(lines)


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description=(
            "Query the Reddit API with an authenticated account. Credentials are read from "
            "REDDIT_CLIENT_ID, REDDIT_CLIENT_SECRET, REDDIT_USERNAME and REDDIT_PASSWORD."
        )
    )
    parser.add_argument(
        "--user-agent",
        default=None,
        help="User-Agent header to send (default: REDDIT_USER_AGENT or a built-in value).",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Log every request and response body.",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"],
        help="Logging verbosity (default: INFO).",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    post_parser = subparsers.add_parser("post", help="Fetch a post with its full comment tree.")
    post_parser.add_argument("url", help="Post permalink, absolute or starting with /r/.")
    post_parser.add_argument(
        "--tolerant",
        action="store_true",
        help="Drop comment branches that fail to decode instead of aborting.",
    )
    post_parser.add_argument(
        "--format",
        choices=["tree", "json"],
        default="tree",
        help="Print an indented comment tree or the decoded post as JSON (default: tree).",
    )
    post_parser.add_argument(
        "--sort",
        choices=["listing", "score"],
        default="listing",
        help="Order replies as listed by Reddit or by descending score (default: listing).",
    )

    subparsers.add_parser("me", help="Show the authenticated account.")
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> None:
    args = parse_args(argv)

    log_level = getattr(logging, args.log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        force=True,
    )
    logging.getLogger("urllib3").setLevel(logging.WARNING)

    try:
        config = ClientConfig.from_env()
    except ValueError as exc:
        raise SystemExit(f"Invalid configuration: {exc}") from exc
    if args.user_agent:
        config.user_agent = args.user_agent
    config.debug = config.debug or args.debug
    if not config.can_login:
        raise SystemExit("REDDIT_USERNAME and REDDIT_PASSWORD must be set to log in.")

    api = RedditAPI.from_config(config)
    try:
        api.login(config.password)
        if args.command == "me":
            me = api.request_me()
            print(f"{me.name} (id={me.id}) link karma={me.link_karma} comment karma={me.comment_karma}")
            return

        post = api.request_post(args.url, strict=not args.tolerant)
    except (RedditError, requests.RequestException) as exc:
        raise SystemExit(f"Request failed: {exc}") from exc

    if args.format == "json":
        print(json.dumps(thing_to_dict(post), indent=2, ensure_ascii=False))
    else:
        print(render_post(post, by_score=args.sort == "score"))


if __name__ == "__main__":
    main()
