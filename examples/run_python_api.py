from __future__ import annotations

import os

from reddit_api import ClientConfig, RedditAPI, sort_by_score


def main() -> None:
    """Demonstrate the Python API by printing the best replies of a post."""
    config = ClientConfig.from_env()
    api = RedditAPI.from_config(config)
    api.login(config.password)

    url = os.environ.get("REDDIT_EXAMPLE_POST", "/r/python/comments/1b2c3d/example/")
    post = api.request_post(url, strict=False)

    print(f"{post.title} ({post.num_comments} comments)")
    for comment in sort_by_score(post.replies, descending=True)[:5]:
        print(f"  {comment.score:>5}  {comment.author}: {comment.body[:80]}")
        print(f"         thread depth {comment.max_depth()}, {sum(1 for _ in comment.walk())} comments")


if __name__ == "__main__":
    main()
