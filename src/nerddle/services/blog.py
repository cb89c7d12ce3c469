"""Blog posting with a per-author cooldown, and per-voter ballot toggling."""

import logging
import math
import uuid
from datetime import datetime, timedelta

from nerddle.config import Settings
from nerddle.schemas.base import as_utc, utcnow
from nerddle.schemas.blog import DOWNVOTE, UPVOTE, BlogPost
from nerddle.services.base import AuthenticationError, RateLimitError, ValidationError
from nerddle.services.reputation import compute_aura
from nerddle.services.store import PersistentStore

logger = logging.getLogger(__name__)


def _new_post_id(taken: set[str]) -> str:
    while True:
        post_id = f"b_{uuid.uuid4().hex[:10]}"
        if post_id not in taken:
            return post_id


class BlogService:
    """Creates posts and records ballots against the persistent store."""

    def __init__(self, store: PersistentStore, settings: Settings) -> None:
        self.store = store
        self.cooldown = timedelta(seconds=settings.post_cooldown_seconds)

    def list_posts(self) -> list[BlogPost]:
        """All posts, most recent first."""
        return sorted(self.store.load_posts(), key=lambda p: p.created_at, reverse=True)

    def posts_by(self, author: str) -> list[BlogPost]:
        return [post for post in self.list_posts() if post.author == author]

    def get_post(self, post_id: str) -> BlogPost | None:
        return next((post for post in self.store.load_posts() if post.id == post_id), None)

    def aura_for(self, username: str) -> int:
        return compute_aura(username, self.store.load_posts())

    def _last_post_at(self, author: str, posts: list[BlogPost]) -> datetime | None:
        # max() keeps the first of equal timestamps, i.e. stored order
        authored = [post.created_at for post in posts if post.author == author]
        return max(authored, default=None)

    def _retry_after(self, author: str, posts: list[BlogPost], now: datetime) -> int:
        """Whole seconds until author may post again, 0 if allowed now."""
        last = self._last_post_at(author, posts)
        if last is None:
            return 0
        remaining = (last + self.cooldown - now).total_seconds()
        return max(0, math.ceil(remaining))

    def can_post(self, author: str, now: datetime | None = None) -> bool:
        """Check whether author has no posts or the cooldown since the last one has elapsed."""
        now = utcnow() if now is None else as_utc(now)
        return self._retry_after(author, self.store.load_posts(), now) == 0

    def create_post(
        self,
        author: str | None,
        title: str,
        body: str,
        now: datetime | None = None,
    ) -> BlogPost:
        """Create a post and put it at the front of the stored list.

        Raises:
            AuthenticationError: If there is no author.
            ValidationError: If title or body is blank.
            RateLimitError: If the author posted within the cooldown.
        """
        if not author:
            raise AuthenticationError("Please login to create blogs")

        title = (title or "").strip()
        body = (body or "").strip()
        if not title or not body:
            raise ValidationError("Title and body required")

        now = utcnow() if now is None else as_utc(now)
        posts = self.store.load_posts()
        retry_after = self._retry_after(author, posts, now)
        if retry_after:
            logger.info("Rate limited post by %r (retry in %ss)", author, retry_after)
            raise RateLimitError(retry_after=retry_after)

        post = BlogPost(
            id=_new_post_id({p.id for p in posts}),
            title=title,
            body=body,
            author=author,
            created_at=now,
            votes={},
        )
        self.store.save_posts([post, *posts])
        logger.info("Created post %s by %r", post.id, author)
        return post

    def toggle_vote(self, post_id: str, voter: str | None, value: int) -> BlogPost | None:
        """Cast, switch or withdraw voter's ballot on a post.

        Repeating the same ballot removes it; the opposite ballot replaces it.
        Returns the updated post, or None if no post has that id.

        Raises:
            AuthenticationError: If there is no voter.
            ValidationError: If value is not +1 or -1.
        """
        if not voter:
            raise AuthenticationError("Please login to vote")
        if type(value) is not int or value not in (UPVOTE, DOWNVOTE):
            raise ValidationError("Vote must be +1 or -1")

        posts = self.store.load_posts()
        for index, post in enumerate(posts):
            if post.id != post_id:
                continue
            votes = dict(post.votes)
            if votes.get(voter) == value:
                del votes[voter]
                logger.debug("%r withdrew ballot on %s", voter, post_id)
            else:
                votes[voter] = value
                logger.debug("%r voted %+d on %s", voter, value, post_id)
            updated = post.model_copy(update={"votes": votes})
            posts[index] = updated
            self.store.save_posts(posts)
            return updated

        return None
