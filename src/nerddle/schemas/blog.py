"""Pydantic schemas for blog posts and their ballots."""

from collections.abc import Mapping
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from nerddle.schemas.base import as_utc

Ballot = Literal[1, -1]

UPVOTE: Ballot = 1
DOWNVOTE: Ballot = -1


class VoteTally(BaseModel):
    """Up/down ballot counts for one or more posts."""

    up: int = 0
    down: int = 0

    @property
    def delta(self) -> int:
        """Net vote signal."""
        return self.up - self.down


def tally(votes: Mapping[str, int]) -> VoteTally:
    """Count up and down ballots. Values other than +1/-1 are ignored."""
    up = sum(1 for v in votes.values() if v == UPVOTE)
    down = sum(1 for v in votes.values() if v == DOWNVOTE)
    return VoteTally(up=up, down=down)


class BlogPost(BaseModel):
    """A stored text blog post with its per-voter ballots."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    title: str
    body: str
    author: str
    created_at: datetime
    votes: dict[str, Ballot] = Field(default_factory=dict)

    @field_validator("created_at")
    @classmethod
    def validate_created_at(cls, v: datetime) -> datetime:
        """Store creation times in UTC so they stay comparable."""
        return as_utc(v)

    @property
    def tally(self) -> VoteTally:
        """Ballot counts recomputed from the current votes."""
        return tally(self.votes)
