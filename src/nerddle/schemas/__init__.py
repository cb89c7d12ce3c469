"""Pydantic schemas for stored records and user input."""

from nerddle.schemas.blog import DOWNVOTE, UPVOTE, Ballot, BlogPost, VoteTally, tally
from nerddle.schemas.user import (
    CLASS_LEVELS,
    PLACEHOLDER_PFP,
    User,
    UserCreate,
    UserRole,
    UserUpdate,
)

__all__ = [
    # Blog schemas
    "Ballot",
    "BlogPost",
    "VoteTally",
    "UPVOTE",
    "DOWNVOTE",
    "tally",
    # User schemas
    "CLASS_LEVELS",
    "PLACEHOLDER_PFP",
    "User",
    "UserCreate",
    "UserRole",
    "UserUpdate",
]
