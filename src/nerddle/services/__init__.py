"""Domain services over the persistent store."""

from nerddle.services.base import (
    AuthenticationError,
    AuthorizationError,
    NerddleError,
    RateLimitError,
    ValidationError,
)
from nerddle.services.blog import BlogService
from nerddle.services.reputation import AuraTier, classify, compute_aura, tally
from nerddle.services.session import SessionManager
from nerddle.services.store import KeyValueMedium, PersistentStore, SqlKeyValueMedium
from nerddle.services.users import UserService

__all__ = [
    # Errors
    "NerddleError",
    "ValidationError",
    "AuthenticationError",
    "AuthorizationError",
    "RateLimitError",
    # Store
    "KeyValueMedium",
    "SqlKeyValueMedium",
    "PersistentStore",
    # Services
    "SessionManager",
    "UserService",
    "BlogService",
    # Reputation
    "AuraTier",
    "classify",
    "compute_aura",
    "tally",
]
