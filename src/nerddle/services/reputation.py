"""Aura (reputation) computed from the ballots on a user's posts."""

import math
from collections.abc import Iterable
from enum import StrEnum

from nerddle.schemas.blog import BlogPost, VoteTally, tally


class AuraTier(StrEnum):
    """Display tier for an aura value."""

    NEUTRAL = "neutral"
    TIER1 = "tier1"
    TIER2 = "tier2"
    TIER3 = "tier3"


def tally_for_author(username: str, posts: Iterable[BlogPost]) -> VoteTally:
    """Sum the ballots across every post authored by username."""
    up = down = 0
    for post in posts:
        if post.author != username:
            continue
        counts = tally(post.votes)
        up += counts.up
        down += counts.down
    return VoteTally(up=up, down=down)


def aura_from_delta(delta: int) -> int:
    """Map a net vote delta to an aura value.

    aura = sign(delta) * ceil(sqrt(|delta| / 100)), and 0 for a zero delta.
    Computed in integers so large deltas stay exact.
    """
    if delta == 0:
        return 0
    # ceil(sqrt(x / 100)) == ceil(sqrt(ceil(x / 100))) for integer x
    n = -(-abs(delta) // 100)
    root = math.isqrt(n)
    if root * root < n:
        root += 1
    return root if delta > 0 else -root


def compute_aura(username: str, posts: Iterable[BlogPost]) -> int:
    return aura_from_delta(tally_for_author(username, posts).delta)


def classify(aura: int) -> AuraTier:
    if aura <= 0:
        return AuraTier.NEUTRAL
    if aura <= 50:
        return AuraTier.TIER1
    if aura <= 500:
        return AuraTier.TIER2
    return AuraTier.TIER3


def is_invited_admin(aura: int) -> bool:
    """Whether to show the "Invited Admin" badge. Grants no role."""
    return classify(aura) == AuraTier.TIER3
