"""
Tier Resolver - maps a people count to a group size tier.

Tiers are scanned in declaration order. Overlapping ranges are a
configuration defect; when they occur the earliest-declared matching
tier wins.
"""
from typing import Sequence

from .errors import NoMatchingTier
from .models import GroupSizeTier


def resolve_tier(people: int, tiers: Sequence[GroupSizeTier]) -> tuple[int, GroupSizeTier]:
    """
    Find the first tier whose [min_people, max_people] contains `people`.

    Returns (tier_index, tier). Raises NoMatchingTier if none does.
    """
    for index, tier in enumerate(tiers):
        if tier.contains(people):
            return index, tier

    max_people = max((t.max_people for t in tiers), default=None)
    raise NoMatchingTier(people, max_people)
