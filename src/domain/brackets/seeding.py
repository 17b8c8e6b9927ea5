"""Seed ordering and slot placement for single-elimination brackets."""

from __future__ import annotations

import random
from collections.abc import Sequence

from domain.brackets.models import SeedingPolicy
from domain.common import Competitor


def next_power_of_two(value: int) -> int:
    if value < 1:
        raise ValueError(f"value must be >= 1 (got {value})")
    return 1 << (value - 1).bit_length()


def standard_seed_order(bracket_size: int) -> list[int]:
    """Seed numbers in first-round slot order.

    Slots ``2i`` and ``2i + 1`` meet in round 1. Seeds ``s`` and
    ``bracket_size + 1 - s`` are paired, and seeds 1 and 2 can only meet in
    the final. For 8 slots this is ``[1, 8, 4, 5, 2, 7, 3, 6]``.
    """
    if bracket_size < 2 or bracket_size & (bracket_size - 1):
        raise ValueError(f"bracket_size must be a power of two >= 2 (got {bracket_size})")

    order = [1]
    while len(order) < bracket_size:
        mirror = len(order) * 2 + 1
        order = [seed for existing in order for seed in (existing, mirror - existing)]
    return order


def order_registrants(
    registrants: Sequence[Competitor],
    policy: SeedingPolicy,
    *,
    rng: random.Random | None = None,
) -> list[Competitor]:
    """Return registrants with the top seed first."""
    if policy is SeedingPolicy.REGISTRATION_ORDER:
        return list(registrants)
    if policy is SeedingPolicy.RATING:
        # sorted() is stable, so equal ratings keep registration order.
        return sorted(registrants, key=lambda competitor: competitor.seeding_rating, reverse=True)
    if policy is SeedingPolicy.RANDOM:
        shuffled = list(registrants)
        (rng or random.Random()).shuffle(shuffled)
        return shuffled
    raise ValueError(f"Unsupported seeding policy: {policy!r}")


__all__ = ["next_power_of_two", "order_registrants", "standard_seed_order"]
