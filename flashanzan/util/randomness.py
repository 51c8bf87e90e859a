from __future__ import annotations

"""Randomness helpers for seeding and drill RNG construction."""

import os
import random
from typing import Optional


def seed_if_needed() -> Optional[int]:
    """Seed the global RNG if the SEED env var is set.

    Returns the seed that was applied, or None.
    """
    seed = os.environ.get("SEED")
    if seed is None:
        return None
    try:
        s = int(seed)
    except ValueError:
        print(f"WARNING: Ignoring non-integer SEED '{seed}'.")
        return None
    random.seed(s)
    return s


def make_rng(seed: Optional[int] = None) -> random.Random:
    """Return a dedicated RNG, seeded when a seed is given."""
    return random.Random(seed) if seed is not None else random.Random()
