"""
Random number generation for anime selection and character sampling.

Uses stdlib random.Random: picking one anime out of a watch list and a handful
of characters does not need cryptographic or replay-grade streams. A seed can
be passed for deterministic sessions (tests, reproducible demos).
"""

import random
import secrets


def generate_seed() -> int:
    """Generate a 64-bit seed for a new session."""
    return secrets.randbits(64)


def create_game_rng(seed: int | None = None) -> random.Random:
    """Create the RNG owned by one game session."""
    if seed is None:
        seed = generate_seed()
    if seed < 0:
        raise ValueError(f"Seed must be non-negative, got {seed}")
    return random.Random(seed)  # noqa: S311
