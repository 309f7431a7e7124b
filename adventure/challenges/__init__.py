"""Challenge contract, registry, and the bundled challenge modules."""
from __future__ import annotations

import random

from adventure.challenges.math_add import MathAddChallenge
from adventure.challenges.memory import MemoryChallenge
from adventure.challenges.pattern import PatternChallenge
from adventure.challenges.registry import ChallengeRegistry


def default_registry(*, rng: random.Random | None = None) -> ChallengeRegistry:
    return ChallengeRegistry([
        MathAddChallenge(rng=rng),
        MemoryChallenge(rng=rng),
        PatternChallenge(rng=rng),
    ])
