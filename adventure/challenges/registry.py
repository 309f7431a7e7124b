from __future__ import annotations

import random
import re
from collections.abc import Iterable
from typing import Protocol

from adventure.api.models import Session
from adventure.challenges.contract import Challenge
from adventure.errors import ChallengeConfigurationError, ChallengeNotRegistered

_ID_RE = re.compile(r"^[a-z][a-z0-9_]*$")


class ChallengeRegistry:
    """Explicit challenge id -> module mapping.

    Modules are checked when they are registered so a bad id or a module that does
    not satisfy the contract fails at startup, not on the first node click.
    """

    def __init__(self, challenges: Iterable[Challenge] = ()) -> None:
        self._by_id: dict[str, Challenge] = {}
        for c in challenges:
            self.register(c)

    def register(self, challenge: Challenge) -> None:
        if not isinstance(challenge, Challenge):
            raise ChallengeConfigurationError(f"Not a challenge module: {challenge!r}")
        cid = challenge.info.id
        if not _ID_RE.match(cid):
            raise ChallengeConfigurationError(f"Invalid challenge id: {cid!r}")
        if cid in self._by_id:
            raise ChallengeConfigurationError(f"Duplicate challenge id: {cid}")
        self._by_id[cid] = challenge

    def get(self, challenge_id: str) -> Challenge | None:
        return self._by_id.get(challenge_id)

    def require(self, challenge_id: str) -> Challenge:
        challenge = self._by_id.get(challenge_id)
        if challenge is None:
            raise ChallengeNotRegistered(challenge_id)
        return challenge

    def validate_ids(self, ids: Iterable[str]) -> None:
        missing = sorted(set(ids) - set(self._by_id))
        if missing:
            raise ChallengeConfigurationError(f"Challenges not registered: {', '.join(missing)}")

    def ids(self) -> tuple[str, ...]:
        return tuple(sorted(self._by_id))

    def __contains__(self, item: object) -> bool:
        return isinstance(item, str) and item in self._by_id

    def __len__(self) -> int:
        return len(self._by_id)


class ChallengeSelector(Protocol):
    def select(self, node: int, session: Session) -> str: ...


class FixedSelector:
    """Always the same challenge, whatever the node."""

    def __init__(self, challenge_id: str, *, registry: ChallengeRegistry) -> None:
        registry.validate_ids([challenge_id])
        self.challenge_id = challenge_id

    def select(self, node: int, session: Session) -> str:
        return self.challenge_id


class RandomSelector:
    """Uniform choice among a set of registered challenges."""

    def __init__(
        self,
        challenge_ids: Iterable[str],
        *,
        registry: ChallengeRegistry,
        rng: random.Random | None = None,
    ) -> None:
        ids = tuple(sorted(set(challenge_ids)))
        if not ids:
            raise ChallengeConfigurationError("RandomSelector needs at least one challenge id")
        registry.validate_ids(ids)
        self.challenge_ids = ids
        self._rng = rng or random.Random()

    def select(self, node: int, session: Session) -> str:
        return self._rng.choice(self.challenge_ids)
