"""
Evaluator Directory - Fixed pool of on-site evaluators

Evaluators are seeded once and only ever selected, never created or deleted
through the order engine. Selection is uniform over the pool; the random
source is injected so tests can pin the choice.
"""

from __future__ import annotations

import random
from typing import Final, Iterable, Optional

from core.orders.schema import Evaluator


DEFAULT_EVALUATORS: Final[tuple[Evaluator, ...]] = (
    Evaluator(
        id="EVAL-001",
        name="Sarah Chen",
        rating=4.9,
        evaluations_completed=214,
        bio="Certified home inspector focused on older rental stock.",
        avatar_url="https://i.pravatar.cc/150?u=eval-001",
    ),
    Evaluator(
        id="EVAL-002",
        name="Marcus Johnson",
        rating=4.7,
        evaluations_completed=168,
        bio="Former property manager with an eye for maintenance issues.",
        avatar_url="https://i.pravatar.cc/150?u=eval-002",
    ),
    Evaluator(
        id="EVAL-003",
        name="Priya Patel",
        rating=4.8,
        evaluations_completed=131,
        bio="Residential evaluator specialising in condos and townhomes.",
        avatar_url="https://i.pravatar.cc/150?u=eval-003",
    ),
    Evaluator(
        id="EVAL-004",
        name="David Kim",
        rating=4.6,
        evaluations_completed=97,
        bio="Licensed contractor reviewing structure, plumbing and electrical.",
        avatar_url="https://i.pravatar.cc/150?u=eval-004",
    ),
    Evaluator(
        id="EVAL-005",
        name="Emma Rodriguez",
        rating=4.9,
        evaluations_completed=256,
        bio="Detailed photo and video walkthroughs for remote renters.",
        avatar_url="https://i.pravatar.cc/150?u=eval-005",
    ),
)


class EvaluatorDirectory:
    """Read-only evaluator pool with uniform random selection."""

    def __init__(
        self,
        evaluators: Optional[Iterable[Evaluator]] = None,
        rng: Optional[random.Random] = None,
    ):
        """
        Args:
            evaluators: Pool to select from (defaults to DEFAULT_EVALUATORS)
            rng: Random source; pass random.Random(seed) for deterministic picks
        """
        pool = tuple(evaluators) if evaluators is not None else DEFAULT_EVALUATORS
        if not pool:
            raise ValueError("Evaluator pool must not be empty")
        self._evaluators = pool
        self._rng = rng or random.Random()

    def pick_random(self) -> Evaluator:
        """Pick one evaluator uniformly at random."""
        return self._rng.choice(self._evaluators)

    def list_all(self) -> list[Evaluator]:
        return list(self._evaluators)

    def get_by_id(self, evaluator_id: str) -> Optional[Evaluator]:
        for evaluator in self._evaluators:
            if evaluator.id == evaluator_id:
                return evaluator
        return None

    def count(self) -> int:
        return len(self._evaluators)
