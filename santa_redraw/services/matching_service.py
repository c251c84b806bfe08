from __future__ import annotations

import logging
import random
from typing import Iterable

from santa_redraw.config import MAX_DRAW_ATTEMPTS
from santa_redraw.errors import NoValidMatchingError, UnbalancedPoolError
from santa_redraw.schemas import Assignment


logger = logging.getLogger(__name__)

_system_random = random.SystemRandom()


def shuffle_pools(
    givers: list[str],
    receivers: list[str],
    rng: random.Random,
) -> tuple[list[str], list[str]]:
    giver_order = givers[:]
    receiver_order = receivers[:]
    rng.shuffle(giver_order)
    rng.shuffle(receiver_order)
    return giver_order, receiver_order


def repair_self_pairs(giver_order: list[str], receiver_order: list[str]) -> list[Assignment] | None:
    """
    Single left-to-right pass: a self-pair at i is fixed by swapping the
    receivers at i and i+1; position i+1 is checked again when the walk gets
    there. Returns None when the last position pairs someone with themselves.
    """
    last = len(giver_order) - 1
    pairs = []
    for i, giver in enumerate(giver_order):
        if receiver_order[i] == giver:
            if i == last:
                return None
            receiver_order[i], receiver_order[i + 1] = receiver_order[i + 1], receiver_order[i]
        pairs.append(Assignment(giver=giver, receiver=receiver_order[i]))
    return pairs


def find_derangement(
    givers: Iterable[str],
    receivers: Iterable[str],
    rng: random.Random | None = None,
    max_attempts: int = MAX_DRAW_ATTEMPTS,
) -> list[Assignment]:
    giver_pool = sorted(set(givers))
    receiver_pool = sorted(set(receivers))

    if len(giver_pool) != len(receiver_pool):
        raise UnbalancedPoolError(
            f"Cannot draw {len(giver_pool)} givers against {len(receiver_pool)} receivers."
        )
    if not giver_pool:
        return []

    rng = rng or _system_random

    for attempt in range(1, max_attempts + 1):
        giver_order, receiver_order = shuffle_pools(giver_pool, receiver_pool, rng)
        pairs = repair_self_pairs(giver_order, receiver_order)
        if pairs is not None:
            logger.debug("Found derangement of %d after %d attempt(s)", len(pairs), attempt)
            return pairs

    raise NoValidMatchingError(max_attempts)
