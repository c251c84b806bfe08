from __future__ import annotations

import logging
import random
from typing import Iterable

from santa_redraw.config import MAX_DRAW_ATTEMPTS
from santa_redraw.schemas import Assignment, DrawOutcome, SubmissionRecord
from santa_redraw.services.lock_service import resolve_locks
from santa_redraw.services.matching_service import find_derangement
from santa_redraw.settings import MultiPurchasePolicy


logger = logging.getLogger(__name__)


def assemble_assignments(locked_pairs: list[Assignment], matched: list[Assignment]) -> DrawOutcome:
    assignments = [*locked_pairs, *matched]
    return DrawOutcome(assignments=assignments, count=len(assignments), success=True)


def resolve_assignments(
    roster: Iterable[str],
    submissions: Iterable[SubmissionRecord],
    rng: random.Random | None = None,
    policy: MultiPurchasePolicy = MultiPurchasePolicy.REJECT,
    max_attempts: int = MAX_DRAW_ATTEMPTS,
) -> DrawOutcome:
    """
    Locks purchased pairs, draws the rest and returns every final pair.
    Raises an AssignmentError subclass; nothing partial is returned.
    """
    locks = resolve_locks(roster, submissions, policy=policy)
    matched = find_derangement(locks.free_givers, locks.free_receivers, rng=rng, max_attempts=max_attempts)
    outcome = assemble_assignments(locks.locked_pairs, matched)

    logger.info(
        "Draw finished: %d locked, %d drawn, %d skipped declaration(s)",
        len(locks.locked_pairs),
        len(matched),
        len(locks.skipped),
    )
    return outcome
