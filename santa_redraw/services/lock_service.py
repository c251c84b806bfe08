from __future__ import annotations

import logging
from typing import Iterable

from santa_redraw.errors import ConflictError, MultiplePurchasesError
from santa_redraw.schemas import Assignment, LockResult, SkippedDeclaration, SubmissionRecord
from santa_redraw.settings import MultiPurchasePolicy


logger = logging.getLogger(__name__)

NOT_IN_ROSTER = "not_in_roster"
EXTRA_PURCHASE = "extra_purchase"


def purchased_declarations(submission: SubmissionRecord) -> list[str]:
    out = []
    for d in submission.declarations:
        receiver = (d.receiver or "").strip()
        if d.purchased and receiver:
            out.append(receiver)
    return out


def resolve_locks(
    roster: Iterable[str],
    submissions: Iterable[SubmissionRecord],
    policy: MultiPurchasePolicy = MultiPurchasePolicy.REJECT,
) -> LockResult:
    """
    Splits the roster into pairs that are fixed by an already purchased gift
    and the pools that still need a draw.

    Declarations naming someone outside the roster are dropped and reported in
    `skipped`. A receiver locked a second time, by anyone, raises ConflictError.
    A giver locking two receivers is handled according to `policy`.
    """
    roster_set = set(roster)

    locked_pairs: list[Assignment] = []
    locked_giver_by_receiver: dict[str, str] = {}
    locked_receiver_by_giver: dict[str, str] = {}
    skipped: list[SkippedDeclaration] = []

    for sub in submissions:
        giver = (sub.giver or "").strip()
        for receiver in purchased_declarations(sub):
            if giver not in roster_set or receiver not in roster_set:
                logger.warning("Skipping purchase %r -> %r: not in participant list", giver, receiver)
                skipped.append(SkippedDeclaration(giver=giver, receiver=receiver, reason=NOT_IN_ROSTER))
                continue

            if receiver in locked_giver_by_receiver:
                raise ConflictError(receiver, (locked_giver_by_receiver[receiver], giver))

            if giver in locked_receiver_by_giver:
                kept = locked_receiver_by_giver[giver]
                if policy == MultiPurchasePolicy.REJECT:
                    raise MultiplePurchasesError(giver, (kept, receiver))
                logger.warning("Ignoring extra purchase %r -> %r, keeping %r", giver, receiver, kept)
                skipped.append(SkippedDeclaration(giver=giver, receiver=receiver, reason=EXTRA_PURCHASE))
                continue

            locked_pairs.append(Assignment(giver=giver, receiver=receiver))
            locked_giver_by_receiver[receiver] = giver
            locked_receiver_by_giver[giver] = receiver

    return LockResult(
        locked_pairs=locked_pairs,
        free_givers=roster_set - set(locked_receiver_by_giver),
        free_receivers=roster_set - set(locked_giver_by_receiver),
        skipped=skipped,
    )
