"""Flag transactions that look like something already in the ledger."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Iterable, Optional

from ..models.transaction import Transaction

AMOUNT_POINTS = 40
CATEGORY_POINTS = 20
MEMO_POINTS = 20
SIMILAR_MEMO_POINTS = 10
PROXIMITY_POINTS = 20

PROXIMITY_WINDOW = timedelta(hours=48)
DEFAULT_THRESHOLD = 60
MAX_MATCHES = 3


@dataclass(slots=True)
class DuplicateMatch:
    transaction: Transaction
    score: int
    reasons: list[str] = field(default_factory=list)


def score_match(
    candidate: Transaction, existing: Transaction, *, when: Optional[datetime] = None
) -> DuplicateMatch:
    """Score how closely ``existing`` resembles ``candidate`` on a 0-100 scale."""

    score = 0
    reasons: list[str] = []

    if existing.amount == candidate.amount:
        score += AMOUNT_POINTS
        reasons.append("Same amount")

    if candidate.category and existing.category == candidate.category:
        score += CATEGORY_POINTS
        reasons.append("Same category")

    new_memo = (candidate.memo or "").strip().lower()
    old_memo = (existing.memo or "").strip().lower()
    if new_memo and old_memo:
        if new_memo == old_memo:
            score += MEMO_POINTS
            reasons.append("Same description")
        elif new_memo in old_memo or old_memo in new_memo:
            score += SIMILAR_MEMO_POINTS
            reasons.append("Similar description")

    when = when or candidate.occurred_at
    if when is not None and abs(when - existing.occurred_at) <= PROXIMITY_WINDOW:
        score += PROXIMITY_POINTS
        reasons.append("Close date (48h)")

    return DuplicateMatch(transaction=existing, score=score, reasons=reasons)


def detect_duplicates(
    candidate: Transaction,
    transactions: Iterable[Transaction],
    *,
    threshold: int = DEFAULT_THRESHOLD,
    now: Optional[datetime] = None,
) -> list[DuplicateMatch]:
    """Return up to three likely duplicates of ``candidate``, best first.

    Only transactions of the same kind are compared. A candidate without a
    positive amount, or with neither a description nor a category, matches
    nothing. ``now`` stands in for a missing ``occurred_at``.
    """

    if candidate.amount is None or candidate.amount <= 0:
        return []
    if not (candidate.memo or "").strip() and not candidate.category:
        return []
    when = candidate.occurred_at or now or datetime.now()

    matches = [
        match
        for match in (
            score_match(candidate, existing, when=when)
            for existing in transactions
            if existing.kind == candidate.kind
            and existing is not candidate
            and (candidate.id is None or existing.id != candidate.id)
        )
        if match.score >= threshold
    ]
    matches.sort(key=lambda match: match.score, reverse=True)
    return matches[:MAX_MATCHES]


__all__ = ["DuplicateMatch", "detect_duplicates", "score_match"]
