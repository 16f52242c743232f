"""Stable matching strategies for pairing sellers with buyers.

Provides a ``Matcher`` interface and ``DeferredAcceptanceMatcher``, the
seller-proposing Gale-Shapley algorithm. Sellers propose down their lists;
each buyer holds the best offer seen so far and trades up when a seller it
ranks higher comes along. The result is the seller-optimal (and
buyer-pessimal) stable matching.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections import deque
from typing import Callable, Optional, Sequence

from stablematch.core.errors import InvariantViolation
from stablematch.core.logging import EventLogger
from stablematch.core.types import (
    UNMATCHED,
    MatchResult,
    PreferenceProfile,
    Proposal,
    ProposalOutcome,
    ProposerStatus,
)
from stablematch.market.preferences import validate_preference_table

logger = logging.getLogger(__name__)

ProposalHook = Callable[[Proposal], None]


def rank_table(prefs: Sequence[Sequence[int]]) -> list[list[int]]:
    """rank[i][j] = position of j in participant i's list."""
    n = len(prefs)
    rank = [[0] * n for _ in range(n)]
    for i, row_prefs in enumerate(prefs):
        row = rank[i]
        for r, j in enumerate(row_prefs):
            row[j] = r
    return rank


class _Engine:
    """Mutable state of a single deferred-acceptance run."""

    def __init__(
        self,
        seller_prefs: Sequence[Sequence[int]],
        buyer_prefs: Sequence[Sequence[int]],
        on_proposal: Optional[ProposalHook],
    ):
        n = len(seller_prefs)
        self.n = n
        self.seller_prefs = seller_prefs
        self.rank = rank_table(buyer_prefs)
        self.on_proposal = on_proposal

        self.status = [ProposerStatus.UNMATCHED] * n
        self.cursor = [0] * n
        self.seller_matches = [UNMATCHED] * n
        self.buyer_matches = [UNMATCHED] * n
        self.buyer_accept_rank = [UNMATCHED] * n
        self.unmatched_count = n
        self.proposals = 0

    def propose(self, s: int, round_number: int) -> int:
        """Seller *s* proposes to its next buyer.

        Returns the seller left unmatched by the proposal: *s* itself on
        rejection, the displaced incumbent on a switch, ``UNMATCHED`` when
        the buyer was free.
        """
        if self.cursor[s] >= self.n:
            raise InvariantViolation(
                f"seller {s} exhausted its preference list while unmatched"
            )
        b = self.seller_prefs[s][self.cursor[s]]
        self.cursor[s] += 1
        self.proposals += 1
        r = self.rank[b][s]
        t = self.buyer_matches[b]

        if t == UNMATCHED:
            outcome = ProposalOutcome.ACCEPTED
            self._accept(s, b, r)
            self.unmatched_count -= 1
            left_over = UNMATCHED
        elif r < self.buyer_accept_rank[b]:
            outcome = ProposalOutcome.SWITCHED
            self._accept(s, b, r)
            self.seller_matches[t] = UNMATCHED
            self.status[t] = ProposerStatus.UNMATCHED
            left_over = t
        else:
            outcome = ProposalOutcome.REJECTED
            left_over = s

        if self.on_proposal is not None:
            self.on_proposal(Proposal(
                round_number=round_number,
                seller=s,
                buyer=b,
                rank=r,
                outcome=outcome,
                displaced=t if outcome == ProposalOutcome.SWITCHED else UNMATCHED,
            ))
        return left_over

    def _accept(self, s: int, b: int, r: int) -> None:
        self.buyer_matches[b] = s
        self.seller_matches[s] = b
        self.buyer_accept_rank[b] = r
        self.status[s] = ProposerStatus.MATCHED

    def result(self, rounds: int) -> MatchResult:
        return MatchResult(
            seller_matches=self.seller_matches,
            buyer_matches=self.buyer_matches,
            buyer_accept_rank=self.buyer_accept_rank,
            cursors=self.cursor,
            proposals=self.proposals,
            rounds=rounds,
        )


def _check_budget(rounds: int, max_rounds: Optional[int]) -> None:
    if max_rounds is not None and rounds > max_rounds:
        raise InvariantViolation(
            f"round budget of {max_rounds} exceeded with sellers still unmatched"
        )


def _run_rounds(engine: _Engine, max_rounds: Optional[int]) -> int:
    # A seller freed earlier in the scan still proposes this round if its id
    # has not been visited yet.
    rounds = 0
    while engine.unmatched_count > 0:
        rounds += 1
        _check_budget(rounds, max_rounds)
        before = engine.proposals
        for s in range(engine.n):
            if engine.status[s] == ProposerStatus.UNMATCHED:
                engine.propose(s, rounds)
        if engine.proposals == before:
            raise InvariantViolation(
                f"round {rounds} made no proposals with "
                f"{engine.unmatched_count} sellers unmatched"
            )
    return rounds


def _run_queue(engine: _Engine, max_rounds: Optional[int]) -> int:
    free = deque(range(engine.n))
    rounds = 0
    while free:
        rounds += 1
        _check_budget(rounds, max_rounds)
        for _ in range(len(free)):
            s = free.popleft()
            left_over = engine.propose(s, rounds)
            if left_over != UNMATCHED:
                free.append(left_over)
    return rounds


_SCHEDULES = {
    "rounds": _run_rounds,
    "queue": _run_queue,
}


def deferred_acceptance(
    seller_prefs: Sequence[Sequence[int]],
    buyer_prefs: Sequence[Sequence[int]],
    *,
    max_rounds: Optional[int] = None,
    schedule: str = "rounds",
    on_proposal: Optional[ProposalHook] = None,
) -> MatchResult:
    """Seller-proposing deferred acceptance over two n×n permutation tables.

    ``schedule="rounds"`` scans sellers in ascending id order each round;
    ``schedule="queue"`` serves free sellers first-in first-out. Both yield
    the same matching. Input tables are validated up front and never
    modified.
    """
    if schedule not in _SCHEDULES:
        raise ValueError(f"Unknown schedule: {schedule}")
    n = len(seller_prefs)
    validate_preference_table(seller_prefs, n, "seller")
    validate_preference_table(buyer_prefs, n, "buyer")

    engine = _Engine(seller_prefs, buyer_prefs, on_proposal)
    rounds = _SCHEDULES[schedule](engine, max_rounds)
    logger.debug(
        "deferred acceptance: n=%d proposals=%d rounds=%d schedule=%s",
        n, engine.proposals, rounds, schedule,
    )
    return engine.result(rounds)


class Matcher(ABC):
    """Interface for seller-buyer matching strategies."""

    @abstractmethod
    def match(self, profile: PreferenceProfile) -> MatchResult:
        """Return the matching for *profile*."""
        ...


class DeferredAcceptanceMatcher(Matcher):
    """Seller-proposing deferred acceptance.

    When an *event_logger* is given and *trace* is set, every proposal is
    written to the JSONL log tagged with *instance*.
    """

    def __init__(
        self,
        max_rounds: Optional[int] = None,
        schedule: str = "rounds",
        event_logger: Optional[EventLogger] = None,
        trace: bool = False,
    ):
        self.max_rounds = max_rounds
        self.schedule = schedule
        self.event_logger = event_logger
        self.trace = trace
        self.instance = 0

    def match(self, profile: PreferenceProfile) -> MatchResult:
        hook: Optional[ProposalHook] = None
        if self.trace and self.event_logger is not None:
            event_logger = self.event_logger
            instance = self.instance

            def _log(p: Proposal) -> None:
                event_logger.log_proposal(p, instance)
            hook = _log
        return deferred_acceptance(
            profile.seller_prefs,
            profile.buyer_prefs,
            max_rounds=self.max_rounds,
            schedule=self.schedule,
            on_proposal=hook,
        )
