"""Core domain types for seller/buyer stable matching."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

UNMATCHED = -1


class ProposerStatus(str, Enum):
    UNMATCHED = "unmatched"
    MATCHED = "matched"


class ProposalOutcome(str, Enum):
    ACCEPTED = "accepted"      # buyer was free
    SWITCHED = "switched"      # buyer dropped its incumbent
    REJECTED = "rejected"


@dataclass
class PreferenceProfile:
    """Both sides' strict rankings; row i is participant i's list."""
    seller_prefs: list[list[int]]
    buyer_prefs: list[list[int]]

    @property
    def n(self) -> int:
        return len(self.seller_prefs)


@dataclass
class Proposal:
    """One seller-to-buyer proposal and how the buyer answered it."""
    round_number: int
    seller: int
    buyer: int
    rank: int                  # buyer's rank of the proposing seller
    outcome: ProposalOutcome
    displaced: int = UNMATCHED


@dataclass
class MatchResult:
    """Final state of one deferred-acceptance run."""
    seller_matches: list[int]
    buyer_matches: list[int]
    buyer_accept_rank: list[int]
    cursors: list[int] = field(default_factory=list)
    proposals: int = 0
    rounds: int = 0

    def pairs(self) -> list[tuple[int, int]]:
        """(seller, buyer) pairs in seller order."""
        return [(s, b) for s, b in enumerate(self.seller_matches)]

    def seller_ranks(self, profile: PreferenceProfile) -> list[int]:
        """Position of each seller's partner in that seller's own list."""
        ranks: list[int] = []
        for s, b in enumerate(self.seller_matches):
            ranks.append(profile.seller_prefs[s].index(b) if b != UNMATCHED else UNMATCHED)
        return ranks
