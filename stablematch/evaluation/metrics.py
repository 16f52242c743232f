"""Verify matchings and compute aggregate metrics from a run."""
from __future__ import annotations

import statistics
from typing import Any

from stablematch.core.types import UNMATCHED, MatchResult, PreferenceProfile
from stablematch.market.matcher import rank_table


def is_perfect_matching(result: MatchResult, n: int) -> bool:
    """True when the two match arrays are inverse bijections over [0, n)."""
    if len(result.seller_matches) != n or len(result.buyer_matches) != n:
        return False
    for s, b in enumerate(result.seller_matches):
        if not 0 <= b < n or result.buyer_matches[b] != s:
            return False
    return sorted(result.buyer_matches) == list(range(n))


def find_blocking_pairs(
    profile: PreferenceProfile, result: MatchResult,
) -> list[tuple[int, int]]:
    """Every (seller, buyer) pair that would both rather be together."""
    buyer_rank = rank_table(profile.buyer_prefs)
    blocking: list[tuple[int, int]] = []
    for s, prefs in enumerate(profile.seller_prefs):
        partner = result.seller_matches[s]
        for b in prefs:
            if b == partner:
                break  # the rest of the list is worse for s
            incumbent = result.buyer_matches[b]
            if incumbent == UNMATCHED or buyer_rank[b][s] < buyer_rank[b][incumbent]:
                blocking.append((s, b))
    return blocking


def is_stable(profile: PreferenceProfile, result: MatchResult) -> bool:
    return not find_blocking_pairs(profile, result)


def verify_accept_ranks(profile: PreferenceProfile, result: MatchResult) -> bool:
    """buyer_accept_rank[b] must be the position of b's partner in b's list."""
    for b, s in enumerate(result.buyer_matches):
        if s == UNMATCHED:
            if result.buyer_accept_rank[b] != UNMATCHED:
                return False
            continue
        if profile.buyer_prefs[b][result.buyer_accept_rank[b]] != s:
            return False
    return True


def compute_metrics(profile: PreferenceProfile, result: MatchResult) -> dict[str, Any]:
    """Return a flat dict of summary metrics suitable for JSON serialisation."""
    n = profile.n
    blocking = find_blocking_pairs(profile, result)
    perfect = is_perfect_matching(result, n)
    if n == 0:
        return {
            "n": 0,
            "proposals": result.proposals,
            "rounds": result.rounds,
            "mean_seller_rank": 0,
            "mean_buyer_rank": 0,
            "max_seller_rank": 0,
            "max_buyer_rank": 0,
            "perfect": perfect,
            "stable": not blocking,
            "blocking_pairs": 0,
        }

    seller_ranks = result.seller_ranks(profile)
    buyer_ranks = list(result.buyer_accept_rank)
    return {
        "n": n,
        "proposals": result.proposals,
        "rounds": result.rounds,
        "mean_seller_rank": round(statistics.mean(seller_ranks), 4),
        "mean_buyer_rank": round(statistics.mean(buyer_ranks), 4),
        "max_seller_rank": max(seller_ranks),
        "max_buyer_rank": max(buyer_ranks),
        "perfect": perfect,
        "stable": not blocking,
        "blocking_pairs": len(blocking),
    }
