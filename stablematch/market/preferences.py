"""Random preference generation and preference-table validation."""
from __future__ import annotations

from typing import Any, Sequence

from stablematch.core.errors import InvalidPreferenceList
from stablematch.core.rng import SeededRNG
from stablematch.core.types import PreferenceProfile


# ── generation ──────────────────────────────────────────────────────────────

def shuffle_in_place(seq: list[Any], rng: SeededRNG) -> None:
    """Fisher-Yates shuffle: position i swaps with a uniform j in [i, n-1]."""
    n = len(seq)
    for i in range(n - 1):
        j = rng.randint(i, n - 1)
        seq[i], seq[j] = seq[j], seq[i]


def random_preference_list(n: int, rng: SeededRNG) -> list[int]:
    """A uniformly random permutation of ``[0, n)``."""
    order = list(range(n))
    shuffle_in_place(order, rng)
    return order


def generate_preferences(n: int, rng: SeededRNG) -> PreferenceProfile:
    """Draw 2n independent preference lists, n per side.

    Rows are drawn interleaved (seller i, then buyer i) so the same seed
    always yields the same profile.
    """
    if n < 0:
        raise ValueError(f"n must be non-negative, got {n}")
    seller_prefs: list[list[int]] = []
    buyer_prefs: list[list[int]] = []
    for _ in range(n):
        seller_prefs.append(random_preference_list(n, rng))
        buyer_prefs.append(random_preference_list(n, rng))
    return PreferenceProfile(seller_prefs=seller_prefs, buyer_prefs=buyer_prefs)


# ── validation ──────────────────────────────────────────────────────────────

def validate_preference_table(
    table: Sequence[Sequence[int]], n: int, side: str,
) -> None:
    """Raise ``InvalidPreferenceList`` unless *table* is n permutations of [0, n)."""
    if len(table) != n:
        raise InvalidPreferenceList(
            f"{side} table has {len(table)} rows, expected {n}", side=side,
        )
    expected = set(range(n))
    for i, row in enumerate(table):
        if len(row) != n:
            raise InvalidPreferenceList(
                f"{side} {i}: list has {len(row)} entries, expected {n}",
                side=side, index=i,
            )
        for x in row:
            if isinstance(x, bool) or not isinstance(x, int):
                raise InvalidPreferenceList(
                    f"{side} {i}: non-integer id {x!r}", side=side, index=i,
                )
        if set(row) != expected:
            missing = sorted(expected - set(row))
            raise InvalidPreferenceList(
                f"{side} {i}: not a permutation of [0, {n}) (missing {missing})",
                side=side, index=i,
            )

