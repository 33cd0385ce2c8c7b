"""
Balanced team suggestions by exhaustive search.

Two modes:
- pairs: split the pool into 2-player pairs, minimising max(pair sum) - min(pair sum)
- split: split the pool into two equal halves, minimising |sum(A) - sum(B)|

Both read ratings through a lookup and never modify players. Ties go to the
first candidate found; the enumeration order depends only on input order, so
identical input gives identical output.
"""

from __future__ import annotations

from itertools import combinations
from typing import Iterator, Sequence

from .logging_config import get_logger
from .models import PairsResult, SplitResult
from .rules import PlayerLookup, resolve_players, validate_pool

log = get_logger(__name__)

MIN_PAIRS_POOL = 2
MIN_SPLIT_POOL = 4
# (2n-1)!! matchings: 12 players -> 10,395
MAX_PAIRS_POOL = 12
# C(n-1, n/2-1) splits: 20 players -> 92,378
MAX_SPLIT_POOL = 20

MODES = ("pairs", "split")


def perfect_matchings(items: Sequence[str]) -> Iterator[list[tuple[str, str]]]:
    """
    Yield every partition of items into unordered pairs, each exactly once.

    The first remaining item is always paired with one of the later items, so
    neither pair order nor order inside a pair produces duplicates.
    """
    if not items:
        yield []
        return
    first = items[0]
    for i in range(1, len(items)):
        rest = list(items[1:i]) + list(items[i + 1:])
        for tail in perfect_matchings(rest):
            yield [(first, items[i])] + tail


def half_splits(items: Sequence[str]) -> Iterator[tuple[list[str], list[str]]]:
    """
    Yield every split of items into two equal halves, each exactly once.

    items[0] always lands on the first side, which skips mirrored splits
    without changing which split is found first.
    """
    n = len(items)
    if n == 0 or n % 2:
        return
    first, rest = items[0], items[1:]
    for chosen in combinations(range(len(rest)), n // 2 - 1):
        picked = set(chosen)
        side_a = [first] + [rest[i] for i in chosen]
        side_b = [rest[i] for i in range(len(rest)) if i not in picked]
        yield side_a, side_b


def _ratings(ids: Sequence[str], lookup: PlayerLookup) -> dict[str, int]:
    return {p.id: p.rating for p in resolve_players(ids, lookup)}


def balanced_pairs(ids: Sequence[str], lookup: PlayerLookup, max_size: int | None = MAX_PAIRS_POOL) -> PairsResult:
    """Find the pairing whose pair sums are closest together."""
    pool = validate_pool(ids, MIN_PAIRS_POOL, max_size)
    rating = _ratings(pool, lookup)

    best: PairsResult | None = None
    checked = 0
    for matching in perfect_matchings(pool):
        checked += 1
        sums = [rating[a] + rating[b] for a, b in matching]
        spread = max(sums) - min(sums)
        if best is None or spread < best.spread:
            best = PairsResult(pairs=matching, spread=spread)
            if spread == 0:
                break

    log.debug("balanced_pairs n=%s checked=%s spread=%s", len(pool), checked, best.spread)
    return best


def balanced_split(ids: Sequence[str], lookup: PlayerLookup, max_size: int | None = MAX_SPLIT_POOL) -> SplitResult:
    """Find the two equal-size teams whose rating totals are closest."""
    pool = validate_pool(ids, MIN_SPLIT_POOL, max_size)
    rating = _ratings(pool, lookup)
    total = sum(rating.values())

    best: SplitResult | None = None
    checked = 0
    for side_a, side_b in half_splits(pool):
        checked += 1
        sum_a = sum(rating[pid] for pid in side_a)
        diff = abs(sum_a - (total - sum_a))
        if best is None or diff < best.diff:
            best = SplitResult(team_a=side_a, team_b=side_b, diff=diff)
            if diff == 0:
                break

    log.debug("balanced_split n=%s checked=%s diff=%s", len(pool), checked, best.diff)
    return best


def balance(
    ids: Sequence[str],
    lookup: PlayerLookup,
    mode: str = "split",
    max_size: int | None = None,
) -> PairsResult | SplitResult:
    """Run the balancer for the given mode ("pairs" or "split")."""
    if mode == "pairs":
        cap = MAX_PAIRS_POOL if max_size is None else max_size
        return balanced_pairs(ids, lookup, max_size=cap)
    if mode == "split":
        cap = MAX_SPLIT_POOL if max_size is None else max_size
        return balanced_split(ids, lookup, max_size=cap)
    raise ValueError(f"Unknown balancing mode {mode!r}; expected one of {MODES}")
