"""
Tests for balanced team suggestions (pairs and even split).
"""

import sys
from itertools import combinations, permutations

from pickle_league.models import LeagueState, Player
from pickle_league.rules import DuplicateIdentifier, InvalidInputSize, PoolTooLarge, UnknownPlayer
from pickle_league.teams import (
    MAX_PAIRS_POOL,
    balance,
    balanced_pairs,
    balanced_split,
    half_splits,
    perfect_matchings,
)


def make_registry(ratings: dict) -> dict:
    return {pid: Player(pid, pid.upper(), r) for pid, r in ratings.items()}


def expect_error(exc_type, fn, *args, **kwargs):
    try:
        fn(*args, **kwargs)
    except exc_type as e:
        return e
    raise AssertionError(f"{exc_type.__name__} not raised")


def brute_min_spread(ids, reg):
    best = None
    for perm in permutations(ids):
        sums = [reg[a].rating + reg[b].rating for a, b in zip(perm[0::2], perm[1::2])]
        spread = max(sums) - min(sums)
        best = spread if best is None else min(best, spread)
    return best


def brute_min_diff(ids, reg):
    total = sum(reg[i].rating for i in ids)
    best = None
    for side in combinations(ids, len(ids) // 2):
        s = sum(reg[i].rating for i in side)
        diff = abs(s - (total - s))
        best = diff if best is None else min(best, diff)
    return best


def test_matching_enumeration():
    print("🧪 Testing perfect matching enumeration...")
    for n, count in ((0, 1), (2, 1), (4, 3), (6, 15), (8, 105), (10, 945)):
        items = [f"p{i}" for i in range(n)]
        seen = set()
        for matching in perfect_matchings(items):
            assert sorted(x for pair in matching for x in pair) == sorted(items)
            seen.add(frozenset(frozenset(p) for p in matching))
        assert len(seen) == count, (n, len(seen))
        assert sum(1 for _ in perfect_matchings(items)) == count  # no repeats
    first = next(perfect_matchings(["a", "b", "c", "d"]))
    assert first == [("a", "b"), ("c", "d")]
    print("    ✅ (2n-1)!! matchings, each once")


def test_split_enumeration():
    print("🧪 Testing half split enumeration...")
    for n, count in ((4, 3), (6, 10), (8, 35), (10, 126)):
        items = [f"p{i}" for i in range(n)]
        splits = list(half_splits(items))
        assert len(splits) == count
        keys = {frozenset([frozenset(a), frozenset(b)]) for a, b in splits}
        assert len(keys) == count
        for a, b in splits:
            assert a[0] == "p0"
            assert len(a) == len(b) == n // 2
            assert sorted(a + b) == sorted(items)
    assert list(half_splits(["a", "b", "c"])) == []
    print("    ✅ C(n-1, n/2-1) splits, mirror images skipped")


def test_pairs_boundaries():
    print("🧪 Testing pairs mode...")
    reg = make_registry({"a": 1234, "b": 1777})
    result = balanced_pairs(["a", "b"], reg)
    assert result.pairs == [("a", "b")]
    assert result.spread == 0

    reg = make_registry({"a": 1000, "b": 1200, "c": 1400, "d": 1600})
    result = balanced_pairs(["a", "b", "c", "d"], reg)
    assert result.pairs == [("a", "d"), ("b", "c")]
    assert result.spread == 0

    # everyone equal: first matching wins the tie
    reg = make_registry({"a": 1500, "b": 1500, "c": 1500, "d": 1500})
    assert balanced_pairs(["a", "b", "c", "d"], reg).pairs == [("a", "b"), ("c", "d")]
    print("    ✅ Boundaries and tie-break")


def test_pairs_optimal():
    reg = make_registry({"a": 1000, "b": 1130, "c": 1210, "d": 1390, "e": 1480, "f": 1777, "g": 1505, "h": 1620})
    ids = list(reg)
    result = balanced_pairs(ids, reg)
    assert result.spread == brute_min_spread(ids, reg)
    flat = [x for pair in result.pairs for x in pair]
    assert sorted(flat) == sorted(ids)
    sums = [reg[a].rating + reg[b].rating for a, b in result.pairs]
    assert max(sums) - min(sums) == result.spread
    print(f"    ✅ Pairs spread {result.spread} is optimal")


def test_split_boundaries():
    print("🧪 Testing even-split mode...")
    reg = make_registry({"p1": 1000, "p2": 1000, "p3": 2000, "p4": 2000})
    result = balanced_split(["p1", "p2", "p3", "p4"], reg)
    assert result.diff == 0
    assert result.team_a == ["p1", "p3"]
    assert result.team_b == ["p2", "p4"]
    for side in (result.team_a, result.team_b):
        assert sum(reg[p].rating for p in side) == 3000
        assert sorted(reg[p].rating for p in side) == [1000, 2000]
    print("    ✅ [1000, 1000, 2000, 2000] splits 3000/3000")


def test_split_optimal():
    reg = make_registry({
        "a": 1012, "b": 1390, "c": 1555, "d": 1611, "e": 1320,
        "f": 1702, "g": 1488, "h": 1263, "i": 1500, "j": 1849,
    })
    ids = list(reg)
    result = balanced_split(ids, reg)
    assert result.diff == brute_min_diff(ids, reg)
    assert sorted(result.team_a + result.team_b) == sorted(ids)
    assert not set(result.team_a) & set(result.team_b)
    assert len(result.team_a) == len(result.team_b) == 5
    sum_a = sum(reg[p].rating for p in result.team_a)
    sum_b = sum(reg[p].rating for p in result.team_b)
    assert abs(sum_a - sum_b) == result.diff
    print(f"    ✅ Split diff {result.diff} is optimal")


def test_deterministic_and_read_only():
    reg = make_registry({"a": 1510, "b": 1490, "c": 1620, "d": 1380, "e": 1550, "f": 1450})
    ids = ["c", "a", "f", "b", "e", "d"]
    snapshot = {pid: (p.rating, p.wins, p.losses) for pid, p in reg.items()}
    assert balanced_pairs(ids, reg) == balanced_pairs(ids, reg)
    assert balanced_split(ids, reg) == balanced_split(ids, reg)
    assert {pid: (p.rating, p.wins, p.losses) for pid, p in reg.items()} == snapshot

    # a lookup function works the same as a mapping
    state = LeagueState(players=reg)
    assert balanced_split(ids, state.get_player) == balanced_split(ids, reg)
    assert balance(ids, reg, mode="pairs") == balanced_pairs(ids, reg)
    assert balance(ids, reg) == balanced_split(ids, reg)
    print("    ✅ Same input, same answer; ratings untouched")


def test_invalid_input():
    print("🧪 Testing invalid pools...")
    reg = make_registry({f"p{i}": 1500 + i for i in range(16)})

    expect_error(InvalidInputSize, balanced_pairs, ["p1"], reg)
    expect_error(InvalidInputSize, balanced_pairs, [], reg)
    expect_error(InvalidInputSize, balanced_split, ["p1", "p2"], reg)
    expect_error(InvalidInputSize, balanced_split, ["p1", "p2", "p3", "p4", "p5"], reg)

    big = [f"p{i}" for i in range(MAX_PAIRS_POOL + 2)]
    err = expect_error(PoolTooLarge, balanced_pairs, big, reg)
    assert isinstance(err, InvalidInputSize)

    err = expect_error(DuplicateIdentifier, balanced_split, ["p1", "p2", "p1", "p3"], reg)
    assert err.player_id == "p1"

    err = expect_error(UnknownPlayer, balanced_pairs, ["p1", "ghost"], reg)
    assert err.player_id == "ghost"

    expect_error(ValueError, balance, ["p1", "p2"], reg, mode="triples")
    print("    ✅ Invalid pools rejected before searching")


def run_all_tests():
    tests = [v for k, v in sorted(globals().items()) if k.startswith("test_") and callable(v)]
    failed = 0
    for fn in tests:
        try:
            fn()
        except Exception as e:
            failed += 1
            print(f"❌ {fn.__name__} failed: {e!r}")
    print(f"\nTotal: {len(tests) - failed}/{len(tests)} tests passed")
    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(run_all_tests())
