"""
Test suite for pickle-league
Tests models, Elo calculations, the state store and logging setup
"""

import asyncio
import logging
import os
import sys
import tempfile

import aiosqlite

from pickle_league import db
from pickle_league.logging_config import resolve_level
from pickle_league.mmr import (
    ELO_K,
    apply_team_match,
    expected,
    rating_delta,
    round_rating,
    team_rating,
    update_ratings,
)
from pickle_league.models import BASE_RATING, LeagueState, Match, Player, new_id
from pickle_league.rules import InvalidWinner


def test_models():
    """Test data models"""
    print("🧪 Testing Data Models...")

    print("  ✓ Testing Player defaults...")
    player = Player(id="p1", name="TestUser")
    assert player.rating == BASE_RATING == 1500
    assert player.wins == 0 and player.losses == 0
    assert player.games == 0
    print("    ✅ Player model works")

    print("  ✓ Testing Match model...")
    match = Match(id="m1", date="2024-05-01", team_a=("p1", "p2"), team_b=("p3", "p4"), winner="A")
    assert match.player_ids == ("p1", "p2", "p3", "p4")
    assert match.to_dict()["teamA"] == ["p1", "p2"]
    print("    ✅ Match model works")

    print("  ✓ Testing ids...")
    ids = {new_id() for _ in range(200)}
    assert len(ids) == 200
    assert all(isinstance(i, str) and len(i) == 32 for i in ids)
    print("    ✅ Ids are unique")

    print("  ✓ Testing older documents get default fields...")
    state = LeagueState.from_dict({
        "players": [{"id": "x", "name": "Old"}, {"id": "y", "name": "Kept", "rating": 1620, "wins": 3, "losses": 1}],
        "matches": [{"id": "m", "date": "1/2/2024", "teamA": ["x", "y"], "teamB": ["a", "b"], "winner": "B"}],
    })
    assert state.players["x"].rating == 1500
    assert state.players["x"].wins == 0 and state.players["x"].losses == 0
    assert state.players["y"].rating == 1620 and state.players["y"].wins == 3
    assert state.matches[0].team_b == ("a", "b")
    assert list(state.players) == ["x", "y"]
    print("    ✅ Missing fields filled")

    print("✅ All model tests passed!\n")


def test_mmr():
    """Test Elo calculations"""
    print("🧪 Testing MMR Calculations...")

    print("  ✓ Testing expected score calculation...")
    assert expected(1500, 1500) == 0.5
    strong = expected(1900, 1500)
    assert abs(strong / (1 - strong) - 10) < 1e-9  # 400 points -> 10:1
    assert abs(expected(1500, 1900) + strong - 1) < 1e-12
    print("    ✅ Expected score calculation works")

    print("  ✓ Testing team rating...")
    assert team_rating([1600, 1400]) == 1500
    assert team_rating([]) == BASE_RATING
    print("    ✅ Team rating is the average")

    print("  ✓ Testing deltas...")
    assert ELO_K == 24
    assert rating_delta(1500, 1500, "A") == (12.0, -12.0)
    da, db_ = rating_delta(1620, 1480, "B")
    assert da < 0 < db_
    assert abs(da + db_) < 1e-9  # zero-sum before rounding
    print("    ✅ Deltas are zero-sum")

    print("  ✓ Testing rounding...")
    assert round_rating(1612.5) == 1613
    assert round_rating(1611.5) == 1612
    assert round_rating(1487.49) == 1487
    assert round_rating(-0.5) == -1
    print("    ✅ Half rounds away from zero")

    print("  ✓ Testing team match application...")
    new_a, new_b = apply_team_match([1600, 1400], [1500, 1500], "A")
    assert new_a == [1612, 1412]
    assert new_b == [1488, 1488]

    # upset: weaker team wins and gains more than 12
    new_a, new_b = apply_team_match([1400, 1400], [1600, 1600], "A")
    assert new_a == [1418, 1418]
    assert new_b == [1582, 1582]
    print(f"    ✅ Team match works (upset winner -> {new_a[0]})")

    print("  ✓ Testing player updates...")
    p1 = Player("p1", "P1", 1600)
    p2 = Player("p2", "P2", 1400)
    p3 = Player("p3", "P3", 1500)
    p4 = Player("p4", "P4", 1500)
    team_a, team_b = update_ratings([p1, p2], [p3, p4], "A")
    assert [p.rating for p in team_a] == [1612, 1412]
    assert [p.rating for p in team_b] == [1488, 1488]
    assert [(p.wins, p.losses) for p in team_a] == [(1, 0), (1, 0)]
    assert [(p.wins, p.losses) for p in team_b] == [(0, 1), (0, 1)]
    # inputs are not modified
    assert (p1.rating, p1.wins) == (1600, 0)
    assert (p3.rating, p3.losses) == (1500, 0)

    team_a, team_b = update_ratings([p1, p2], [p3, p4], "b")
    assert [p.losses for p in team_a] == [1, 1]
    assert [p.wins for p in team_b] == [1, 1]
    print("    ✅ Player updates work")

    print("  ✓ Testing invalid winner...")
    try:
        update_ratings([p1, p2], [p3, p4], "draw")
    except InvalidWinner:
        pass
    else:
        raise AssertionError("draw should be rejected")
    print("    ✅ Invalid winner rejected")

    print("✅ All MMR tests passed!\n")


async def _database_checks(db_path: str):
    await db.init_db(db_path)

    print("  ✓ Testing empty load...")
    state = await db.load_state("999")
    assert state.players == {} and state.matches == []
    print("    ✅ Missing league loads empty")

    print("  ✓ Testing save + load...")
    state.players["p1"] = Player("p1", "Ana", 1512, 1, 0)
    state.players["p2"] = Player("p2", "Ben", 1488, 0, 1)
    state.matches.append(Match("m1", "2024-05-01", ("p1", "x"), ("p2", "y"), "A"))
    await db.save_state(state, "999")
    loaded = await db.load_state("999")
    assert loaded == state
    print("    ✅ State persisted")

    print("  ✓ Testing overwrite...")
    loaded.players["p1"].rating = 1600
    await db.save_state(loaded, "999")
    again = await db.load_state("999")
    assert again.players["p1"].rating == 1600
    assert len(again.matches) == 1
    print("    ✅ Save replaces the document")

    print("  ✓ Testing leagues are separate...")
    await db.save_state(LeagueState(), "123")
    assert await db.list_leagues() == ["123", "999"]
    assert (await db.load_state("123")).players == {}
    assert await db.delete_state("123") is True
    assert await db.delete_state("123") is False
    assert await db.list_leagues() == ["999"]
    print("    ✅ Leagues are keyed separately")

    print("  ✓ Testing unrecognised document...")
    async with aiosqlite.connect(db_path) as conn:
        await conn.execute(
            "INSERT INTO league_state (key, payload, updated_at) VALUES (?, ?, ?)",
            (db.state_key("odd"), '{"something": 1}', "2024-01-01T00:00:00"),
        )
        await conn.commit()
    odd = await db.load_state("odd")
    assert odd.players == {} and odd.matches == []
    print("    ✅ Unrecognised document loads empty")


def test_database():
    """Test the state store"""
    print("🧪 Testing Database Operations...")
    with tempfile.TemporaryDirectory() as tmp:
        asyncio.run(_database_checks(os.path.join(tmp, "test_pickle_league.db")))
    print("✅ All database tests passed!\n")


def test_config():
    """Test logging level configuration"""
    print("🧪 Testing Configuration...")
    assert resolve_level("debug") == logging.DEBUG
    assert resolve_level("nonsense") == logging.INFO

    old = os.environ.get("LOG_LEVEL")
    os.environ["LOG_LEVEL"] = "WARNING"
    try:
        assert resolve_level() == logging.WARNING
    finally:
        if old is None:
            os.environ.pop("LOG_LEVEL", None)
        else:
            os.environ["LOG_LEVEL"] = old
    print("    ✅ LOG_LEVEL respected")
    print("✅ Configuration tests passed!\n")


def run_all_tests():
    """Run all tests"""
    print("=" * 60)
    print("🚀 Running Pickle League Test Suite")
    print("=" * 60 + "\n")

    results = []
    for name, fn in (
        ("Models", test_models),
        ("MMR", test_mmr),
        ("Database", test_database),
        ("Config", test_config),
    ):
        try:
            fn()
            results.append((name, True))
        except Exception as e:
            print(f"❌ {name} test failed: {e!r}\n")
            results.append((name, False))

    print("=" * 60)
    print("📊 Test Summary")
    print("=" * 60)
    for test_name, passed in results:
        status = "✅ PASSED" if passed else "❌ FAILED"
        print(f"  {test_name:20} {status}")

    total = len(results)
    passed = sum(1 for _, p in results if p)
    print(f"\nTotal: {passed}/{total} tests passed")
    return 0 if passed == total else 1


if __name__ == "__main__":
    sys.exit(run_all_tests())
