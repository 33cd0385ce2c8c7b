"""
Tests for league operations and message formatting.
"""

import copy
import sys
from datetime import date

import fmt
from pickle_league import league
from pickle_league.models import LeagueState, Match, Player, SplitResult
from pickle_league.rules import (
    DuplicateIdentifier,
    DuplicatePlayerName,
    InvalidInputSize,
    InvalidWinner,
    LeagueError,
    UnknownPlayer,
)


def fresh_league() -> LeagueState:
    state = LeagueState()
    for pid, name, rating in (("p1", "Ana", 1600), ("p2", "Ben", 1400), ("p3", "Cleo", 1500), ("p4", "Dev", 1500)):
        state.players[pid] = Player(pid, name, rating)
    return state


def expect_error(exc_type, fn, *args, **kwargs):
    try:
        fn(*args, **kwargs)
    except exc_type as e:
        return e
    raise AssertionError(f"{exc_type.__name__} not raised")


def test_add_and_find_players():
    print("🧪 Testing player registration...")
    state = LeagueState()
    ana = league.add_player(state, "  Ana  ")
    assert ana.name == "Ana"
    assert (ana.rating, ana.wins, ana.losses) == (1500, 0, 0)
    assert state.players[ana.id] is ana

    ben = league.add_player(state, "Ben", rating=1420)
    assert ben.rating == 1420
    assert ana.id != ben.id

    expect_error(DuplicatePlayerName, league.add_player, state, "ana")
    expect_error(ValueError, league.add_player, state, "   ")
    assert len(state.players) == 2

    assert league.find_player(state, ana.id) is ana
    assert league.find_player(state, "BEN") is ben
    assert league.find_player(state, "nobody") is None
    assert league.find_player(state, "") is None
    print("    ✅ Players added and found")


def test_record_match_scenario():
    print("🧪 Testing match recording...")
    state = fresh_league()
    match = league.record_match(state, ["p1", "p2"], ["p3", "p4"], "A", played_on=date(2024, 5, 1))

    assert [state.players[p].rating for p in ("p1", "p2", "p3", "p4")] == [1612, 1412, 1488, 1488]
    assert (state.players["p1"].wins, state.players["p1"].losses) == (1, 0)
    assert (state.players["p2"].wins, state.players["p2"].losses) == (1, 0)
    assert (state.players["p3"].wins, state.players["p3"].losses) == (0, 1)
    assert (state.players["p4"].wins, state.players["p4"].losses) == (0, 1)

    assert state.matches == [match]
    assert match.date == "2024-05-01"
    assert match.team_a == ("p1", "p2") and match.team_b == ("p3", "p4")
    assert match.winner == "A"

    second = league.record_match(state, ["p3", "p1"], ["p4", "p2"], "b")
    assert second.winner == "B"
    assert second.date == date.today().isoformat()
    print("    ✅ Ratings, records and history updated")


def test_invalid_match_changes_nothing():
    print("🧪 Testing rejected matches...")
    state = fresh_league()
    before = copy.deepcopy(state.to_dict())

    cases = [
        (DuplicateIdentifier, (["p1", "p2"], ["p2", "p3"], "A")),
        (DuplicateIdentifier, (["p1", "p1"], ["p3", "p4"], "A")),
        (UnknownPlayer, (["p1", "p2"], ["p3", "ghost"], "A")),
        (InvalidInputSize, (["p1", "p2", "p3"], ["p4"], "A")),
        (InvalidInputSize, (["p1"], ["p3", "p4"], "B")),
        (InvalidWinner, (["p1", "p2"], ["p3", "p4"], "")),
        (InvalidWinner, (["p1", "p2"], ["p3", "p4"], "draw")),
    ]
    for exc_type, args in cases:
        err = expect_error(exc_type, league.record_match, state, *args)
        assert isinstance(err, LeagueError)
        assert state.to_dict() == before
    assert state.matches == []
    print("    ✅ Nothing mutated on failure")


def test_record_matches_history():
    state = fresh_league()
    games = [
        (["p1", "p2"], ["p3", "p4"], "A"),
        (["p1", "p3"], ["p2", "p4"], "B"),
        (["p4", "p1"], ["p3", "p2"], "A"),
        (["p2", "p3"], ["p1", "p4"], "A"),
    ]
    for a, b, w in games:
        league.record_match(state, a, b, w)

    for pid, p in state.players.items():
        wins, losses = league.record_for(state, pid)
        assert (p.wins, p.losses) == (wins, losses)
        assert p.games == sum(1 for m in state.matches if pid in m.player_ids)
        assert isinstance(p.rating, int)
    assert league.record_for(state, "ghost") == (0, 0)

    recent = league.recent_matches(state, 2)
    assert recent == [state.matches[3], state.matches[2]]
    assert league.recent_matches(state) == list(reversed(state.matches))
    assert league.recent_matches(state, 0) == []
    print("    ✅ Records agree with history")


def test_leaderboard_order():
    state = LeagueState()
    for name, rating in (("Low", 1400), ("TieFirst", 1550), ("Top", 1700), ("TieSecond", 1550)):
        league.add_player(state, name, rating=rating)
    names = [p.name for p in league.leaderboard(state)]
    assert names == ["Top", "TieFirst", "TieSecond", "Low"]
    assert [p.name for p in league.leaderboard(state, 2)] == ["Top", "TieFirst"]
    print("    ✅ Leaderboard sorted by rating, stable on ties")


def test_suggest_teams():
    state = fresh_league()
    before = copy.deepcopy(state.to_dict())

    split = league.suggest_teams(state, ["p1", "p2", "p3", "p4"])
    assert isinstance(split, SplitResult)
    assert split.diff == 0  # 1600+1400 vs 1500+1500
    assert split.team_a == ["p1", "p2"]

    pairs = league.suggest_teams(state, ["p1", "p2", "p3", "p4"], mode="pairs")
    assert pairs.spread == 0
    assert league.team_total(state, split.team_a) == league.team_total(state, split.team_b) == 3000
    assert league.team_total(state, ["p1", "ghost"]) == 1600

    expect_error(InvalidInputSize, league.suggest_teams, state, ["p1", "p2"])
    expect_error(InvalidInputSize, league.suggest_teams, state, ["p1", "p2", "p3"], mode="pairs")
    assert state.to_dict() == before
    print("    ✅ Suggestions are read-only")


def test_formatting():
    print("🧪 Testing formatting...")
    state = fresh_league()
    match = league.record_match(state, ["p1", "p2"], ["p3", "p4"], "A", played_on=date(2024, 5, 1))

    table = fmt.leaderboard_table(league.leaderboard(state))
    lines = table.splitlines()
    assert lines[0] == "```md"
    assert lines[-1] == "```"
    assert lines[1].split(" | ")[:3] == ["#", "Player", "Rating"]
    assert "Ana" in lines[3] and "1612" in lines[3]

    line = fmt.match_line(match, state)
    assert "A: Ana & Ben vs B: Cleo & Dev" in line
    assert "**Team A**" in line
    assert "`2024-05-01`" in line

    orphan = Match("m", "2024-01-01", ("p1", "gone"), ("p3", "p4"), "B")
    assert "Ana & ?" in fmt.match_line(orphan, state)

    split = league.suggest_teams(state, ["p1", "p2", "p3", "p4"])
    text = fmt.split_summary(split, state)
    assert text.startswith("**Team A**")
    assert f"Rating difference: `{split.diff}`" in text

    pairs = league.suggest_teams(state, ["p1", "p2", "p3", "p4"], mode="pairs")
    text = fmt.pairs_summary(pairs, state)
    assert text.splitlines()[0].startswith("1. ")
    assert f"Spread: `{pairs.spread}`" in text

    assert fmt.mono_table([]) == "```md\n\n```"
    print("    ✅ Formatting works")


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
