"""
League operations on an explicit LeagueState.

Callers own the state: load it, call these functions, save it afterwards.
Every mutating function validates its whole input before touching the state.
"""

from __future__ import annotations

from datetime import date
from typing import Iterable, Optional

from .logging_config import get_logger
from .mmr import ELO_K, update_ratings
from .models import BASE_RATING, LeagueState, Match, PairsResult, Player, SplitResult, new_id
from .rules import DuplicatePlayerName, validate_match
from .teams import balance

log = get_logger(__name__)

MAX_NAME_LENGTH = 60


def find_player(state: LeagueState, query: str) -> Optional[Player]:
    """Look a player up by id, falling back to a case-insensitive name match."""
    if not query:
        return None
    p = state.get_player(query)
    if p is not None:
        return p
    wanted = query.strip().casefold()
    for p in state.players.values():
        if p.name.casefold() == wanted:
            return p
    return None


def add_player(state: LeagueState, name: str, rating: int = BASE_RATING) -> Player:
    clean = (name or "").strip()[:MAX_NAME_LENGTH]
    if not clean:
        raise ValueError("Player name must not be empty.")
    if any(p.name.casefold() == clean.casefold() for p in state.players.values()):
        raise DuplicatePlayerName(f"A player named {clean!r} already exists.")

    player = Player(id=new_id(), name=clean, rating=int(rating))
    state.players[player.id] = player
    log.debug("Added player id=%s name=%s rating=%s", player.id, player.name, player.rating)
    return player


def record_match(
    state: LeagueState,
    team_a: Iterable[str],
    team_b: Iterable[str],
    winner: str,
    played_on: Optional[date] = None,
    k: int = ELO_K,
) -> Match:
    """
    Record a doubles result: update both teams' ratings and records, then
    append the match to the history. Raises a LeagueError (and changes nothing)
    if the teams or winner are invalid.
    """
    a_ids, b_ids = list(team_a), list(team_b)
    players_a, players_b, tag = validate_match(a_ids, b_ids, winner, state.players)

    new_a, new_b = update_ratings(players_a, players_b, tag, k=k)
    for p in new_a + new_b:
        state.players[p.id] = p

    match = Match(
        id=new_id(),
        date=(played_on or date.today()).isoformat(),
        team_a=tuple(a_ids),
        team_b=tuple(b_ids),
        winner=tag,
    )
    state.matches.append(match)
    log.info(
        "Match %s recorded: A=%s B=%s winner=%s ratings A=%s B=%s",
        match.id, a_ids, b_ids, tag,
        [p.rating for p in new_a], [p.rating for p in new_b],
    )
    return match


def leaderboard(state: LeagueState, limit: Optional[int] = None) -> list[Player]:
    """Players by rating, highest first; ties keep registration order."""
    ranked = sorted(state.players.values(), key=lambda p: p.rating, reverse=True)
    return ranked if limit is None else ranked[:limit]


def recent_matches(state: LeagueState, limit: int = 10) -> list[Match]:
    """The last `limit` matches, newest first."""
    if limit <= 0:
        return []
    return list(reversed(state.matches[-limit:]))


def record_for(state: LeagueState, player_id: str) -> tuple[int, int]:
    """Recount (wins, losses) for a player from the match history."""
    wins = losses = 0
    for m in state.matches:
        if player_id in m.team_a:
            won = m.winner == "A"
        elif player_id in m.team_b:
            won = m.winner == "B"
        else:
            continue
        if won:
            wins += 1
        else:
            losses += 1
    return wins, losses


def team_total(state: LeagueState, ids: Iterable[str]) -> int:
    """Sum of current ratings; unknown ids count as zero."""
    total = 0
    for pid in ids:
        p = state.get_player(pid)
        if p is not None:
            total += p.rating
    return total


def suggest_teams(
    state: LeagueState,
    ids: Iterable[str],
    mode: str = "split",
    max_size: Optional[int] = None,
) -> PairsResult | SplitResult:
    """Balance the selected players using current ratings. Read-only."""
    return balance(list(ids), state.players, mode=mode, max_size=max_size)
