"""
Data models for the doubles league.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Any

BASE_RATING = 1500


def new_id() -> str:
    """Return a fresh opaque identifier for a player or match."""
    return uuid.uuid4().hex


@dataclass
class Player:
    id: str
    name: str
    rating: int = BASE_RATING
    wins: int = 0
    losses: int = 0

    @property
    def games(self) -> int:
        return self.wins + self.losses

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "rating": self.rating,
            "wins": self.wins,
            "losses": self.losses,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Player":
        # Older documents may predate the rating/record fields
        rating = data.get("rating")
        wins = data.get("wins")
        losses = data.get("losses")
        return cls(
            id=str(data["id"]),
            name=str(data.get("name", "")),
            rating=int(rating) if isinstance(rating, (int, float)) else BASE_RATING,
            wins=int(wins) if isinstance(wins, (int, float)) else 0,
            losses=int(losses) if isinstance(losses, (int, float)) else 0,
        )


@dataclass(frozen=True)
class Match:
    id: str
    date: str
    team_a: tuple[str, ...]
    team_b: tuple[str, ...]
    winner: str

    @property
    def player_ids(self) -> tuple[str, ...]:
        return self.team_a + self.team_b

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "date": self.date,
            "teamA": list(self.team_a),
            "teamB": list(self.team_b),
            "winner": self.winner,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Match":
        return cls(
            id=str(data["id"]),
            date=str(data.get("date", "")),
            team_a=tuple(str(x) for x in data.get("teamA", ())),
            team_b=tuple(str(x) for x in data.get("teamB", ())),
            winner=str(data["winner"]),
        )


@dataclass
class PairsResult:
    pairs: list[tuple[str, str]]
    spread: int


@dataclass
class SplitResult:
    team_a: list[str]
    team_b: list[str]
    diff: int


@dataclass
class LeagueState:
    """Player registry plus append-only match history for one league."""

    players: dict[str, Player] = field(default_factory=dict)
    matches: list[Match] = field(default_factory=list)

    def get_player(self, player_id: str) -> Player | None:
        return self.players.get(player_id)

    def to_dict(self) -> dict[str, Any]:
        return {
            "players": [p.to_dict() for p in self.players.values()],
            "matches": [m.to_dict() for m in self.matches],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LeagueState":
        players = {}
        for raw in data.get("players", []):
            p = Player.from_dict(raw)
            players[p.id] = p
        matches = [Match.from_dict(raw) for raw in data.get("matches", [])]
        return cls(players=players, matches=matches)
