"""
Elo rating updates for doubles matches.
Pure functions: each team is rated by its average, every member moves by the
team's delta, and the result is rounded to an integer rating.
"""

import math
from dataclasses import replace

from .models import BASE_RATING, Player
from .rules import check_winner

ELO_K = 24  # how fast ratings move; 16-32 is typical


def expected(ra: float, rb: float) -> float:
    """
    Calculate the expected score for side A against side B.

    Args:
        ra: Rating of side A
        rb: Rating of side B

    Returns:
        Expected score (probability) for A to win (0.0 to 1.0)
    """
    return 1 / (1 + math.pow(10, (rb - ra) / 400))


def team_rating(ratings: list[float]) -> float:
    """
    Calculate the effective team rating from individual player ratings.
    Uses the average rating as the team's effective rating.
    """
    if not ratings:
        return float(BASE_RATING)
    return sum(ratings) / len(ratings)


def round_rating(value: float) -> int:
    """Round half away from zero (1612.5 -> 1613, -0.5 -> -1)."""
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def rating_delta(team_a_rating: float, team_b_rating: float, winner: str, k: int = ELO_K) -> tuple[float, float]:
    """
    Unrounded rating change for each side.

    Both expectations come from the ratings passed in, so callers must pass
    pre-match values. The two deltas always sum to zero.

    Returns:
        Tuple of (delta_a, delta_b)
    """
    tag = check_winner(winner)
    expected_a = expected(team_a_rating, team_b_rating)
    expected_b = 1 - expected_a

    score_a = 1.0 if tag == "A" else 0.0
    score_b = 1.0 - score_a

    return (k * (score_a - expected_a), k * (score_b - expected_b))


def apply_team_match(
    rA: list[float],
    rB: list[float],
    winner: str,
    k: int = ELO_K
) -> tuple[list[int], list[int]]:
    """
    Apply Elo rating changes to all players in a team match.

    Args:
        rA: List of ratings for team A players
        rB: List of ratings for team B players
        winner: "A" if team A won, "B" if team B won
        k: K-factor determining maximum rating change per game

    Returns:
        Tuple of (new_ratings_team_a, new_ratings_team_b), rounded
    """
    delta_a, delta_b = rating_delta(team_rating(rA), team_rating(rB), winner, k)

    new_rA = [round_rating(r + delta_a) for r in rA]
    new_rB = [round_rating(r + delta_b) for r in rB]

    return (new_rA, new_rB)


def update_ratings(
    team_a: list[Player],
    team_b: list[Player],
    winner: str,
    k: int = ELO_K,
) -> tuple[list[Player], list[Player]]:
    """
    Return updated copies of both teams after a result.

    Ratings move by the team delta and win/loss tallies are incremented.
    The input Player objects are left untouched; identifier checks are the
    caller's job.
    """
    tag = check_winner(winner)
    new_a, new_b = apply_team_match(
        [p.rating for p in team_a], [p.rating for p in team_b], tag, k
    )

    def _after(players: list[Player], ratings: list[int], won: bool) -> list[Player]:
        return [
            replace(
                p,
                rating=r,
                wins=p.wins + (1 if won else 0),
                losses=p.losses + (0 if won else 1),
            )
            for p, r in zip(players, ratings)
        ]

    return _after(team_a, new_a, tag == "A"), _after(team_b, new_b, tag == "B")
