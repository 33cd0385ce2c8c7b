from typing import Callable, Iterable, List, Mapping, Optional, Tuple, Union

from .models import Player

TEAM_SIZE = 2
WINNERS = ("A", "B")

PlayerLookup = Union[Callable[[str], Optional[Player]], Mapping[str, Player]]


class LeagueError(ValueError):
    """Base class for rejected league input."""


class InvalidInputSize(LeagueError):
    """Odd pool, pool below the mode minimum, or a match team of the wrong size."""


class PoolTooLarge(InvalidInputSize):
    """Pool exceeds the exhaustive search cap."""


class UnknownPlayer(LeagueError):
    def __init__(self, player_id: str):
        super().__init__(f"Unknown player: {player_id}")
        self.player_id = player_id


class DuplicateIdentifier(LeagueError):
    def __init__(self, player_id: str):
        super().__init__(f"Player listed more than once: {player_id}")
        self.player_id = player_id


class DuplicatePlayerName(LeagueError):
    pass


class InvalidWinner(LeagueError):
    pass


def _lookup_fn(lookup: PlayerLookup) -> Callable[[str], Optional[Player]]:
    if isinstance(lookup, Mapping):
        return lookup.get
    return lookup


def check_winner(winner: str) -> str:
    """
    Normalise a winner tag to "A" or "B".
    Raises InvalidWinner for anything else (draws are not recorded).
    """
    tag = (winner or "").strip().upper()
    if tag not in WINNERS:
        raise InvalidWinner(f"Winner must be 'A' or 'B', got {winner!r}")
    return tag


def check_unique(ids: Iterable[str]) -> List[str]:
    """Return ids as a list, raising DuplicateIdentifier on the first repeat."""
    seen = set()
    out = []
    for pid in ids:
        if pid in seen:
            raise DuplicateIdentifier(pid)
        seen.add(pid)
        out.append(pid)
    return out


def resolve_players(ids: Iterable[str], lookup: PlayerLookup) -> List[Player]:
    """Resolve every id against the registry, failing fast on the first unknown one."""
    get = _lookup_fn(lookup)
    players = []
    for pid in ids:
        p = get(pid)
        if p is None:
            raise UnknownPlayer(pid)
        players.append(p)
    return players


def validate_pool(ids: Iterable[str], minimum: int, maximum: Optional[int] = None) -> List[str]:
    """
    Check a balancer pool before any search starts.
    - size must be even and >= minimum
    - size must not exceed maximum (when given)
    - no id may repeat
    """
    pool = list(ids)
    n = len(pool)
    if n % 2 != 0:
        raise InvalidInputSize(f"Need an even number of players, got {n}.")
    if n < minimum:
        raise InvalidInputSize(f"Select at least {minimum} players, got {n}.")
    if maximum is not None and n > maximum:
        raise PoolTooLarge(f"At most {maximum} players can be balanced at once, got {n}.")
    return check_unique(pool)


def validate_match(
    team_a: Iterable[str],
    team_b: Iterable[str],
    winner: str,
    lookup: PlayerLookup,
) -> Tuple[List[Player], List[Player], str]:
    """
    Validate a doubles result and resolve both teams.
    Returns (players_a, players_b, winner) or raises a LeagueError.
    """
    a, b = list(team_a), list(team_b)
    for label, team in (("A", a), ("B", b)):
        if len(team) != TEAM_SIZE:
            raise InvalidInputSize(f"Team {label} needs exactly {TEAM_SIZE} players, got {len(team)}.")
    check_unique(a + b)
    tag = check_winner(winner)
    return resolve_players(a, lookup), resolve_players(b, lookup), tag
