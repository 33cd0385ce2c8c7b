"""Pickle League core package.

Exports commonly used modules for convenience.
"""

from . import db as db
from . import league as league
from . import logging_config as logging_config
from . import mmr as mmr
from . import rules as rules
from . import teams as teams
from .models import LeagueState, Match, PairsResult, Player, SplitResult

__all__ = [
    "db",
    "league",
    "logging_config",
    "mmr",
    "rules",
    "teams",
    "LeagueState",
    "Match",
    "PairsResult",
    "Player",
    "SplitResult",
]
