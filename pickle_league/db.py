"""
Key-value persistence for league state.

Each league is one JSON document (players + matches) stored under
``pickle-league-state-v1:<league>`` in a single SQLite table.
"""

import json
from datetime import datetime, timezone

import aiosqlite

from .logging_config import get_logger
from .models import LeagueState

log = get_logger(__name__)

STORAGE_KEY = "pickle-league-state-v1"

# Global variable for database path (will be set by init_db)
DB_PATH = "pickle_league.sqlite"


def state_key(league: str) -> str:
    return f"{STORAGE_KEY}:{league}"


async def init_db(db_path: str = "pickle_league.sqlite") -> None:
    """Create the state table if needed and remember the path for later calls."""
    global DB_PATH
    DB_PATH = db_path

    async with aiosqlite.connect(DB_PATH) as db:
        await db.execute(
            """
            CREATE TABLE IF NOT EXISTS league_state (
                key TEXT PRIMARY KEY,
                payload TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
            """
        )
        await db.commit()
    log.debug("Initialised state store at %s", DB_PATH)


async def load_state(league: str = "default") -> LeagueState:
    """
    Load a league's state, or an empty one if nothing was saved yet.

    A stored document without ``players``/``matches`` is ignored with a
    warning. Malformed JSON raises json.JSONDecodeError.
    """
    key = state_key(league)
    async with aiosqlite.connect(DB_PATH) as db:
        async with db.execute("SELECT payload FROM league_state WHERE key = ?", (key,)) as cursor:
            row = await cursor.fetchone()

    if row is None:
        log.debug("No saved state for %s", key)
        return LeagueState()

    parsed = json.loads(row[0])
    if not isinstance(parsed, dict) or "players" not in parsed or "matches" not in parsed:
        log.warning("Ignoring state for %s: missing players/matches", key)
        return LeagueState()

    state = LeagueState.from_dict(parsed)
    log.debug("Loaded %s: players=%s matches=%s", key, len(state.players), len(state.matches))
    return state


async def save_state(state: LeagueState, league: str = "default") -> None:
    """Write the whole league document, replacing any previous version."""
    key = state_key(league)
    payload = json.dumps(state.to_dict())
    now = datetime.now(timezone.utc).isoformat()
    async with aiosqlite.connect(DB_PATH) as db:
        await db.execute(
            """
            INSERT INTO league_state (key, payload, updated_at) VALUES (?, ?, ?)
            ON CONFLICT(key) DO UPDATE SET payload = excluded.payload, updated_at = excluded.updated_at
            """,
            (key, payload, now),
        )
        await db.commit()
    log.debug("Saved %s: players=%s matches=%s", key, len(state.players), len(state.matches))


async def list_leagues() -> list[str]:
    """Return the names of all leagues with saved state."""
    prefix = f"{STORAGE_KEY}:"
    async with aiosqlite.connect(DB_PATH) as db:
        async with db.execute(
            "SELECT key FROM league_state WHERE key LIKE ? ORDER BY key", (prefix + "%",)
        ) as cursor:
            rows = await cursor.fetchall()
    return [r[0][len(prefix):] for r in rows]


async def delete_state(league: str) -> bool:
    """Remove a league's document. Returns True if something was deleted."""
    async with aiosqlite.connect(DB_PATH) as db:
        cursor = await db.execute("DELETE FROM league_state WHERE key = ?", (state_key(league),))
        await db.commit()
        deleted = cursor.rowcount > 0
    log.debug("Delete %s -> %s", state_key(league), deleted)
    return deleted
