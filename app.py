# app.py
# Discord doubles league bot: Elo ratings, match history, balanced team suggestions

from __future__ import annotations

import os
import asyncio
from collections import defaultdict
from typing import Optional
import discord
from discord import app_commands

import fmt
from views import TeamsView
from pickle_league import db, league, teams
from pickle_league.logging_config import setup_logging, get_logger
from pickle_league.models import BASE_RATING as DEFAULT_BASE_RATING, LeagueState, PairsResult
from pickle_league.mmr import ELO_K
from pickle_league.rules import LeagueError

# --- Env / Config ---
from dotenv import load_dotenv
load_dotenv()

setup_logging()
log = get_logger(__name__)


def _env_int(name: str, default: int, minimum: int = 1) -> int:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        log.warning("Invalid %s value %r, using default %s", name, raw, default)
        return default
    if value < minimum:
        log.warning("%s must be >= %s, using default %s", name, minimum, default)
        return default
    return value


TOKEN = os.getenv("DISCORD_TOKEN")
TEST_MODE = os.getenv("TEST_MODE", "0").lower() in ("1", "true", "yes")
TEST_GUILD_ID = int(os.getenv("TEST_GUILD_ID", "0") or 0) or None

K_FACTOR = _env_int("K_FACTOR", ELO_K)
BASE_RATING = _env_int("BASE_RATING", DEFAULT_BASE_RATING)
MAX_PAIRS_POOL = _env_int("MAX_PAIRS_POOL", teams.MAX_PAIRS_POOL, minimum=teams.MIN_PAIRS_POOL)
MAX_SPLIT_POOL = _env_int("MAX_SPLIT_POOL", teams.MAX_SPLIT_POOL, minimum=teams.MIN_SPLIT_POOL)
RECENT_MATCHES = _env_int("RECENT_MATCHES", 10)

DATABASE_PATH = os.getenv(
    "DATABASE_PATH",
    "./test_pickle_league.sqlite" if TEST_MODE else "./pickle_league.sqlite",
)

ALLOWED_MENTIONS = discord.AllowedMentions.none()

# Intents
intents = discord.Intents.none()
intents.guilds = True

# Discord client + tree
bot = discord.Client(intents=intents)
tree = app_commands.CommandTree(bot)

# Guild locks: one read-modify-write of a league at a time
guild_locks: dict[int, asyncio.Lock] = defaultdict(asyncio.Lock)
def get_guild_lock(guild_id: int | None) -> asyncio.Lock:
    return guild_locks[guild_id or 0]


def league_name(inter: discord.Interaction) -> str:
    return str(inter.guild_id or 0)


def max_pool(mode: str) -> int:
    return MAX_PAIRS_POOL if mode == "pairs" else MAX_SPLIT_POOL


async def _load(inter: discord.Interaction) -> LeagueState:
    return await db.load_state(league_name(inter))


def _resolve(state: LeagueState, queries: list[str]) -> list[str]:
    """Map names/ids typed by the user to player ids; unknown entries pass through unchanged."""
    out = []
    for q in queries:
        p = league.find_player(state, q)
        out.append(p.id if p is not None else q.strip())
    return out


def render_teams(result, state: LeagueState) -> str:
    if isinstance(result, PairsResult):
        return "**🤝 Balanced pairs**\n" + fmt.pairs_summary(result, state)
    return "**⚖️ Balanced teams**\n" + fmt.split_summary(result, state)


# --- Autocomplete ---
async def player_autocomplete(inter: discord.Interaction, current: str) -> list[app_commands.Choice[str]]:
    state = await _load(inter)
    needle = current.casefold()
    hits = [p for p in league.leaderboard(state) if needle in p.name.casefold()]
    return [app_commands.Choice(name=f"{p.name} ({p.rating})"[:100], value=p.id) for p in hits[:25]]


# --- Discord events ---
@bot.event
async def on_ready():
    await db.init_db(DATABASE_PATH)

    if TEST_MODE and TEST_GUILD_ID:
        guild = discord.Object(id=TEST_GUILD_ID)
        tree.copy_global_to(guild=guild)
        await tree.sync(guild=guild)
        log.info("Commands synced to test guild %s", TEST_GUILD_ID)
    else:
        await tree.sync()
        log.info("Commands synced globally")

    status = "Doubles 🏓 [TEST MODE]" if TEST_MODE else "Doubles 🏓"
    await bot.change_presence(activity=discord.Game(name=status))
    log.info("Bot ready as %s | guilds=%s | DB=%s | K=%s", bot.user, len(bot.guilds), DATABASE_PATH, K_FACTOR)


@tree.error
async def on_app_command_error(inter: discord.Interaction, error: app_commands.AppCommandError):
    original = getattr(error, "original", error)
    if isinstance(original, LeagueError):
        msg = f"❗ {original}"
    else:
        log.exception("Command %s failed", getattr(inter.command, "name", "?"), exc_info=original)
        msg = "❗ Something went wrong, please try again."
    if inter.response.is_done():
        await inter.followup.send(msg, ephemeral=True)
    else:
        await inter.response.send_message(msg, ephemeral=True)


# --- Commands ---
@tree.command(name="ping", description="Replies with pong")
async def ping(inter: discord.Interaction):
    await inter.response.send_message("pong")


@tree.command(name="add_player", description="Add a player to the league")
@app_commands.describe(name="Player name as it should appear on the leaderboard")
async def add_player(inter: discord.Interaction, name: str):
    async with get_guild_lock(inter.guild_id):
        state = await _load(inter)
        player = league.add_player(state, name, rating=BASE_RATING)
        await db.save_state(state, league_name(inter))
    log.info("Player added guild=%s id=%s name=%s", inter.guild_id, player.id, player.name)
    await inter.response.send_message(
        f"✅ Added {fmt.bold(player.name)} at rating {fmt.code(str(player.rating))}.",
        allowed_mentions=ALLOWED_MENTIONS,
    )


@tree.command(name="leaderboard", description="Show players by rating")
@app_commands.describe(limit="How many players to show (1-50)")
async def leaderboard(inter: discord.Interaction, limit: app_commands.Range[int, 1, 50] = 20):
    state = await _load(inter)
    rows = league.leaderboard(state, int(limit))
    if not rows:
        return await inter.response.send_message("No players yet. Add one with /add_player.", ephemeral=True)
    await inter.response.send_message(
        f"**🏆 Leaderboard**\n{fmt.leaderboard_table(rows)}",
        allowed_mentions=ALLOWED_MENTIONS,
    )


@tree.command(name="stats", description="Show a player's rating and recent matches")
@app_commands.describe(player="Player to show")
@app_commands.autocomplete(player=player_autocomplete)
async def stats(inter: discord.Interaction, player: str):
    state = await _load(inter)
    p = league.find_player(state, player)
    if p is None:
        return await inter.response.send_message(f"❗ No player called {fmt.code(player)}.", ephemeral=True)

    win_rate = (p.wins / p.games * 100) if p.games else 0.0
    mine = [m for m in league.recent_matches(state, len(state.matches)) if p.id in m.player_ids][:5]
    recent = "\n".join(f"- {fmt.match_line(m, state)}" for m in mine) or "*No matches yet.*"
    msg = (
        f"## 📊 {p.name}\n"
        f"{fmt.bold('Rating')}: {fmt.code(str(p.rating))}\n"
        f"{fmt.bold('Record')}: {fmt.code(f'{p.wins}-{p.losses}')} ({fmt.code(f'{win_rate:.1f}%')})\n\n"
        f"**Recent Matches:**\n{recent}"
    )
    await inter.response.send_message(msg, ephemeral=True)


@tree.command(name="record_match", description="Record a 2v2 result and update ratings")
@app_commands.describe(
    a1="Team A player 1", a2="Team A player 2",
    b1="Team B player 1", b2="Team B player 2",
    winner="Winning team",
)
@app_commands.choices(winner=[
    app_commands.Choice(name="Team A", value="A"),
    app_commands.Choice(name="Team B", value="B"),
])
@app_commands.autocomplete(a1=player_autocomplete, a2=player_autocomplete, b1=player_autocomplete, b2=player_autocomplete)
async def record_match(
    inter: discord.Interaction,
    a1: str, a2: str, b1: str, b2: str,
    winner: app_commands.Choice[str],
):
    async with get_guild_lock(inter.guild_id):
        state = await _load(inter)
        team_a = _resolve(state, [a1, a2])
        team_b = _resolve(state, [b1, b2])
        before = {pid: state.players[pid].rating for pid in team_a + team_b if pid in state.players}
        match = league.record_match(state, team_a, team_b, winner.value, k=K_FACTOR)
        await db.save_state(state, league_name(inter))

    def change(pid: str) -> str:
        p = state.players[pid]
        delta = p.rating - before[pid]
        return f"{p.name} {p.rating} ({delta:+d})"

    lines = [
        f"**🏁 Match recorded** {fmt.match_line(match, state)}",
        "A: " + ", ".join(change(pid) for pid in match.team_a),
        "B: " + ", ".join(change(pid) for pid in match.team_b),
    ]
    await inter.response.send_message("\n".join(lines), allowed_mentions=ALLOWED_MENTIONS)


@tree.command(name="matches", description="Show the most recent matches")
@app_commands.describe(limit="How many matches to show (1-25)")
async def matches(inter: discord.Interaction, limit: Optional[app_commands.Range[int, 1, 25]] = None):
    state = await _load(inter)
    rows = league.recent_matches(state, int(limit or RECENT_MATCHES))
    if not rows:
        return await inter.response.send_message("No matches recorded yet.", ephemeral=True)
    body = "\n".join(f"- {fmt.match_line(m, state)}" for m in rows)
    await inter.response.send_message(f"**📜 Recent matches**\n{body}", allowed_mentions=ALLOWED_MENTIONS)


@tree.command(name="teams", description="Suggest balanced teams from selected players")
@app_commands.describe(
    players="Comma-separated player names (leave empty to pick from a list)",
    mode="Two equal teams, or 2-player pairs",
)
@app_commands.choices(mode=[
    app_commands.Choice(name="Two teams", value="split"),
    app_commands.Choice(name="Pairs", value="pairs"),
])
async def teams_cmd(
    inter: discord.Interaction,
    players: Optional[str] = None,
    mode: Optional[app_commands.Choice[str]] = None,
):
    state = await _load(inter)
    picked = mode.value if mode else "split"

    if players:
        chosen = _resolve(state, [x for x in players.split(",") if x.strip()])
        result = league.suggest_teams(state, chosen, picked, max_size=max_pool(picked))
        return await inter.response.send_message(render_teams(result, state), allowed_mentions=ALLOWED_MENTIONS)

    if len(state.players) < teams.MIN_PAIRS_POOL:
        return await inter.response.send_message("Add at least two players first.", ephemeral=True)

    async def on_submit(i2: discord.Interaction, ids: list[str], picked_mode: str):
        # ratings may have moved since the view was posted
        fresh = await _load(i2)
        try:
            result = league.suggest_teams(fresh, ids, picked_mode, max_size=max_pool(picked_mode))
        except LeagueError as e:
            return await i2.response.send_message(f"❗ {e}", ephemeral=True)
        await i2.response.send_message(render_teams(result, fresh), allowed_mentions=ALLOWED_MENTIONS)

    view = TeamsView(list(state.players.values()), on_submit)
    await inter.response.send_message("Pick the players, then choose a format:", view=view, ephemeral=True)


# --- Entrypoint ---
if __name__ == "__main__":
    if not TOKEN:
        log.error("DISCORD_TOKEN not set. Put it in environment or .env")
        raise SystemExit(1)

    asyncio.run(db.init_db(DATABASE_PATH))
    bot.run(TOKEN, log_handler=None)
