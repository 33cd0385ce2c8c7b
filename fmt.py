from typing import Optional, Iterable

from pickle_league.models import LeagueState, Match, PairsResult, Player, SplitResult


def bold(t: str) -> str:
	return f"**{t}**"


def code(t: str) -> str:
	return f"`{t}`"


def block(t: str, lang: str | None = None) -> str:
	return f"```{lang or ''}\n{t}\n```"


def name_of(state: LeagueState, player_id: str) -> str:
	p = state.get_player(player_id)
	return p.name if p is not None else "?"


def labelled(state: LeagueState, player_id: str) -> str:
	"""`Name (rating)`, or `?` for an id missing from the registry."""
	p = state.get_player(player_id)
	return f"{p.name} ({p.rating})" if p is not None else "?"


def mono_table(rows: list[list[str]], headers: Optional[list[str]] = None) -> str:
	"""Render a simple monospaced table as a Markdown code block.

	- Pads columns to the widest cell
	- Includes a header divider if headers are provided
	"""
	norm_rows = [[str(c) for c in r] for r in rows]
	col_count = max((len(r) for r in norm_rows), default=0)
	if headers:
		headers = [str(h) for h in headers]
		col_count = max(col_count, len(headers))

	def pad_row(r: Iterable[str]) -> list[str]:
		lst = list(r)
		if len(lst) < col_count:
			lst += [""] * (col_count - len(lst))
		return lst

	if headers:
		headers = pad_row(headers)
	norm_rows = [pad_row(r) for r in norm_rows]

	widths = [0] * col_count
	for r in ([headers] if headers else []) + norm_rows:
		for i, cell in enumerate(r):
			widths[i] = max(widths[i], len(cell))

	def fmt_row(r: list[str]) -> str:
		return " | ".join(r[i].ljust(widths[i]) for i in range(col_count)).rstrip()

	lines: list[str] = []
	if headers:
		lines.append(fmt_row(headers))
		lines.append("-+-".join("-" * w for w in widths))
	for r in norm_rows:
		lines.append(fmt_row(r))

	return block("\n".join(lines), "md")


def leaderboard_table(players: list[Player]) -> str:
	rows = [
		[str(i), p.name, str(p.rating), str(p.wins), str(p.losses)]
		for i, p in enumerate(players, start=1)
	]
	return mono_table(rows, headers=["#", "Player", "Rating", "W", "L"])


def match_line(match: Match, state: LeagueState) -> str:
	"""One history entry: date, both teams, winner."""
	a = " & ".join(name_of(state, pid) for pid in match.team_a)
	b = " & ".join(name_of(state, pid) for pid in match.team_b)
	return f"{code(match.date)} A: {a} vs B: {b} · Winner: {bold('Team ' + match.winner)}"


def split_summary(result: SplitResult, state: LeagueState) -> str:
	sum_a = sum(state.players[pid].rating for pid in result.team_a)
	sum_b = sum(state.players[pid].rating for pid in result.team_b)
	lines = [f"{bold('Team A')} ({sum_a})"]
	lines += [f"- {labelled(state, pid)}" for pid in result.team_a]
	lines.append(f"{bold('Team B')} ({sum_b})")
	lines += [f"- {labelled(state, pid)}" for pid in result.team_b]
	lines.append(f"Rating difference: {code(str(result.diff))} (lower is better)")
	return "\n".join(lines)


def pairs_summary(result: PairsResult, state: LeagueState) -> str:
	lines = []
	for i, (a, b) in enumerate(result.pairs, start=1):
		total = state.players[a].rating + state.players[b].rating
		lines.append(f"{i}. {labelled(state, a)} & {labelled(state, b)} = {code(str(total))}")
	lines.append(f"Spread: {code(str(result.spread))} (lower is better)")
	return "\n".join(lines)
