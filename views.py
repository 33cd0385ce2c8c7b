import discord

from pickle_league.models import Player

# Discord caps a select at 25 options
MAX_SELECT_OPTIONS = 25


def player_options(players: list[Player]) -> list[discord.SelectOption]:
    """One option per player, highest rated first, capped at the select limit."""
    ranked = sorted(players, key=lambda p: p.rating, reverse=True)[:MAX_SELECT_OPTIONS]
    return [
        discord.SelectOption(label=p.name[:100], value=p.id, description=f"Rating {p.rating}")
        for p in ranked
    ]


class PoolSelect(discord.ui.Select):
    def __init__(self, players: list[Player]):
        opts = player_options(players)
        super().__init__(
            placeholder="Select players",
            min_values=1,
            max_values=len(opts),
            options=opts,
        )

    async def callback(self, interaction: discord.Interaction):
        self.view.selected = list(self.values)
        await interaction.response.defer()


class TeamsView(discord.ui.View):
    """Pick a player pool, then press a button to balance it.

    on_submit(interaction, player_ids, mode) is awaited with mode "pairs" or "split".
    """

    def __init__(self, players: list[Player], on_submit):
        super().__init__(timeout=120)
        self.on_submit = on_submit
        self.selected: list[str] = []
        self.add_item(PoolSelect(players))

    async def _submit(self, interaction: discord.Interaction, mode: str):
        if not self.selected:
            return await interaction.response.send_message("Select some players first.", ephemeral=True)
        await self.on_submit(interaction, list(self.selected), mode)

    @discord.ui.button(label="Pairs", style=discord.ButtonStyle.secondary)
    async def pairs(self, interaction: discord.Interaction, _button: discord.ui.Button):
        await self._submit(interaction, "pairs")

    @discord.ui.button(label="Two teams", style=discord.ButtonStyle.success)
    async def split(self, interaction: discord.Interaction, _button: discord.ui.Button):
        await self._submit(interaction, "split")
