from typing import FrozenSet, Optional

import discord
from discord.ext import commands
import logging

from ignite.models.reply import Panel, Reply
from ignite.services.command_service import Invocation
from ignite.services.permission_service import CallerContext

# Configure logger
logger = logging.getLogger('discord.server_control')
logger.setLevel(logging.INFO)


def panel_to_embed(panel: Panel) -> discord.Embed:
    """Render a Panel as a Discord embed"""
    embed = discord.Embed(title=panel.title, color=discord.Color(panel.colour))
    if panel.description:
        embed.description = panel.description
    for name, value, inline in panel.fields:
        embed.add_field(name=name, value=value, inline=inline)
    if panel.footer:
        embed.set_footer(text=panel.footer)
    return embed


def _role_ids(author) -> Optional[FrozenSet[int]]:
    # Only guild members carry roles; DM authors are plain users
    roles = getattr(author, "roles", None)
    if roles is None:
        return None
    return frozenset(role.id for role in roles)


class DiscordInvocation(Invocation):
    """Invocation backed by a discord.py command context (slash or prefix)"""

    def __init__(self, ctx: commands.Context):
        self.ctx = ctx
        self._caller = CallerContext(
            user_id=ctx.author.id,
            guild_id=ctx.guild.id if ctx.guild is not None else None,
            role_ids=_role_ids(ctx.author) if ctx.guild is not None else None,
        )

    @property
    def caller(self) -> CallerContext:
        return self._caller

    async def defer(self):
        await self.ctx.defer()

    async def reply(self, reply: Reply):
        embed = panel_to_embed(reply.panel) if reply.panel is not None else None
        await self.ctx.send(content=reply.content, embed=embed)


class ServerControl(commands.Cog):
    def __init__(self, bot):
        self.bot = bot
        self.command_service = bot.command_service

    @commands.hybrid_command(name="start", description="Start the game server")
    async def start_server(self, ctx: commands.Context):
        """
        Start the game server.
        Format: !start or /start
        """
        await self.command_service.handle_start(DiscordInvocation(ctx))

    @commands.hybrid_command(name="stop", description="Stop the game server")
    async def stop_server(self, ctx: commands.Context):
        """
        Stop the game server.
        Format: !stop or /stop
        """
        await self.command_service.handle_stop(DiscordInvocation(ctx))

    @commands.hybrid_command(name="status", description="Show the game server status")
    async def server_status(self, ctx: commands.Context):
        """
        Show the live status of the game server.
        Format: !status or /status
        """
        await self.command_service.handle_status(DiscordInvocation(ctx))

    async def cog_command_error(self, ctx: commands.Context, error: commands.CommandError):
        logger.error(f"Error during {ctx.command} command: {error}", exc_info=error)


async def setup(bot):
    await bot.add_cog(ServerControl(bot))
