import os
import datetime
import logging
from logging.handlers import RotatingFileHandler
from typing import Optional

import discord
from discord.ext import commands

from ignite.cogs.server_control import panel_to_embed
from ignite.models.config import Config
from ignite.services import CommandService, ProcessService, QueryService
from ignite.services.format_service import format_broadcast, join_address

description = '''
Bot for starting, stopping and checking a self-hosted Steam game server.
'''

EXTENSIONS = ("ignite.cogs.server_control",)

logger = logging.getLogger('ignite.bot')


class IgniteBot(commands.Bot):
    def __init__(self, config: Config,
                 process_service: Optional[ProcessService] = None,
                 query_service: Optional[QueryService] = None):
        intents = discord.Intents.default()
        intents.message_content = True
        intents.guilds = True
        # Caller roles arrive with each invocation
        intents.members = False

        super().__init__(
            command_prefix=os.environ.get("BOT_PREFIX", "!"),
            description=description,
            intents=intents,
            help_command=None
        )

        self.config = config
        self.process_service = process_service or ProcessService()
        self.query_service = query_service or QueryService()
        self.command_service = CommandService(config, self.process_service, self.query_service)
        self._announced = False

    async def setup_hook(self):
        for extension in EXTENSIONS:
            await self.load_extension(extension)
            logger.info(f"Loaded {extension}")

        await self.tree.sync()
        logger.info("Commands registered globally")

    async def on_ready(self):
        logger.info(f"Logged in as {self.user} (ID: {self.user.id})")
        logger.info(f"Bot is in {len(self.guilds)} guilds")
        # on_ready fires again after every reconnect
        if not self._announced:
            self._announced = True
            await self.broadcast_join_address()

    async def broadcast_join_address(self):
        """Post the join address to the configured broadcast channel, if any"""
        channel_id = self.config.broadcast_channel_id
        if channel_id is None:
            return
        try:
            channel = self.get_channel(channel_id) or await self.fetch_channel(channel_id)
            if not isinstance(channel, discord.abc.Messageable):
                logger.error(f"Channel {channel_id} cannot receive messages, join address not announced")
                return
            reply = format_broadcast(self.config)
            await channel.send(embed=panel_to_embed(reply.panel))
            logger.info(f"Join address {join_address(self.config)} announced in channel {channel_id}")
        except discord.DiscordException as e:
            logger.error(f"Failed to announce join address in channel {channel_id}: {e}")

    async def close(self):
        self.process_service.shutdown()
        self.query_service.shutdown()
        await super().close()


def setup_logging(log_dir: str = 'logs'):
    """Configure logging with file rotation"""
    os.makedirs(log_dir, exist_ok=True)

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    file_handler = RotatingFileHandler(
        filename=os.path.join(log_dir, f'ignite_{datetime.datetime.now().strftime("%Y%m%d")}.log'),
        maxBytes=5*1024*1024,  # 5MB
        backupCount=5,
        encoding='utf-8'
    )
    file_handler.setFormatter(formatter)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)

    # Configure loggers
    logging.basicConfig(
        level=logging.INFO,
        handlers=[file_handler, console_handler]
    )

    # Silence noisy loggers
    logging.getLogger('discord.http').setLevel(logging.WARNING)


def run_bot(token: str, config: Config):
    """Start the bot and block until it disconnects"""
    bot = IgniteBot(config)
    # Logging is already configured by setup_logging
    bot.run(token, log_handler=None)
