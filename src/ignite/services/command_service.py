import logging
from abc import ABC, abstractmethod

from ignite.errors import PermissionCheckError, ProcessError, QueryError
from ignite.models.config import Config
from ignite.models.reply import Reply
from ignite.services.format_service import (
    format_denied,
    format_error,
    format_process_outcome,
    format_status,
)
from ignite.services.permission_service import CallerContext, authorize
from ignite.services.process_service import ProcessService
from ignite.services.query_service import QueryService

logger = logging.getLogger('ignite.commands')


class Invocation(ABC):
    """
    One command invocation as delivered by a chat backend.

    A backend (Discord, or anything else) implements this so the handlers
    below never touch the chat library directly.
    """

    @property
    @abstractmethod
    def caller(self) -> CallerContext:
        """Caller identity, guild and roles for the permission check"""

    @abstractmethod
    async def defer(self):
        """Acknowledge an invocation whose reply will take a while"""

    @abstractmethod
    async def reply(self, reply: Reply):
        """Send the final reply for this invocation"""


class CommandService:
    def __init__(self, config: Config, process_service: ProcessService, query_service: QueryService):
        self.config = config
        self.process_service = process_service
        self.query_service = query_service

    async def handle_start(self, invocation: Invocation):
        await self._run_privileged(invocation, "start")

    async def handle_stop(self, invocation: Invocation):
        await self._run_privileged(invocation, "stop")

    async def handle_status(self, invocation: Invocation):
        """Status is not privileged: anyone may ask"""
        await self._safe_defer(invocation)
        try:
            status = await self.query_service.query(self.config.host, self.config.port)
            reply = format_status(status, self.config)
        except QueryError as e:
            logger.error(f"Error during status command: {e}")
            reply = format_status(e, self.config)
        except Exception as e:
            logger.error(f"Unexpected error during status command: {e}", exc_info=True)
            reply = format_error("Failed to query server", e)
        await self._safe_reply(invocation, reply)

    async def _run_privileged(self, invocation: Invocation, action: str):
        caller = invocation.caller
        try:
            allowed = authorize(caller, self.config)
        except PermissionCheckError as e:
            logger.warning(f"Permission check failed for user {caller.user_id}: {e}")
            await self._safe_reply(invocation, format_error("Permission check failed", e))
            return

        if not allowed:
            logger.info(f"User {caller.user_id} is not allowed to {action} the server")
            await self._safe_reply(invocation, format_denied())
            return

        await self._safe_defer(invocation)
        logger.info(f"User {caller.user_id} requested server {action}")
        run = self.process_service.start if action == "start" else self.process_service.stop
        try:
            result = await run(self.config)
            reply = format_process_outcome(action, result)
        except ProcessError as e:
            reply = format_process_outcome(action, e)
        except Exception as e:
            logger.error(f"Unexpected error during {action} command: {e}", exc_info=True)
            reply = format_error(f"Failed to {action} server", e)
        await self._safe_reply(invocation, reply)

    async def _safe_defer(self, invocation: Invocation):
        try:
            await invocation.defer()
        except Exception as e:
            logger.warning(f"Failed to defer invocation: {e}")

    async def _safe_reply(self, invocation: Invocation, reply: Reply):
        # The invocation may have expired by now; a failed reply is only logged
        try:
            await invocation.reply(reply)
        except Exception as e:
            logger.error(f"Failed to send reply: {e}")
