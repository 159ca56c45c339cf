import logging
from dataclasses import dataclass
from typing import FrozenSet, Optional

from ignite.errors import PermissionCheckError
from ignite.models.config import Config

logger = logging.getLogger('ignite.permissions')


@dataclass(frozen=True)
class CallerContext:
    """
    Who is invoking a command, as resolved by the chat backend.

    Attributes:
        user_id: Chat user id
        guild_id: Guild the command was sent from, None outside a guild
        role_ids: Role ids of the caller in that guild, None when they could not be resolved
    """
    user_id: int
    guild_id: Optional[int] = None
    role_ids: Optional[FrozenSet[int]] = None


def authorize(caller: CallerContext, config: Config) -> bool:
    """
    Check whether caller may run a privileged command.

    Returns False when a restriction denies the caller. Raises
    PermissionCheckError when the context needed by an active restriction
    is missing. The guild check runs first and short-circuits.
    """
    if config.unrestricted:
        return True

    if config.allowed_guild_ids:
        if caller.guild_id is None:
            raise PermissionCheckError("This command can only be used in a server")
        if caller.guild_id not in config.allowed_guild_ids:
            logger.debug(f"User {caller.user_id} denied: guild {caller.guild_id} not allowed")
            return False

    if config.admin_role_ids:
        if caller.role_ids is None:
            raise PermissionCheckError("Could not fetch member information")
        if config.admin_role_ids.isdisjoint(caller.role_ids):
            logger.debug(f"User {caller.user_id} denied: no admin role")
            return False

    return True
