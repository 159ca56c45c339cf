class IgniteError(Exception):
    """Base class for every error the bot reports to a caller"""


class ConfigError(IgniteError):
    """Configuration file missing, unreadable or invalid. Fatal at startup."""


class PermissionCheckError(IgniteError):
    """Caller context needed for a permission check could not be obtained"""


class ProcessError(IgniteError):
    """A start/stop command could not be spawned at all"""


class QueryError(IgniteError):
    """Invalid query target or a fault in the query worker itself"""
