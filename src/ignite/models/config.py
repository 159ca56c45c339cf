import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, FrozenSet, List, Optional

from ignite.errors import ConfigError

logger = logging.getLogger('ignite.config')

CONFIG_FILENAME = "ignition.json"
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 27015

REQUIRED_FIELDS = ("working_dir", "start_command", "stop_command")


def config_dir() -> Path:
    """Per-user config directory (~/.ignition/)"""
    return Path.home() / ".ignition"


def default_config_path() -> Path:
    return config_dir() / CONFIG_FILENAME


def candidate_paths() -> List[Path]:
    """Locations searched for the config file, in order"""
    return [
        Path(".") / CONFIG_FILENAME,
        Path(".") / "config" / CONFIG_FILENAME,
        default_config_path(),
    ]


def find_config_path() -> Optional[Path]:
    for path in candidate_paths():
        if path.exists():
            return path
    return None


def _parse_ids(data: Dict[str, Any], *keys: str) -> FrozenSet[int]:
    for key in keys:
        if key not in data or data[key] is None:
            continue
        value = data[key]
        if not isinstance(value, list):
            raise ConfigError(f"'{key}' must be a list of ids")
        ids = set()
        for item in value:
            if isinstance(item, bool):
                raise ConfigError(f"'{key}' contains an invalid id: {item!r}")
            if isinstance(item, int):
                ids.add(item)
            elif isinstance(item, str) and item.strip().isdigit():
                ids.add(int(item.strip()))
            else:
                raise ConfigError(f"'{key}' contains an invalid id: {item!r}")
        return frozenset(ids)
    return frozenset()


def _optional_id(data: Dict[str, Any], key: str) -> Optional[int]:
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    raise ConfigError(f"'{key}' must be a channel id")


@dataclass(frozen=True)
class Config:
    """
    Bot configuration. Built once at startup and never mutated.

    Attributes:
        working_dir: Directory the start/stop commands run in
        start_command: Shell command line that starts the game server
        stop_command: Shell command line that stops the game server
        admin_role_ids: Roles allowed to run start/stop. Empty means any role.
        allowed_guild_ids: Guilds the privileged commands may be used in. Empty means any guild.
        host: IP address of the game server query endpoint
        port: A2S query port
        broadcast_channel_id: Channel that receives the join address at startup
        join_address: Join link override, with or without the steam://connect/ prefix
    """
    working_dir: str
    start_command: str
    stop_command: str
    admin_role_ids: FrozenSet[int] = field(default_factory=frozenset)
    allowed_guild_ids: FrozenSet[int] = field(default_factory=frozenset)
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    broadcast_channel_id: Optional[int] = None
    join_address: Optional[str] = None

    @property
    def unrestricted(self) -> bool:
        return not self.admin_role_ids and not self.allowed_guild_ids

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Config":
        """Build a Config from the decoded JSON document, validating it"""
        if not isinstance(data, dict):
            raise ConfigError("Config must be a JSON object")

        missing = [key for key in REQUIRED_FIELDS if key not in data]
        if missing:
            raise ConfigError(f"Missing required field(s): {', '.join(missing)}")
        for key in REQUIRED_FIELDS:
            if not isinstance(data[key], str):
                raise ConfigError(f"'{key}' must be a string")

        if "server_ids" in data and "allowed_guild_ids" in data:
            raise ConfigError("Use either 'server_ids' or 'allowed_guild_ids', not both")

        host = data.get("host") or DEFAULT_HOST
        if not isinstance(host, str):
            raise ConfigError("'host' must be a string")

        port = data.get("port", DEFAULT_PORT)
        if port is None:
            port = DEFAULT_PORT
        if isinstance(port, bool) or not isinstance(port, int) or not 0 < port < 65536:
            raise ConfigError(f"'port' must be an integer between 1 and 65535, got {port!r}")

        join_address = data.get("join_address")
        if join_address is not None and not isinstance(join_address, str):
            raise ConfigError("'join_address' must be a string")

        return cls(
            working_dir=data["working_dir"],
            start_command=data["start_command"],
            stop_command=data["stop_command"],
            admin_role_ids=_parse_ids(data, "admin_role_ids"),
            allowed_guild_ids=_parse_ids(data, "server_ids", "allowed_guild_ids"),
            host=host,
            port=port,
            broadcast_channel_id=_optional_id(data, "broadcast_channel_id"),
            join_address=join_address,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "working_dir": self.working_dir,
            "start_command": self.start_command,
            "stop_command": self.stop_command,
            "admin_role_ids": sorted(self.admin_role_ids),
            "server_ids": sorted(self.allowed_guild_ids),
            "host": self.host,
            "port": self.port,
            "broadcast_channel_id": self.broadcast_channel_id,
            "join_address": self.join_address,
        }

    @classmethod
    def load(cls, custom_path: Optional[str] = None) -> "Config":
        """Load config from custom_path, or from the first existing search location"""
        if custom_path:
            path = Path(custom_path)
            if not path.exists():
                raise ConfigError(f"Config file not found at specified path: {path}")
        else:
            path = find_config_path()
            if path is None:
                searched = "\n".join(f"- {p}" for p in candidate_paths())
                raise ConfigError(
                    f"Config file not found. Searched locations:\n{searched}\n\n"
                    "Run 'ignite init' to create a config file."
                )

        try:
            with open(path, 'r', encoding='utf-8') as f:
                contents = f.read()
        except OSError as e:
            raise ConfigError(f"Failed to read config file {path}: {e}") from e

        try:
            data = json.loads(contents)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Failed to parse {path}: {e}") from e

        config = cls.from_dict(data)
        logger.info(f"Loaded config from: {path}")
        return config

    def save(self, path: Optional[Path] = None) -> Path:
        """Write the config as pretty JSON, by default to ~/.ignition/ignition.json"""
        path = Path(path) if path is not None else default_config_path()
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, 'w', encoding='utf-8') as f:
                json.dump(self.to_dict(), f, indent=2)
        except OSError as e:
            raise ConfigError(f"Failed to write config file {path}: {e}") from e
        logger.info(f"Config saved to {path}")
        return path
