import asyncio
import ipaddress
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Tuple

import a2s

from ignite.errors import QueryError
from ignite.models.server_status import ServerStatus

logger = logging.getLogger('ignite.query')

DEFAULT_QUERY_TIMEOUT = 3.0


def validate_host(host: str, port: int) -> Tuple[str, int]:
    """Check host is an IP literal and port a valid UDP port, before any network I/O"""
    try:
        ip = ipaddress.ip_address(host)
    except ValueError:
        raise QueryError(f"Invalid IP address: {host}")
    if isinstance(port, bool) or not isinstance(port, int) or not 0 < port < 65536:
        raise QueryError(f"Invalid port: {port}")
    return str(ip), port


def query_info(address: Tuple[str, int], timeout: float = DEFAULT_QUERY_TIMEOUT) -> ServerStatus:
    """
    Run one A2S_INFO exchange (challenge handled by a2s) and map it to a ServerStatus.

    No answer within timeout, an ICMP refusal or a malformed reply all mean
    the server is offline; none of them raise.
    """
    try:
        info = a2s.info(address, timeout=timeout)
    except (OSError, a2s.BrokenMessageError, ValueError) as e:
        logger.info(f"Server {address[0]}:{address[1]} did not answer: {e!r}")
        return ServerStatus.offline()

    return ServerStatus(
        online=True,
        name=info.server_name,
        map=info.map_name,
        game=info.game,
        players=info.player_count,
        max_players=info.max_players,
    )


class QueryService:
    def __init__(self, timeout: float = DEFAULT_QUERY_TIMEOUT, max_workers: int = 4):
        self.timeout = timeout
        self.executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="ignite-query")

    async def query(self, host: str, port: int) -> ServerStatus:
        """
        Query the live status of the game server at host:port.

        An unreachable server is a normal ServerStatus(online=False). Raises
        QueryError for an invalid host or when the worker itself fails.
        """
        address = validate_host(host, port)
        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(self.executor, query_info, address, self.timeout)
        except Exception as e:
            logger.error(f"Query task failed for {address[0]}:{address[1]}: {e}", exc_info=True)
            raise QueryError(f"Query task failed: {e}") from e

    def shutdown(self):
        self.executor.shutdown(wait=False)
