from typing import Union

from ignite.errors import IgniteError, QueryError
from ignite.models.config import Config
from ignite.models.execution_result import ExecutionResult
from ignite.models.reply import GREEN, ORANGE, RED, Panel, Reply
from ignite.models.server_status import ServerStatus

STEAM_CONNECT_PREFIX = "steam://connect/"

# Discord rejects messages longer than this
MESSAGE_LIMIT = 2000

PAST_TENSE = {
    "start": "started",
    "stop": "stopped",
}


def join_address(config: Config) -> str:
    """
    Join link for the server.

    Uses config.join_address when set, adding the steam://connect/ prefix if
    missing, otherwise builds the link from host and port.
    """
    address = config.join_address or ""
    if address:
        if address.startswith(STEAM_CONNECT_PREFIX):
            return address
        return f"{STEAM_CONNECT_PREFIX}{address}"
    return f"{STEAM_CONNECT_PREFIX}{config.host}:{config.port}"


def _code_block(output: str, budget: int) -> str:
    """Wrap output in a code block no longer than budget characters"""
    output = output.strip().replace("```", "`\u200b``")
    if not output:
        output = "(no output)"
    room = budget - len("```\n\n```")
    if len(output) > room:
        # Keep the tail, where scripts usually print their errors
        output = "..." + output[-(room - 3):]
    return f"```\n{output}\n```"


def format_process_outcome(action: str, outcome: Union[ExecutionResult, IgniteError]) -> Reply:
    """Render the result of a start/stop command run"""
    done = PAST_TENSE.get(action, f"{action}ed")
    if isinstance(outcome, ExecutionResult):
        if outcome.success:
            header = f"✅ **Server {done} successfully!**\n\n"
            output = outcome.stdout
        else:
            header = f"❌ **Failed to {action} server** (exit status {outcome.returncode})\n\n"
            output = outcome.stderr
        return Reply(content=header + _code_block(output, MESSAGE_LIMIT - len(header)))

    return format_error(f"Failed to execute {action} command", outcome)


def format_status(outcome: Union[ServerStatus, QueryError], config: Config) -> Reply:
    """Render a status query result as a panel"""
    if isinstance(outcome, QueryError):
        panel = Panel(title="❌ Failed to query server", description=str(outcome), colour=RED)
        return Reply(panel=panel)

    if not outcome.online:
        panel = Panel(
            title="🔴 Server unreachable",
            description=f"No answer from `{config.host}:{config.port}`. The server is offline or not responding.",
            colour=RED,
        )
        return Reply(panel=panel)

    panel = Panel(title=f"🟢 {outcome.name}", description="Server is online", colour=GREEN)
    panel.add_field("Game", outcome.game or "Unknown")
    panel.add_field("Map", outcome.map or "N/A")
    panel.add_field("Players", f"{outcome.players}/{outcome.max_players}")
    panel.add_field("Join", join_address(config), inline=False)
    return Reply(panel=panel)


def format_denied() -> Reply:
    return Reply(content="❌ You don't have permission to use this command.")


def format_error(header: str, error: Exception) -> Reply:
    return Reply(content=f"❌ **{header}**\n\n{error}"[:MESSAGE_LIMIT])


def format_broadcast(config: Config) -> Reply:
    """Announcement posted to the broadcast channel when the bot comes online"""
    panel = Panel(
        title="🔥 Server management bot online",
        description=f"Join the server: {join_address(config)}",
        colour=ORANGE,
    )
    return Reply(panel=panel)

