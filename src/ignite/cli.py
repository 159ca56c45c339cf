import argparse
import logging
import os
from typing import Callable, List, Optional

from dotenv import load_dotenv

from ignite.errors import ConfigError
from ignite.models.config import DEFAULT_HOST, DEFAULT_PORT, Config, candidate_paths

TOKEN_ENV = "DISCORD_BOT_TOKEN"

logger = logging.getLogger('ignite.cli')


def parse_ids(text: str) -> List[int]:
    """Parse a comma-separated list of ids, skipping anything that is not a number"""
    ids = []
    for part in text.split(','):
        part = part.strip()
        if part.isdigit():
            ids.append(int(part))
    return ids


def parse_port(text: str) -> int:
    try:
        port = int(text)
    except ValueError:
        return DEFAULT_PORT
    return port if 0 < port < 65536 else DEFAULT_PORT


def prompt_config(prompt: Optional[Callable[[str], str]] = None) -> Config:
    """Ask the operator for every config value, through input() unless prompt is given"""
    if prompt is None:
        prompt = input

    def ask(message: str) -> str:
        return prompt(message).strip()

    working_dir = ask("Working directory (where server files are located): ")
    start_command = ask("Start command (e.g., './start.sh' or 'systemctl start server'): ")
    stop_command = ask("Stop command (e.g., './stop.sh' or 'systemctl stop server'): ")
    admin_role_ids = parse_ids(ask("Admin role IDs (comma-separated, optional - press Enter to skip): "))
    server_ids = parse_ids(ask("Server IDs (comma-separated, optional - press Enter to skip): "))
    host = ask(f"Steam server host (default: {DEFAULT_HOST}): ") or DEFAULT_HOST
    port_text = ask(f"Steam server query port (default: {DEFAULT_PORT}): ")
    port = parse_port(port_text) if port_text else DEFAULT_PORT
    channel_text = ask("Broadcast channel ID for the join address (optional - press Enter to skip): ")
    join_address = ask("Join address override, e.g. 'play.example.com:27015' (optional - press Enter to skip): ")

    return Config(
        working_dir=working_dir,
        start_command=start_command,
        stop_command=stop_command,
        admin_role_ids=frozenset(admin_role_ids),
        allowed_guild_ids=frozenset(server_ids),
        host=host,
        port=port,
        broadcast_channel_id=int(channel_text) if channel_text.isdigit() else None,
        join_address=join_address or None,
    )


def init_command(args: argparse.Namespace) -> int:
    print("🔥 Ignite Bot Configuration\n")
    config = prompt_config()
    try:
        path = config.save(args.config)
    except ConfigError as e:
        logger.critical(str(e))
        return 1

    print(f"\n✅ Configuration saved to {path}")
    print("\n📝 Next steps:")
    print(f"   1. Create a .env file with your {TOKEN_ENV}")
    print("   2. Run 'ignite start' to start the bot")
    print("\n💡 The config can also be placed at:")
    for candidate in candidate_paths():
        print(f"   - {candidate}")
    print("   - Use --config to specify a custom location")
    return 0


def start_command(args: argparse.Namespace) -> int:
    from ignite.main import run_bot, setup_logging

    setup_logging(args.log_dir)
    load_dotenv()

    try:
        config = Config.load(args.config)
    except ConfigError as e:
        logger.critical(f"Invalid configuration: {e}")
        return 1

    token = os.environ.get(TOKEN_ENV)
    if not token:
        logger.critical(f"Missing {TOKEN_ENV} in environment variables. Create a .env file with your bot token.")
        return 1

    logger.info("Starting Ignite bot...")
    logger.info(f"Working dir: {config.working_dir}")
    logger.info(f"Steam server: {config.host}:{config.port}")
    if config.admin_role_ids:
        logger.info(f"Admin roles: {sorted(config.admin_role_ids)}")
    if config.allowed_guild_ids:
        logger.info(f"Restricted to servers: {sorted(config.allowed_guild_ids)}")

    run_bot(token, config)
    return 0


def stop_command(args: argparse.Namespace) -> int:
    print("⚠️  Stop command not yet implemented.")
    print("    To stop the bot, use Ctrl+C in the terminal where it's running.")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="ignite", description="Discord bot for managing Steam game servers")
    parser.add_argument("-c", "--config", default=None,
                        help="Path to config file (overrides default search locations)")
    parser.add_argument("--log-dir", default="logs", help="Directory for rotating log files")

    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("init", help="Initialize the bot configuration").set_defaults(func=init_command)
    subparsers.add_parser("start", help="Start the Discord bot").set_defaults(func=start_command)
    subparsers.add_parser("stop", help="Stop the Discord bot (not implemented)").set_defaults(func=stop_command)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    return args.func(args)
