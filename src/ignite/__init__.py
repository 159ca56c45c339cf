"""
Discord bot for starting, stopping and checking a self-hosted Steam game server.
"""

__version__ = "0.1.0"
