"""
Value objects shared by the services and the chat adapter.
"""

from .config import Config
from .execution_result import ExecutionResult
from .reply import Panel, Reply
from .server_status import ServerStatus

__all__ = ['Config', 'ExecutionResult', 'Panel', 'Reply', 'ServerStatus']
