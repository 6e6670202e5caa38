"""
Demo Subsystem

Command objects, their executor and the HTTP routes that stand in for the
tracker demo screen.
"""

from .commands import COMMANDS, build_command
from .executor import CommandExecutor, CommandOutcome, CommandStatus, LogBuffer

__all__ = ['COMMANDS', 'build_command', 'CommandExecutor', 'CommandOutcome', 'CommandStatus', 'LogBuffer']
