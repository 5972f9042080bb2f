"""
Shell operations for Explorer.

Provides the file commands and the dispatcher that drives them.
"""

from .file_ops import FileOperator, OpResult, Outcome
from .dispatcher import CommandDispatcher, parse_command

__all__ = ['FileOperator', 'OpResult', 'Outcome', 'CommandDispatcher', 'parse_command']
