"""
Ground Telecommand
==================

Builds payload commands as radio send requests.
"""

from .command_builder import CommandBuilder, CommandResult, SimulationMode

__all__ = [
    'CommandBuilder',
    'CommandResult',
    'SimulationMode',
]
