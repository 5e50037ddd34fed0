"""
Command Builder
===============

Builds payload commands and wraps them in radio send requests.

Commands use the mission text format:

    CMD,<TEAM_ID>,<COMMAND>,<ARGUMENT>
"""

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Union

from ..radio.frame_codec import Frame
from ..radio.subframes import BROADCAST_ADDRESS, SendStatusFrame, build_send_request

logger = logging.getLogger(__name__)


class SimulationMode(Enum):
    """Arguments of the SIM command."""
    ENABLE = 'ENABLE'
    ACTIVATE = 'ACTIVATE'
    DISABLE = 'DISABLE'


@dataclass
class CommandResult:
    """Command that was built, and what the radio said about it."""
    frame: Frame
    text: str
    description: str
    frame_id: int
    timestamp: float
    status: Optional[SendStatusFrame] = None

    @property
    def acknowledged(self) -> bool:
        return self.status is not None

    @property
    def delivered(self) -> bool:
        return self.status is not None and self.status.delivered


class CommandBuilder:
    """
    High-level command builder.

    Every command gets the next 8-bit frame id; the radio echoes it in the
    send status so deliveries can be matched to commands.
    """

    def __init__(self, team_id: int = 1047,
                 destination_address: int = BROADCAST_ADDRESS):
        """
        Initialize command builder.

        Args:
            team_id: Team id expected by the payload
            destination_address: Radio address of the payload
        """
        self.team_id = team_id
        self.destination_address = destination_address
        self._frame_id = 0

        # Command history
        self._history: List[CommandResult] = []

    def telemetry(self, on: bool) -> CommandResult:
        """Turn payload telemetry transmission on or off (CX)."""
        return self._command('CX', 'ON' if on else 'OFF')

    def set_time(self, utc: Optional[Union[float, str]] = None) -> CommandResult:
        """
        Set payload time (ST).

        Args:
            utc: 'GPS' to use the GPS clock, a Unix timestamp, or None for now
        """
        if isinstance(utc, str):
            if utc != 'GPS':
                raise ValueError(f"unknown time source: {utc!r}")
            return self._command('ST', 'GPS')

        t = time.gmtime(time.time() if utc is None else utc)
        return self._command('ST', time.strftime('%H:%M:%S', t))

    def simulation(self, mode: SimulationMode) -> CommandResult:
        """Control simulation mode (SIM)."""
        return self._command('SIM', mode.value)

    def simulated_pressure(self, pressure_pa: int) -> CommandResult:
        """Feed a simulated barometer reading in pascals (SIMP)."""
        if pressure_pa < 0:
            raise ValueError("pressure must be positive")
        return self._command('SIMP', str(int(pressure_pa)))

    def calibrate(self) -> CommandResult:
        """Calibrate altitude to zero at the current pressure (CAL)."""
        return self._command('CAL')

    def beacon(self, on: bool) -> CommandResult:
        """Turn the audio beacon on or off (BCN)."""
        return self._command('BCN', 'ON' if on else 'OFF')

    def raw_command(self, command: str, argument: Optional[str] = None) -> CommandResult:
        """Any other command."""
        if ',' in command or (argument and ',' in argument):
            raise ValueError("command fields cannot contain commas")
        return self._command(command, argument)

    def _command(self, command: str, argument: Optional[str] = None) -> CommandResult:
        parts = ['CMD', str(self.team_id), command]
        if argument is not None:
            parts.append(argument)
        text = ','.join(parts)

        frame_id = self._frame_id
        self._frame_id = (self._frame_id + 1) & 0xFF

        result = CommandResult(
            frame=build_send_request(frame_id, self.destination_address, text),
            text=text,
            description=' '.join(parts[2:]),
            frame_id=frame_id,
            timestamp=time.time(),
        )
        logger.info("Built command %s (frame %d)", text, frame_id)

        self._history.append(result)
        return result

    def acknowledge(self, status: SendStatusFrame) -> Optional[CommandResult]:
        """
        Attach a send status to the newest command with its frame id.

        Returns:
            The matched command, or None if no pending command has that id
        """
        for result in reversed(self._history):
            if result.frame_id == status.frame_id and result.status is None:
                result.status = status
                if not status.delivered:
                    logger.warning("Command %s not delivered: %s", result.text, status)
                return result

        logger.debug("No pending command for frame id %d", status.frame_id)
        return None

    @property
    def next_frame_id(self) -> int:
        return self._frame_id

    def get_history(self, count: int = 10) -> List[CommandResult]:
        """Get command history."""
        return self._history[-count:]

    def clear_history(self):
        """Clear command history."""
        self._history.clear()

    def get_statistics(self) -> Dict:
        """Get command statistics."""
        return {
            'total_commands': len(self._history),
            'next_frame_id': self._frame_id,
            'delivered_count': sum(1 for c in self._history if c.delivered),
            'failed_count': sum(1 for c in self._history
                                if c.acknowledged and not c.delivered),
            'pending_count': sum(1 for c in self._history if not c.acknowledged),
        }
