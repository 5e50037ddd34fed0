"""
Telemetry Processor
===================

Consumer side of the receive pipeline: drains classified outcomes once per
tick, logs telemetry to the sink and dispatches to handlers.
"""

import logging
import time
from collections import Counter, deque
from dataclasses import dataclass
from typing import Callable, Deque, Dict, List, Optional

import numpy as np

from .channel import Receiver
from .classifier import ClassifiedOutcome, Status, Telemetry
from .record import TelemetryField, TelemetryRecord, format_record
from .sink import TelemetrySink
from .statistics import field_series, summarize

logger = logging.getLogger(__name__)


@dataclass
class TelemetryFrame:
    """Telemetry record with its arrival time."""
    timestamp: float
    outcome: Telemetry

    @property
    def record(self) -> TelemetryRecord:
        return self.outcome.record


class TelemetryProcessor:
    """
    Main telemetry consumer.

    Call poll() once per scheduling tick; it never blocks.
    """

    def __init__(self, receiver: Receiver,
                 sink: Optional[TelemetrySink] = None,
                 max_history: int = 10000):
        """
        Initialize telemetry processor.

        Args:
            receiver: Channel receiver fed by the producers
            sink: Destination for formatted telemetry lines
            max_history: Records kept for get_latest() and series()
        """
        self.receiver = receiver
        self.sink = sink

        # Callbacks
        self._telemetry_callbacks: List[Callable[[Telemetry], None]] = []
        self._status_callbacks: List[Callable[[Status], None]] = []
        self._outcome_callbacks: List[Callable[[ClassifiedOutcome], None]] = []

        self.connected = True

        # Statistics
        self.stats = {
            'outcomes_received': 0,
            'telemetry_received': 0,
            'dropped_packets': 0,
            'callback_errors': 0,
        }
        self.outcome_counts: Counter = Counter()
        self._last_packet_count: Dict[int, int] = {}

        # History
        self._history: Deque[TelemetryFrame] = deque(maxlen=max_history)

    def register_telemetry_callback(self, callback: Callable[[Telemetry], None]):
        """Register callback for telemetry outcomes."""
        self._telemetry_callbacks.append(callback)

    def register_status_callback(self, callback: Callable[[Status], None]):
        """Register callback for send status outcomes."""
        self._status_callbacks.append(callback)

    def register_outcome_callback(self, callback: Callable[[ClassifiedOutcome], None]):
        """Register callback for every outcome."""
        self._outcome_callbacks.append(callback)

    def poll(self) -> List[ClassifiedOutcome]:
        """
        Drain whatever is queued and handle it.

        Returns:
            Outcomes handled this tick, in arrival order
        """
        if not self.connected:
            return []

        drained = self.receiver.drain()
        for outcome in drained.outcomes:
            self._handle(outcome)

        if drained.disconnected:
            logger.warning("Telemetry receiver disconnected.")
            self.connected = False

        return drained.outcomes

    def _handle(self, outcome: ClassifiedOutcome):
        self.stats['outcomes_received'] += 1
        self.outcome_counts[type(outcome).__name__] += 1

        if isinstance(outcome, Telemetry):
            self._add_telemetry(outcome)
            self._dispatch(self._telemetry_callbacks, outcome)
        elif isinstance(outcome, Status):
            self._dispatch(self._status_callbacks, outcome)

        self._dispatch(self._outcome_callbacks, outcome)

    def _add_telemetry(self, outcome: Telemetry):
        record = outcome.record
        logger.debug("%r", record)
        self.stats['telemetry_received'] += 1
        self._history.append(TelemetryFrame(time.time(), outcome))
        self._track_packet_count(record)

        if self.sink is not None:
            self.sink.append(format_record(record))

    def _track_packet_count(self, record: TelemetryRecord):
        last = self._last_packet_count.get(record.team_id)
        if last is not None and record.packet_count > last + 1:
            missed = record.packet_count - last - 1
            self.stats['dropped_packets'] += missed
            logger.info("Missed %d packets from team %d (%d -> %d)",
                        missed, record.team_id, last, record.packet_count)
        self._last_packet_count[record.team_id] = record.packet_count

    def _dispatch(self, callbacks: list, outcome: ClassifiedOutcome):
        for cb in callbacks:
            try:
                cb(outcome)
            except Exception:
                self.stats['callback_errors'] += 1
                logger.exception("Outcome callback %r failed", cb)

    def get_latest(self, count: int = 10) -> List[TelemetryRecord]:
        """Get latest telemetry records."""
        if count <= 0:
            return []
        return [f.record for f in list(self._history)[-count:]]

    def series(self, field: TelemetryField) -> np.ndarray:
        """Values of a numeric field over the history."""
        return field_series([f.record for f in self._history], field)

    def get_statistics(self) -> Dict:
        """Get processing statistics."""
        return {
            **self.stats,
            'outcomes_by_type': dict(self.outcome_counts),
            'history_size': len(self._history),
            'connected': self.connected,
            'fields': summarize([f.record for f in self._history]),
        }

    def clear_history(self):
        """Clear history."""
        self._history.clear()
