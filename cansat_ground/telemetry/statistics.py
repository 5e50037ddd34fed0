"""
Telemetry Statistics
====================

Summary statistics over received telemetry.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, Sequence

import numpy as np

from .record import GRAPHABLE_FIELDS, TelemetryField, TelemetryRecord


@dataclass
class FieldSummary:
    """Summary of one numeric field."""
    count: int
    minimum: float
    maximum: float
    mean: float
    std: float
    latest: float


def field_series(records: Sequence[TelemetryRecord],
                 field: TelemetryField) -> np.ndarray:
    """
    Values of one numeric field across records.

    Args:
        records: Telemetry records in arrival order
        field: Numeric field

    Returns:
        Float array, one entry per record
    """
    return np.array([float(getattr(r, field.attribute)) for r in records],
                    dtype=float)


def mission_times(records: Sequence[TelemetryRecord]) -> np.ndarray:
    """Mission time of each record in seconds since midnight."""
    return np.array([r.mission_time.as_seconds() for r in records], dtype=float)


def summarize(records: Sequence[TelemetryRecord]) -> Dict[str, FieldSummary]:
    """
    Summarize every graphable field.

    Args:
        records: Telemetry records

    Returns:
        Field attribute name -> summary (empty when there are no records)
    """
    if not records:
        return {}

    summary = {}
    for field in GRAPHABLE_FIELDS:
        values = field_series(records, field)
        summary[field.attribute] = FieldSummary(
            count=int(values.size),
            minimum=float(np.min(values)),
            maximum=float(np.max(values)),
            mean=float(np.mean(values)),
            std=float(np.std(values)),
            latest=float(values[-1]),
        )
    return summary


def dropped_packets(packet_counts: Iterable[int]) -> int:
    """
    Count packets missing from a monotonic packet counter.

    A counter that goes backwards (payload reset) starts a new run and is
    not counted as a loss.

    Args:
        packet_counts: Counter values in arrival order

    Returns:
        Number of counter values skipped
    """
    counts = np.fromiter(packet_counts, dtype=np.int64)
    if counts.size < 2:
        return 0

    steps = np.diff(counts)
    gaps = steps[steps > 1] - 1
    return int(gaps.sum())
