"""
Telemetry Plots
===============

Offline plots of a telemetry log.
"""

import logging
from pathlib import Path
from typing import List, Sequence

# Force headless plotting
import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt

from ..errors import TelemetryParseError
from .record import GRAPHABLE_FIELDS, TelemetryRecord, parse
from .statistics import field_series, mission_times

logger = logging.getLogger(__name__)

GRID_COLUMNS = 5


def load_telemetry_log(path: str) -> List[TelemetryRecord]:
    """
    Read a telemetry log written by FileSink.

    Lines that do not parse are logged and skipped.
    """
    records = []
    with Path(path).open('r', encoding='utf-8', errors='replace') as f:
        for number, line in enumerate(f, start=1):
            if not line.strip():
                continue
            try:
                records.append(parse(line))
            except TelemetryParseError as e:
                logger.warning("%s:%d: %s", path, number, e)
    return records


def plot_telemetry(records: Sequence[TelemetryRecord], out_png: Path,
                   title: str = "Telemetry") -> bool:
    """
    Plot every graphable field against mission time.

    Args:
        records: Telemetry records
        out_png: Output image path
        title: Figure title

    Returns:
        True if an image was written
    """
    out_png = Path(out_png)
    out_png.parent.mkdir(parents=True, exist_ok=True)
    if not records:
        logger.warning("No telemetry to plot")
        return False

    t = mission_times(records)
    rows = -(-len(GRAPHABLE_FIELDS) // GRID_COLUMNS)

    fig, axs = plt.subplots(rows, GRID_COLUMNS, figsize=(20, 4 * rows),
                            sharex=True, squeeze=False)
    fig.suptitle(title)

    for ax, field in zip(axs.flat, GRAPHABLE_FIELDS):
        ax.plot(t, field_series(records, field))
        ax.set_title(field.label)
        ax.grid(True)

    for ax in axs[-1]:
        ax.set_xlabel("Mission time (s)")

    fig.tight_layout(rect=(0, 0, 1, 0.96))
    fig.savefig(out_png, dpi=120)
    plt.close(fig)
    return True
