"""
CanSat Ground Station
=====================

Radio frame codec, telemetry classification and payload commanding for the
ground segment.
"""

__version__ = "0.1.0"
