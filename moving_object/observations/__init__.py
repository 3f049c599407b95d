# moving_object/observations/__init__.py
"""
Value records for the detection, tracking and localization streams.
"""

from moving_object.observations.types import (
    ROI, Point3, Detection, Track, Localization, MovingObject,
    ObservationKind, ObservationBatch, FrameKey
)
from moving_object.observations.validation import check_record, clamp_confidence

__all__ = [
    'ROI', 'Point3', 'Detection', 'Track', 'Localization', 'MovingObject',
    'ObservationKind', 'ObservationBatch', 'FrameKey',
    'check_record', 'clamp_confidence',
]
