# moving_object/observations/validation.py

import math
from typing import Any

import numpy as np

from moving_object.errors import MalformedObservation
from moving_object.observations.types import (
    Detection, Localization, ObservationKind, RECORD_TYPES, ROI, Track
)


def clamp_confidence(confidence: float) -> float:
    """Clamp a detection confidence to [0, 1]."""
    return min(1.0, max(0.0, confidence))


def check_roi(roi: ROI) -> None:
    if roi.width < 0 or roi.height < 0:
        raise MalformedObservation(f"ROI has negative extent: {roi}")


def check_detection(detection: Detection) -> None:
    check_roi(detection.roi)
    if not isinstance(detection.confidence, (int, float)) or math.isnan(detection.confidence):
        raise MalformedObservation(f"Detection confidence is not a number: {detection.confidence!r}")
    if not detection.class_label:
        raise MalformedObservation("Detection has an empty class label")


def check_track(track: Track) -> None:
    check_roi(track.roi)
    if track.id < 0:
        raise MalformedObservation(f"Track id must be >= 0, got {track.id}")


def check_localization(localization: Localization) -> None:
    check_roi(localization.roi)

    lo = localization.min.as_array()
    hi = localization.max.as_array()

    if not (np.all(np.isfinite(lo)) and np.all(np.isfinite(hi))):
        raise MalformedObservation(f"Localization has non-finite coordinates: {localization}")
    if np.any(lo > hi):
        raise MalformedObservation(f"Localization min exceeds max: min={lo.tolist()} max={hi.tolist()}")


_CHECKS = {
    ObservationKind.DETECTION: check_detection,
    ObservationKind.TRACKING: check_track,
    ObservationKind.LOCALIZATION: check_localization,
}


def check_record(kind: ObservationKind, record: Any) -> None:
    """
    Validate one record of the given stream.

    Args:
        kind: Stream the record belongs to
        record: Detection, Track or Localization

    Raises:
        MalformedObservation: if the record is of the wrong type or fails
            a sanity check
    """
    expected = RECORD_TYPES[kind]
    if not isinstance(record, expected):
        raise MalformedObservation(
            f"Expected {expected.__name__} in {kind.value} batch, got {type(record).__name__}"
        )
    _CHECKS[kind](record)
