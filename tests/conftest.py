# tests/conftest.py

import os
import sys

import pytest

# Add project root to path to resolve imports
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from moving_object.observations.types import (  # noqa: E402
    Detection, Localization, ObservationBatch, Point3, ROI, Track
)

STAMP = 100.5
FRAME_ID = "camera_color_optical_frame"

ROI_A = ROI(0, 0, 10, 10)
ROI_B = ROI(20, 20, 15, 30)


def detection_batch(*detections, stamp=STAMP, frame_id=FRAME_ID):
    return ObservationBatch.detections(stamp, frame_id, detections)


def track_batch(*tracks, stamp=STAMP, frame_id=FRAME_ID):
    return ObservationBatch.tracks(stamp, frame_id, tracks)


def localization_batch(*localizations, stamp=STAMP, frame_id=FRAME_ID):
    return ObservationBatch.localizations(stamp, frame_id, localizations)


def box(roi, lo=(1, 1, 1), hi=(2, 2, 2)):
    return Localization(roi, Point3(*lo), Point3(*hi))


@pytest.fixture
def person_frame_batches():
    """Detection, tracking and localization batches for one person at ROI_A."""
    return [
        detection_batch(Detection(ROI_A, "person", 0.9)),
        track_batch(Track(ROI_A, 7)),
        localization_batch(box(ROI_A)),
    ]
