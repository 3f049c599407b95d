# tests/test_observations.py

import math

import pytest

from moving_object.errors import MalformedObservation
from moving_object.observations import (
    ROI, Detection, FrameKey, Localization, MovingObject, ObservationBatch,
    ObservationKind, Point3, Track, check_record, clamp_confidence
)


class TestROI:
    """Test the ROI value type."""

    def test_equality_is_fieldwise(self):
        assert ROI(1, 2, 3, 4) == ROI(1, 2, 3, 4)
        assert ROI(1, 2, 3, 4) != ROI(1, 2, 3, 5)
        assert hash(ROI(1, 2, 3, 4)) == hash(ROI(1, 2, 3, 4))

    def test_from_sequence_and_mapping(self):
        assert ROI.from_value([1, 2, 3, 4]) == ROI(1, 2, 3, 4)
        assert ROI.from_value({'x_offset': 1, 'y_offset': 2, 'width': 3, 'height': 4}) == ROI(1, 2, 3, 4)
        assert ROI.from_value({'x': 1, 'y': 2, 'width': 3, 'height': 4}) == ROI(1, 2, 3, 4)

    def test_geometry(self):
        roi = ROI(10, 20, 30, 40)

        assert roi.area == 1200
        assert roi.as_xyxy() == (10, 20, 40, 60)
        assert roi.iou(roi) == 1.0
        assert roi.iou(ROI(100, 100, 5, 5)) == 0.0


class TestRecords:
    """Test serialization of the observation records."""

    def test_moving_object_centroid(self):
        obj = MovingObject(3, ROI(0, 0, 1, 1), "robot", 0.5, Point3(0, 0, 0), Point3(2, 4, 6))

        assert obj.centroid == Point3(1, 2, 3)
        assert obj.to_dict()['centroid'] == [1, 2, 3]

    def test_batch_from_dict(self):
        data = {
            'kind': 'localization',
            'header': {'stamp': 12.5, 'frame_id': 'camera'},
            'objects': [{'roi': [0, 0, 10, 10], 'min': [1, 1, 1], 'max': {'x': 2, 'y': 2, 'z': 2}}],
        }

        batch = ObservationBatch.from_dict(data)

        assert batch.kind is ObservationKind.LOCALIZATION
        assert batch.key == FrameKey(12.5, 'camera')
        assert batch.objects == (Localization(ROI(0, 0, 10, 10), Point3(1, 1, 1), Point3(2, 2, 2)),)
        assert len(batch) == 1

    def test_batch_dict_form(self):
        batch = ObservationBatch.tracks(1.0, 'cam', [Track(ROI(1, 1, 2, 2), 4)])

        assert batch.to_dict() == {
            'kind': 'tracking',
            'header': {'stamp': 1.0, 'frame_id': 'cam'},
            'objects': [{'roi': [1, 1, 2, 2], 'id': 4}],
        }
        assert ObservationBatch.from_dict(batch.to_dict()) == batch

    def test_unknown_kind(self):
        with pytest.raises(ValueError):
            ObservationBatch.from_dict({'kind': 'segmentation', 'header': {'stamp': 0, 'frame_id': 'x'}})

    def test_frame_key_ordering(self):
        keys = [FrameKey(2.0, 'a'), FrameKey(1.0, 'b'), FrameKey(1.0, 'a')]

        assert sorted(keys) == [FrameKey(1.0, 'a'), FrameKey(1.0, 'b'), FrameKey(2.0, 'a')]


class TestValidation:
    """Test record sanity checks."""

    @pytest.mark.parametrize("value, expected", [(0.5, 0.5), (-1.0, 0.0), (2.0, 1.0), (math.inf, 1.0)])
    def test_clamp_confidence(self, value, expected):
        assert clamp_confidence(value) == expected

    def test_valid_records(self):
        roi = ROI(0, 0, 5, 5)
        check_record(ObservationKind.DETECTION, Detection(roi, "person", 0.9))
        check_record(ObservationKind.TRACKING, Track(roi, 0))
        check_record(ObservationKind.LOCALIZATION, Localization(roi, Point3(0, 0, 0), Point3(0, 0, 0)))

    @pytest.mark.parametrize("kind, record", [
        (ObservationKind.DETECTION, Detection(ROI(0, 0, 5, 5), "person", float('nan'))),
        (ObservationKind.DETECTION, Detection(ROI(0, 0, 5, 5), "", 0.5)),
        (ObservationKind.DETECTION, Detection(ROI(0, 0, -5, 5), "person", 0.5)),
        (ObservationKind.TRACKING, Track(ROI(0, 0, 5, 5), -3)),
        (ObservationKind.LOCALIZATION, Localization(ROI(0, 0, 5, 5), Point3(0, 2, 0), Point3(1, 1, 1))),
        (ObservationKind.LOCALIZATION, Localization(ROI(0, 0, 5, 5), Point3(0, 0, 0), Point3(1, math.inf, 1))),
        (ObservationKind.TRACKING, Detection(ROI(0, 0, 5, 5), "person", 0.5)),
    ])
    def test_malformed_records(self, kind, record):
        with pytest.raises(MalformedObservation):
            check_record(kind, record)
