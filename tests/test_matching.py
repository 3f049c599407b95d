# tests/test_matching.py

import numpy as np
import pytest

from moving_object.errors import ConfigError
from moving_object.fusion.matching import ExactRoiMatcher, IouRoiMatcher, create_matcher
from moving_object.observations.types import ROI


class TestExactRoiMatcher:
    """Test field-wise exact ROI matching."""

    def setup_method(self):
        self.matcher = ExactRoiMatcher()

    def test_exact_match(self):
        rois = [ROI(0, 0, 10, 10), ROI(5, 5, 10, 10)]
        candidates = [ROI(5, 5, 10, 10), ROI(0, 0, 10, 10)]

        assert self.matcher.match(rois, candidates) == [1, 0]

    def test_off_by_one_does_not_match(self):
        assert self.matcher.match([ROI(0, 0, 10, 10)], [ROI(0, 0, 10, 11)]) == [None]

    def test_first_duplicate_wins(self):
        candidates = [ROI(1, 1, 1, 1), ROI(0, 0, 10, 10), ROI(0, 0, 10, 10)]

        assert self.matcher.match([ROI(0, 0, 10, 10)], candidates) == [1]

    def test_duplicate_detections_share_candidate(self):
        roi = ROI(0, 0, 10, 10)

        assert self.matcher.match([roi, roi], [roi]) == [0, 0]

    def test_empty_candidates(self):
        assert self.matcher.match([ROI(0, 0, 1, 1)], []) == [None]


class TestIouRoiMatcher:
    """Test IoU-based ROI matching."""

    def test_iou_matrix(self):
        a = [ROI(0, 0, 10, 10)]
        b = [ROI(0, 0, 10, 10), ROI(5, 0, 10, 10), ROI(100, 100, 5, 5)]

        iou = IouRoiMatcher.iou_matrix(a, b)

        assert iou.shape == (1, 3)
        np.testing.assert_allclose(iou[0], [1.0, 50 / 150, 0.0])

    def test_iou_matrix_agrees_with_roi_iou(self):
        a = [ROI(0, 0, 10, 10), ROI(3, 4, 7, 2)]
        b = [ROI(2, 2, 6, 9), ROI(0, 0, 0, 0)]

        iou = IouRoiMatcher.iou_matrix(a, b)

        for i, roi_a in enumerate(a):
            for j, roi_b in enumerate(b):
                assert iou[i, j] == pytest.approx(roi_a.iou(roi_b))

    def test_near_match_accepted(self):
        matcher = IouRoiMatcher(0.5)

        assert matcher.match([ROI(0, 0, 10, 10)], [ROI(1, 0, 10, 10)]) == [0]

    def test_low_overlap_rejected(self):
        matcher = IouRoiMatcher(0.5)

        assert matcher.match([ROI(0, 0, 10, 10)], [ROI(5, 0, 10, 10)]) == [None]

    def test_one_to_one_assignment(self):
        matcher = IouRoiMatcher(0.3)
        detections = [ROI(0, 0, 10, 10), ROI(0, 0, 10, 10)]

        result = matcher.match(detections, [ROI(0, 0, 10, 10)])

        assert sorted(result, key=lambda x: x is None) == [0, None]

    def test_assignment_prefers_global_optimum(self):
        matcher = IouRoiMatcher(0.1)
        detections = [ROI(0, 0, 10, 10), ROI(4, 0, 10, 10)]
        candidates = [ROI(5, 0, 10, 10), ROI(0, 0, 10, 10)]

        assert matcher.match(detections, candidates) == [1, 0]

    def test_empty_inputs(self):
        matcher = IouRoiMatcher()

        assert matcher.match([], [ROI(0, 0, 1, 1)]) == []
        assert matcher.match([ROI(0, 0, 1, 1)], []) == [None]

    @pytest.mark.parametrize("threshold", [0.0, -0.1, 1.5])
    def test_invalid_threshold(self, threshold):
        with pytest.raises(ConfigError):
            IouRoiMatcher(threshold)


def test_create_matcher():
    assert isinstance(create_matcher("exact"), ExactRoiMatcher)

    matcher = create_matcher("iou", 0.7)
    assert isinstance(matcher, IouRoiMatcher)
    assert matcher.iou_threshold == 0.7

    with pytest.raises(ConfigError):
        create_matcher("fuzzy")
