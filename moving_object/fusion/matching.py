# moving_object/fusion/matching.py

from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Sequence

import numpy as np
from scipy.optimize import linear_sum_assignment

from moving_object.errors import ConfigError
from moving_object.observations.types import ROI


class RoiMatcher(ABC):
    """
    Correlates detection ROIs with ROIs from another stream of the same frame.

    Implementations return, for every detection ROI, the index of the
    candidate it corresponds to, or None when there is no counterpart.
    """

    @abstractmethod
    def match(self, detection_rois: Sequence[ROI], candidate_rois: Sequence[ROI]) -> List[Optional[int]]:
        """
        Match detection ROIs to candidate ROIs.

        Args:
            detection_rois: ROIs from the detection stream, in arrival order
            candidate_rois: ROIs from the tracking or localization stream

        Returns:
            List the length of detection_rois holding candidate indices or None
        """
        pass


class ExactRoiMatcher(RoiMatcher):
    """
    Field-wise exact ROI equality.

    When several candidates share a ROI the first one wins; duplicate
    detections of the same ROI all map to that same candidate.
    """

    def match(self, detection_rois: Sequence[ROI], candidate_rois: Sequence[ROI]) -> List[Optional[int]]:
        first_index: Dict[ROI, int] = {}
        for idx, roi in enumerate(candidate_rois):
            first_index.setdefault(roi, idx)

        return [first_index.get(roi) for roi in detection_rois]


class IouRoiMatcher(RoiMatcher):
    """
    One-to-one matching on ROI overlap.

    Builds an IoU matrix, solves the assignment with the Hungarian
    algorithm and rejects pairs below the IoU threshold. Exact duplicates
    are therefore not matched twice.
    """

    def __init__(self, iou_threshold: float = 0.5):
        if not 0.0 < iou_threshold <= 1.0:
            raise ConfigError(f"roi_iou_threshold must be in (0, 1], got {iou_threshold}")
        self.iou_threshold = iou_threshold

    @staticmethod
    def iou_matrix(rois_a: Sequence[ROI], rois_b: Sequence[ROI]) -> np.ndarray:
        """
        Compute pairwise IoU between two ROI lists.

        Returns:
            len(rois_a) x len(rois_b) array of IoU scores
        """
        if not rois_a or not rois_b:
            return np.zeros((len(rois_a), len(rois_b)), dtype=np.float64)

        a = np.array([roi.as_xyxy() for roi in rois_a], dtype=np.float64)
        b = np.array([roi.as_xyxy() for roi in rois_b], dtype=np.float64)

        x1 = np.maximum(a[:, None, 0], b[None, :, 0])
        y1 = np.maximum(a[:, None, 1], b[None, :, 1])
        x2 = np.minimum(a[:, None, 2], b[None, :, 2])
        y2 = np.minimum(a[:, None, 3], b[None, :, 3])

        intersection = np.clip(x2 - x1, 0, None) * np.clip(y2 - y1, 0, None)
        area_a = (a[:, 2] - a[:, 0]) * (a[:, 3] - a[:, 1])
        area_b = (b[:, 2] - b[:, 0]) * (b[:, 3] - b[:, 1])
        union = area_a[:, None] + area_b[None, :] - intersection

        return np.divide(intersection, union, out=np.zeros_like(intersection), where=union > 0)

    def match(self, detection_rois: Sequence[ROI], candidate_rois: Sequence[ROI]) -> List[Optional[int]]:
        result: List[Optional[int]] = [None] * len(detection_rois)

        iou = self.iou_matrix(detection_rois, candidate_rois)
        if min(iou.shape) == 0:
            return result

        # Hungarian assignment on (1 - IoU) cost
        rows, cols = linear_sum_assignment(1.0 - iou)
        for row, col in zip(rows, cols):
            if iou[row, col] >= self.iou_threshold:
                result[row] = int(col)

        return result


def create_matcher(mode: str = 'exact', iou_threshold: float = 0.5) -> RoiMatcher:
    """
    Build the matcher selected by configuration.

    Args:
        mode: 'exact' or 'iou'
        iou_threshold: Minimum IoU for the 'iou' mode

    Returns:
        RoiMatcher instance
    """
    if mode == 'exact':
        return ExactRoiMatcher()
    if mode == 'iou':
        return IouRoiMatcher(iou_threshold)
    raise ConfigError(f"Unknown roi_match_mode: {mode!r} (expected 'exact' or 'iou')")
