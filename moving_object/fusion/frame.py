# moving_object/fusion/frame.py

import logging
import time
from enum import Enum
from typing import List, Optional, Tuple

from moving_object.config import FusionConfig
from moving_object.errors import (
    AlreadyMerging, ContractViolation, ErrorKind, MalformedObservation, SinkFailure
)
from moving_object.fusion.matching import RoiMatcher, create_matcher
from moving_object.fusion.stats import FusionStats
from moving_object.observations.types import (
    Detection, FrameKey, Localization, MovingObject, ObservationBatch,
    ObservationKind, Point3, ROI, Track
)
from moving_object.observations.validation import check_record, clamp_confidence
from moving_object.sinks.sink import ObjectSink, deliver

logger = logging.getLogger(__name__)


class FrameState(Enum):
    """
    Lifecycle of a MovingObjectFrame.

    EMPTY -> ACCUMULATING -> READY -> MERGING -> MERGED -> PUBLISHED.
    MERGING falls back to the previous state if the merge raises.
    PUBLISHED is terminal and is entered at most once.
    """

    EMPTY = 'empty'
    ACCUMULATING = 'accumulating'
    READY = 'ready'
    MERGING = 'merging'
    MERGED = 'merged'
    PUBLISHED = 'published'


class MovingObjectFrame:
    """
    Stores and merges the objects observed in one camera frame.

    Detection, tracking and localization vectors for the same
    (stamp, frame_id) are accumulated here until all three are present,
    then merged by ROI correspondence into moving objects and published
    to the moving-object and social-object sinks.
    """

    def __init__(
        self,
        stamp: float,
        frame_id: str,
        config: Optional[FusionConfig] = None,
        moving_sink: Optional[ObjectSink] = None,
        social_sink: Optional[ObjectSink] = None,
        matcher: Optional[RoiMatcher] = None,
        stats: Optional[FusionStats] = None
    ):
        """
        Initialize an empty frame.

        Args:
            stamp: Header timestamp shared by the three streams
            frame_id: Header coordinate frame id
            config: Fusion configuration (defaults if omitted)
            moving_sink: Sink for the full merged list
            social_sink: Sink for the social subset
            matcher: ROI correspondence strategy (built from config if omitted)
            stats: Shared counters (a private instance if omitted)
        """
        self.config = config or FusionConfig()
        self._key = FrameKey(stamp, frame_id)
        self.moving_sink = moving_sink
        self.social_sink = social_sink
        self.matcher = matcher or create_matcher(self.config.roi_match_mode, self.config.roi_iou_threshold)
        self.stats = stats or FusionStats()
        self.social_filter = tuple(self.config.social_filter)

        self.detections: List[Detection] = []
        self.tracks: List[Track] = []
        self.localizations: List[Localization] = []
        self._merged: Tuple[MovingObject, ...] = ()
        self._state = FrameState.EMPTY

    def __repr__(self):
        return (f"MovingObjectFrame(stamp={self._key.stamp}, frame_id={self._key.frame_id!r}, "
                f"state={self._state.value}, detections={len(self.detections)}, "
                f"tracks={len(self.tracks)}, localizations={len(self.localizations)}, "
                f"merged={len(self._merged)})")

    @property
    def key(self) -> FrameKey:
        return self._key

    @property
    def state(self) -> FrameState:
        return self._state

    @property
    def published(self) -> bool:
        return self._state is FrameState.PUBLISHED

    @property
    def merging(self) -> bool:
        return self._state is FrameState.MERGING

    def get_stamp(self) -> float:
        return self._key.stamp

    def get_frame_id(self) -> str:
        return self._key.frame_id

    def get_moving_objects(self) -> Tuple[MovingObject, ...]:
        return self._merged

    def _vector_for(self, kind: ObservationKind) -> list:
        if kind is ObservationKind.DETECTION:
            return self.detections
        if kind is ObservationKind.TRACKING:
            return self.tracks
        return self.localizations

    def add_vector(self, batch: ObservationBatch) -> bool:
        """
        Append the records of one batch to the matching vector.

        Malformed records are dropped one by one with a warning; the rest of
        the batch is kept.

        Args:
            batch: Detection, tracking or localization batch for this frame

        Returns:
            True if the batch was accepted, False if the frame was already
            published (late arrival)

        Raises:
            ContractViolation: if the batch belongs to another frame or the
                frame is being merged
        """
        if batch.key != self._key:
            error = ContractViolation(f"Batch for {batch.key} routed to frame {self._key}")
            self.stats.record_error(error)
            raise error

        if self._state is FrameState.PUBLISHED:
            self.stats.record_error(ErrorKind.LATE_ARRIVAL)
            logger.info(f"Late {batch.kind.value} batch for published frame "
                        f"stamp={self._key.stamp} frame_id={self._key.frame_id}, discarded")
            return False

        if self._state is FrameState.MERGING:
            error = ContractViolation(f"Cannot add a {batch.kind.value} batch while frame {self._key} is merging")
            self.stats.record_error(error)
            raise error

        vector = self._vector_for(batch.kind)
        for record in batch.objects:
            try:
                check_record(batch.kind, record)
            except MalformedObservation as e:
                self.stats.record_error(e)
                logger.warning(f"Dropping malformed {batch.kind.value} record in frame "
                               f"stamp={self._key.stamp} frame_id={self._key.frame_id}: {e}")
                continue
            vector.append(record)

        if not batch.objects:
            self.stats.increment(f"empty_{batch.kind.value}_batch")

        if self._state in (FrameState.EMPTY, FrameState.ACCUMULATING):
            if self.is_data_ready():
                self._state = FrameState.READY
            elif self.detections or self.tracks or self.localizations:
                self._state = FrameState.ACCUMULATING

        return True

    def is_data_ready(self) -> bool:
        """
        Check if all three object vectors have arrived.

        Returns:
            True if detections, tracks and localizations are all non-empty
        """
        return bool(self.detections) and bool(self.tracks) and bool(self.localizations)

    def missing_kinds(self) -> List[ObservationKind]:
        """Return the streams whose vectors are still empty."""
        return [kind for kind in ObservationKind if not self._vector_for(kind)]

    def merge(self) -> None:
        """
        Merge detection, tracking and localization info into moving objects.

        Each detection is joined with the first track and the first
        localization sharing its ROI. Detections lacking either counterpart,
        or whose clamped confidence is below the possibility threshold, are
        skipped.

        Raises:
            AlreadyMerging: if called while a merge is in progress
            ContractViolation: if the frame is not ready or already published
        """
        if self._state is FrameState.MERGING:
            error = AlreadyMerging(f"Frame {self._key} is already merging")
            self.stats.record_error(error)
            raise error

        if not self.is_data_ready() or self._state not in (FrameState.READY, FrameState.MERGED):
            error = ContractViolation(f"merge() called on frame {self._key} in state {self._state.value} "
                                      f"(missing: {[k.value for k in self.missing_kinds()]})")
            self.stats.record_error(error)
            raise error

        previous_state = self._state
        self._state = FrameState.MERGING
        t0 = time.time()
        try:
            merged = self._correlate()
        except BaseException:
            self._state = previous_state
            raise

        self._merged = tuple(merged)
        self._state = FrameState.MERGED
        self.stats.record_time('merge', time.time() - t0)
        self.stats.increment('merged_objects', len(merged))

        logger.debug(f"Merged frame stamp={self._key.stamp} frame_id={self._key.frame_id}: "
                     f"{len(merged)} of {len(self.detections)} detections")

    def _correlate(self) -> List[MovingObject]:
        detection_rois = [d.roi for d in self.detections]
        track_matches = self.matcher.match(detection_rois, [t.roi for t in self.tracks])
        loc_matches = self.matcher.match(detection_rois, [l.roi for l in self.localizations])

        threshold = self.config.possibility_threshold
        merged = []
        for detection, track_idx, loc_idx in zip(self.detections, track_matches, loc_matches):
            if track_idx is None:
                self.stats.increment('unmatched_track')
                logger.debug(f"No track for detection {detection.class_label} at {detection.roi}")
                continue

            if loc_idx is None:
                self.stats.increment('unmatched_localization')
                logger.debug(f"No localization for detection {detection.class_label} at {detection.roi}")
                continue

            confidence = clamp_confidence(detection.confidence)
            if confidence < threshold:
                self.stats.increment('below_threshold')
                continue

            track = self.tracks[track_idx]
            loc = self.localizations[loc_idx]
            merged.append(MovingObject(
                id=track.id,
                roi=detection.roi,
                class_label=detection.class_label,
                confidence=confidence,
                min=loc.min,
                max=loc.max,
            ))

        return merged

    def publish(self) -> bool:
        """
        Publish the merged objects to the moving and social sinks.

        The frame is marked published before the sinks are called, so a
        failing sink never causes a second emission.

        Returns:
            True if published now; False if already published, not merged
            yet, or the merge produced no objects
        """
        if self._state is FrameState.PUBLISHED:
            return False

        if self._state is not FrameState.MERGED or not self._merged:
            return False

        moving = self._merged
        social = tuple(obj for obj in moving if self.is_social_object(obj))
        self._state = FrameState.PUBLISHED

        t0 = time.time()
        if self.config.moving_object_msg_enabled and self.moving_sink is not None:
            self._emit(self.moving_sink, moving)

        if self.config.social_msg_enabled and self.social_sink is not None:
            self._emit(self.social_sink, social)

        self.stats.record_time('publish', time.time() - t0)
        self.stats.increment('published')
        return True

    def _emit(self, sink: ObjectSink, objects: Tuple[MovingObject, ...]) -> bool:
        try:
            deliver(sink, self._key, objects)
        except SinkFailure as e:
            self.stats.record_error(e)
            logger.error(str(e))
            return False
        return True

    def find_by_roi(self, roi: ROI) -> Optional[MovingObject]:
        """
        Find the moving object with exactly the given ROI.

        Args:
            roi: Region of interest to look up

        Returns:
            The first matching moving object, or None
        """
        for obj in self._merged:
            if obj.roi == roi:
                return obj
        return None

    def find_by_id(self, object_id: int) -> Optional[MovingObject]:
        for obj in self._merged:
            if obj.id == object_id:
                return obj
        return None

    @staticmethod
    def get_centroid(obj: MovingObject) -> Point3:
        """
        Get the centroid of an object's 3D box.

        Args:
            obj: Moving object

        Returns:
            (min + max) / 2 per axis
        """
        return obj.centroid

    def is_social_object(self, obj: MovingObject) -> bool:
        """
        Check if a moving object is a social object (e.g. person, robot base).

        The class label must equal one of the configured social filter
        labels exactly (case-sensitive).
        """
        return obj.class_label in self.social_filter
