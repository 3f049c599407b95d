# moving_object/fusion/registry.py

import logging
import threading
from collections import OrderedDict
from typing import Dict, List, Optional

from moving_object.config import FusionConfig
from moving_object.errors import LateArrival
from moving_object.fusion.frame import FrameState, MovingObjectFrame
from moving_object.fusion.matching import create_matcher
from moving_object.fusion.stats import FusionStats
from moving_object.observations.types import FrameKey, ObservationBatch
from moving_object.sinks.sink import ObjectSink

logger = logging.getLogger(__name__)


class FrameRegistry:
    """
    Maps observation batches to the frame they belong to.

    Holds at most one live frame per (stamp, frame_id) and at most
    ``frame_retention`` live frames overall. Keys of frames that were
    finalized or evicted are remembered for a while so that batches
    arriving after the fact are recognised and discarded.
    """

    def __init__(
        self,
        config: Optional[FusionConfig] = None,
        moving_sink: Optional[ObjectSink] = None,
        social_sink: Optional[ObjectSink] = None,
        stats: Optional[FusionStats] = None
    ):
        """
        Initialize the registry.

        Args:
            config: Fusion configuration (defaults if omitted)
            moving_sink: Sink handed to every frame for the full merged list
            social_sink: Sink handed to every frame for the social subset
            stats: Shared counters
        """
        self.config = config or FusionConfig()
        self.moving_sink = moving_sink
        self.social_sink = social_sink
        self.stats = stats or FusionStats()
        self.matcher = create_matcher(self.config.roi_match_mode, self.config.roi_iou_threshold)

        self._frames: Dict[FrameKey, MovingObjectFrame] = {}
        self._retired: "OrderedDict[FrameKey, str]" = OrderedDict()
        self._lock = threading.RLock()

    def __len__(self) -> int:
        return len(self._frames)

    def __contains__(self, key: FrameKey) -> bool:
        return key in self._frames

    def get(self, key: FrameKey) -> Optional[MovingObjectFrame]:
        return self._frames.get(key)

    def live_keys(self) -> List[FrameKey]:
        """Return the keys of live frames, oldest first."""
        with self._lock:
            return sorted(self._frames)

    @property
    def lock(self) -> threading.RLock:
        """Reentrant lock guarding the live map; hold it to act on a frame atomically."""
        return self._lock

    def is_retired(self, key: FrameKey) -> bool:
        return key in self._retired

    def _check_live(self, batch: ObservationBatch) -> None:
        reason = self._retired.get(batch.key)
        if reason is not None:
            raise LateArrival(f"Late {batch.kind.value} batch for {reason} frame "
                              f"stamp={batch.key.stamp} frame_id={batch.key.frame_id}")

    def _create_frame(self, key: FrameKey) -> MovingObjectFrame:
        return MovingObjectFrame(
            key.stamp,
            key.frame_id,
            config=self.config,
            moving_sink=self.moving_sink,
            social_sink=self.social_sink,
            matcher=self.matcher,
            stats=self.stats,
        )

    def route(self, batch: ObservationBatch) -> Optional[MovingObjectFrame]:
        """
        Add a batch to the frame it belongs to, creating the frame if needed.

        Args:
            batch: Observation batch of any kind

        Returns:
            The frame the batch was added to, or None if the batch arrived
            for a frame that was already finalized or evicted
        """
        key = batch.key
        with self._lock:
            try:
                self._check_live(batch)
            except LateArrival as e:
                self.stats.record_error(e)
                logger.info(f"{e}, discarded")
                return None

            frame = self._frames.get(key)
            created = frame is None
            if created:
                frame = self._create_frame(key)
                self._frames[key] = frame
                logger.debug(f"Created frame stamp={key.stamp} frame_id={key.frame_id}")

            if not frame.add_vector(batch):
                return None

            if created:
                self.evict()

            # The new frame itself may have been the oldest one
            if key not in self._frames:
                return None

            return frame

    def finalize(self, frame: MovingObjectFrame, reason: str = "finalized") -> None:
        """
        Remove a frame that is done from the live map.

        Later batches for its key count as late arrivals.

        Args:
            frame: Frame to remove
            reason: Why the frame was retired, shown in late-arrival logs
        """
        with self._lock:
            if self._frames.get(frame.key) is frame:
                del self._frames[frame.key]
                self._retire(frame.key, reason)
                logger.debug(f"Retired frame ({reason}) stamp={frame.key.stamp} frame_id={frame.key.frame_id}")

    def evict(self) -> List[MovingObjectFrame]:
        """
        Drop the oldest frames beyond the retention bound.

        Frames are ordered by (stamp, frame_id); a frame that is currently
        merging is never dropped.

        Returns:
            The evicted frames
        """
        evicted = []
        with self._lock:
            excess = len(self._frames) - self.config.frame_retention
            if excess <= 0:
                return evicted

            for key in sorted(self._frames):
                if excess <= 0:
                    break
                frame = self._frames[key]
                if frame.state is FrameState.MERGING:
                    continue

                del self._frames[key]
                self._retire(key, "evicted")
                self._account_eviction(frame)
                evicted.append(frame)
                excess -= 1

        return evicted

    def _account_eviction(self, frame: MovingObjectFrame) -> None:
        self.stats.increment('evicted')
        if frame.state in (FrameState.MERGED, FrameState.PUBLISHED):
            return

        self.stats.increment('evicted_unmerged')
        missing = frame.missing_kinds()
        for kind in missing:
            self.stats.increment(f"starved_{kind.value}")
        logger.warning(f"Evicted unmerged frame stamp={frame.key.stamp} frame_id={frame.key.frame_id} "
                       f"(missing: {', '.join(k.value for k in missing) or 'none'})")

    def _retire(self, key: FrameKey, reason: str) -> None:
        if self.config.late_arrival_memory <= 0:
            return
        self._retired[key] = reason
        self._retired.move_to_end(key)
        while len(self._retired) > self.config.late_arrival_memory:
            self._retired.popitem(last=False)

    def clear(self) -> None:
        """Discard all live frames and retired keys."""
        with self._lock:
            self._frames.clear()
            self._retired.clear()
