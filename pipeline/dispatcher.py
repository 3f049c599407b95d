# pipeline/dispatcher.py

import logging
import time
from typing import Dict, Iterable, Optional, Sequence

from moving_object.config import FusionConfig
from moving_object.fusion.frame import FrameState, MovingObjectFrame
from moving_object.fusion.registry import FrameRegistry
from moving_object.fusion.stats import FusionStats
from moving_object.observations.types import (
    Detection, Localization, ObservationBatch, Track
)
from moving_object.sinks.sink import ObjectSink

logger = logging.getLogger(__name__)


class Dispatcher:
    """
    Glue between the three inbound streams and the frame registry.

    Every batch is routed to its frame; as soon as a frame holds all three
    vectors it is merged and published synchronously, then finalized. A
    frame whose merge yields no objects is retired unpublished. handle()
    may be called from several transport threads.
    """

    def __init__(
        self,
        config: Optional[FusionConfig] = None,
        moving_sink: Optional[ObjectSink] = None,
        social_sink: Optional[ObjectSink] = None,
        on_published=None
    ):
        """
        Initialize the dispatcher.

        Args:
            config: Fusion configuration (defaults if omitted)
            moving_sink: Sink for the moving-object stream
            social_sink: Sink for the social-object stream
            on_published: Optional callable invoked with each frame after
                it has been published
        """
        self.config = config or FusionConfig()
        self.stats = FusionStats()
        self.registry = FrameRegistry(
            self.config,
            moving_sink=moving_sink,
            social_sink=social_sink,
            stats=self.stats,
        )
        self.on_published = on_published

        self.batches_processed = 0
        self._running = False
        self.timing = {
            'dispatch': [],
        }

    def handle(self, batch: ObservationBatch) -> Optional[MovingObjectFrame]:
        """
        Process one inbound batch.

        Args:
            batch: Detection, tracking or localization batch

        Returns:
            The frame the batch landed in, or None for a late arrival
        """
        t0 = time.time()
        published = False
        # Route, merge and publish as one step per batch
        with self.registry.lock:
            self.batches_processed += 1
            frame = self.registry.route(batch)
            if frame is not None and frame.is_data_ready() and frame.state is FrameState.READY:
                frame.merge()
                published = frame.publish()
                if published:
                    self.registry.finalize(frame)
                    logger.debug(f"Published frame stamp={frame.get_stamp()} frame_id={frame.get_frame_id()} "
                                 f"with {len(frame.get_moving_objects())} objects")
                else:
                    self.registry.finalize(frame, reason="empty")
                    logger.debug(f"Frame stamp={frame.get_stamp()} frame_id={frame.get_frame_id()} "
                                 f"merged to no objects, retired without publishing")

        if published and self.on_published is not None:
            self.on_published(frame)

        self.timing['dispatch'].append(time.time() - t0)
        return frame

    def on_detections(self, stamp: float, frame_id: str, detections: Sequence[Detection]):
        """Detection stream callback."""
        return self.handle(ObservationBatch.detections(stamp, frame_id, detections))

    def on_tracks(self, stamp: float, frame_id: str, tracks: Sequence[Track]):
        """Tracking stream callback."""
        return self.handle(ObservationBatch.tracks(stamp, frame_id, tracks))

    def on_localizations(self, stamp: float, frame_id: str, localizations: Sequence[Localization]):
        """Localization stream callback."""
        return self.handle(ObservationBatch.localizations(stamp, frame_id, localizations))

    def run(self, source: Iterable[ObservationBatch]) -> int:
        """
        Drain a batch source serially until it ends or stop() is called.

        Frames still accumulating when the loop ends are discarded.

        Args:
            source: Iterable of batches (e.g. a BatchSource)

        Returns:
            Number of batches processed by this call
        """
        self._running = True
        processed = 0
        try:
            for batch in source:
                if not self._running:
                    break
                self.handle(batch)
                processed += 1
                if not self._running:
                    break
        finally:
            self._running = False

        pending = len(self.registry)
        if pending:
            logger.info(f"Dispatcher stopped with {pending} unpublished frame(s) discarded")
        return processed

    def stop(self) -> None:
        """Ask run() to return before the next batch."""
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    def report_stats(self) -> Dict[str, float]:
        """
        Report counters and timings.

        Returns:
            Dict with error counters, skip/starvation counters and average
            timing per stage
        """
        report = self.stats.report()
        report['batches'] = self.batches_processed
        report['live_frames'] = len(self.registry)

        times = self.timing['dispatch']
        if times:
            report['avg_dispatch_time'] = sum(times) / len(times)
            report['max_dispatch_time'] = max(times)

        return report

    def reset(self) -> None:
        """Reset registry and counters."""
        self.registry.clear()
        self.stats.reset()
        self.batches_processed = 0
        for key in self.timing:
            self.timing[key] = []
