# pipeline/data_sources.py

import json
import logging
import os
import sys
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterator, List, Optional, Sequence

from moving_object.errors import ErrorKind
from moving_object.fusion.stats import FusionStats
from moving_object.observations.types import ObservationBatch

logger = logging.getLogger(__name__)


class BatchSource(ABC):
    """
    Abstract base class for inbound observation streams.

    A source yields ObservationBatch objects from all three streams,
    interleaved in arrival order.
    """

    def __init__(self, config: Dict = None):
        """
        Initialize the batch source.

        Args:
            config: Configuration dictionary
        """
        self.config = config or {}
        self.is_initialized = False

    @abstractmethod
    def initialize(self) -> None:
        """Initialize the source."""
        pass

    @abstractmethod
    def get_batch(self) -> Optional[ObservationBatch]:
        """
        Get the next batch.

        Returns:
            The next batch, or None when the stream is exhausted
        """
        pass

    @abstractmethod
    def release(self) -> None:
        """Release resources."""
        pass

    def __iter__(self) -> Iterator[ObservationBatch]:
        if not self.is_initialized:
            self.initialize()
        while True:
            batch = self.get_batch()
            if batch is None:
                break
            yield batch

    def __enter__(self):
        """Context manager entry."""
        if not self.is_initialized:
            self.initialize()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.release()


class ListBatchSource(BatchSource):
    """Replays an in-memory sequence of batches."""

    def __init__(self, batches: Sequence[ObservationBatch], config: Dict = None):
        super().__init__(config)
        self.batches: List[ObservationBatch] = list(batches)
        self.current_idx = 0

    def initialize(self) -> None:
        self.current_idx = 0
        self.is_initialized = True

    def get_batch(self) -> Optional[ObservationBatch]:
        if self.current_idx >= len(self.batches):
            return None
        batch = self.batches[self.current_idx]
        self.current_idx += 1
        return batch

    def release(self) -> None:
        pass


class JsonlBatchSource(BatchSource):
    """
    Replays batches recorded as JSON Lines.

    Each non-empty line holds one batch:
    ``{"kind": "detection", "header": {"stamp": 1.0, "frame_id": "camera"}, "objects": [...]}``.
    Lines that cannot be parsed are skipped with a warning. A path of "-"
    reads from standard input.
    """

    def __init__(self, path: str, config: Dict = None, stats: Optional[FusionStats] = None):
        """
        Initialize the JSON Lines source.

        Args:
            path: Path to the recording
            config: Configuration dictionary
            stats: Counters that receive malformed-line errors (optional)
        """
        super().__init__(config)
        self.path = path
        self.stats = stats
        self._file = None
        self.line_number = 0
        self.skipped_lines = 0

    def initialize(self) -> None:
        if self.path == "-":
            self._file = sys.stdin
        elif not os.path.exists(self.path):
            raise FileNotFoundError(f"Observation recording not found: {self.path}")
        else:
            self._file = open(self.path, "r", encoding="utf-8")
        self.line_number = 0
        self.skipped_lines = 0
        self.is_initialized = True
        logger.info(f"Replaying observations from {self.path}")

    def _parse(self, line: str) -> Optional[ObservationBatch]:
        try:
            data: Any = json.loads(line)
            return ObservationBatch.from_dict(data)
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            self.skipped_lines += 1
            if self.stats is not None:
                self.stats.record_error(ErrorKind.MALFORMED_OBSERVATION)
            logger.warning(f"Skipping malformed line {self.line_number} in {self.path}: {e}")
            return None

    def get_batch(self) -> Optional[ObservationBatch]:
        if not self.is_initialized:
            self.initialize()

        for line in self._file:
            self.line_number += 1
            line = line.strip()
            if not line:
                continue
            batch = self._parse(line)
            if batch is not None:
                return batch

        return None

    def release(self) -> None:
        if self._file is not None and self._file is not sys.stdin:
            self._file.close()
        self._file = None
        self.is_initialized = False
