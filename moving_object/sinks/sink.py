# moving_object/sinks/sink.py

from abc import ABC, abstractmethod
from typing import Dict, Sequence

from moving_object.errors import SinkFailure
from moving_object.observations.types import FrameKey, MovingObject


class ObjectSink(ABC):
    """
    Abstract base class for outbound moving-object streams.

    All sink implementations should inherit from this class and
    implement the emit method. Sinks receive immutable snapshots.
    """

    def __init__(self, name: str = "sink", config: Dict = None):
        """
        Initialize the sink.

        Args:
            name: Topic-like name used in logs
            config: Configuration dictionary
        """
        self.name = name
        self.config = config or {}

    @abstractmethod
    def emit(self, key: FrameKey, objects: Sequence[MovingObject]) -> None:
        """
        Emit the objects of one frame.

        Args:
            key: Header of the frame (stamp, frame_id)
            objects: Moving objects to emit

        Raises:
            Exception: any failure is reported by the caller as a sink failure
        """
        pass

    def close(self) -> None:
        """Release resources."""
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def __repr__(self):
        return f"{type(self).__name__}(name={self.name!r})"


def deliver(sink: ObjectSink, key: FrameKey, objects: Sequence[MovingObject]) -> None:
    """
    Emit to a sink, wrapping any failure in SinkFailure.

    Args:
        sink: Destination sink
        key: Header of the frame
        objects: Moving objects to emit

    Raises:
        SinkFailure: if the sink raised
    """
    try:
        sink.emit(key, objects)
    except Exception as e:
        raise SinkFailure(f"Sink {sink.name} failed for frame stamp={key.stamp} "
                          f"frame_id={key.frame_id}: {e}") from e
