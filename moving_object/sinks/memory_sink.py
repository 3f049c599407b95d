# moving_object/sinks/memory_sink.py

import logging
from typing import List, Sequence, Tuple

from moving_object.observations.types import FrameKey, MovingObject
from moving_object.sinks.sink import ObjectSink

logger = logging.getLogger(__name__)


class MemorySink(ObjectSink):
    """Keeps every emitted frame in a list. Useful for replay and inspection."""

    def __init__(self, name: str = "memory", config=None):
        super().__init__(name, config)
        self.messages: List[Tuple[FrameKey, Tuple[MovingObject, ...]]] = []

    def emit(self, key: FrameKey, objects: Sequence[MovingObject]) -> None:
        self.messages.append((key, tuple(objects)))

    def objects_for(self, key: FrameKey) -> List[MovingObject]:
        """Return everything emitted for one frame, in emission order."""
        out = []
        for msg_key, objects in self.messages:
            if msg_key == key:
                out.extend(objects)
        return out

    def clear(self) -> None:
        self.messages = []

    def __len__(self) -> int:
        return len(self.messages)


class LoggingSink(ObjectSink):
    """Writes a one-line summary of every emitted frame to the log."""

    def __init__(self, name: str = "log", config=None):
        super().__init__(name, config)
        self.level = logging.getLevelName(str(self.config.get('level', 'INFO')).upper())

    def emit(self, key: FrameKey, objects: Sequence[MovingObject]) -> None:
        summary = ", ".join(f"{obj.class_label}#{obj.id}" for obj in objects)
        logger.log(self.level, f"[{self.name}] stamp={key.stamp} frame_id={key.frame_id} "
                               f"objects={len(objects)} [{summary}]")
