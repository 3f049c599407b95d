# moving_object/sinks/jsonl_sink.py

import json
import logging
import os
from typing import Dict, Sequence

from moving_object.observations.types import FrameKey, MovingObject
from moving_object.sinks.sink import ObjectSink

logger = logging.getLogger(__name__)


class JsonlSink(ObjectSink):
    """
    Appends one JSON line per emitted frame to a file.

    Each line has the form ``{"header": {"stamp", "frame_id"}, "objects": [...]}``.
    The file is opened on first emit and flushed after every line.
    """

    def __init__(self, path: str, name: str = None, config: Dict = None):
        """
        Initialize the JSON Lines sink.

        Args:
            path: Output file path (parent directories are created)
            name: Sink name, defaults to the file name
            config: Configuration with keys:
                - append: Append to an existing file instead of truncating (default: False)
        """
        super().__init__(name or os.path.basename(path), config)
        self.config = {
            'append': False,
            **(config or {})
        }
        self.path = path
        self._file = None
        self.lines_written = 0

    def _open(self):
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        mode = "a" if self.config['append'] else "w"
        self._file = open(self.path, mode, encoding="utf-8")
        logger.info(f"Writing {self.name} output to {self.path}")

    def emit(self, key: FrameKey, objects: Sequence[MovingObject]) -> None:
        if self._file is None:
            self._open()

        record = {
            'header': key.to_dict(),
            'objects': [obj.to_dict() for obj in objects],
        }
        self._file.write(json.dumps(record) + "\n")
        self._file.flush()
        self.lines_written += 1

    def close(self) -> None:
        if self._file is not None:
            self._file.close()
            self._file = None
