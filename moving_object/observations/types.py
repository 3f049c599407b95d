# moving_object/observations/types.py

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Sequence, Tuple, Union

import numpy as np


@dataclass(frozen=True)
class ROI:
    """
    Axis-aligned region of interest in image pixels.

    The ROI is the only correspondence signal shared by the detection,
    tracking and localization streams of one camera frame, so equality is
    field-wise exact.

    Attributes:
        x: Left edge (x offset) in pixels
        y: Top edge (y offset) in pixels
        width: Width in pixels
        height: Height in pixels
    """

    x: int
    y: int
    width: int
    height: int

    @property
    def area(self) -> int:
        return max(0, self.width) * max(0, self.height)

    def as_xyxy(self) -> Tuple[int, int, int, int]:
        """Return the ROI as [x1, y1, x2, y2] corners."""
        return (self.x, self.y, self.x + self.width, self.y + self.height)

    def iou(self, other: "ROI") -> float:
        """
        Compute intersection over union with another ROI.

        Args:
            other: ROI to compare against

        Returns:
            IoU score (0-1)
        """
        ax1, ay1, ax2, ay2 = self.as_xyxy()
        bx1, by1, bx2, by2 = other.as_xyxy()

        w = max(0, min(ax2, bx2) - max(ax1, bx1))
        h = max(0, min(ay2, by2) - max(ay1, by1))
        intersection = w * h

        union = self.area + other.area - intersection
        return intersection / union if union > 0 else 0.0

    def to_list(self) -> List[int]:
        return [self.x, self.y, self.width, self.height]

    @classmethod
    def from_value(cls, value: Union[Sequence[Any], Dict[str, Any], "ROI"]) -> "ROI":
        """
        Build an ROI from [x, y, width, height] or a mapping.

        Mappings may use either x/y or the x_offset/y_offset keys of a
        sensor_msgs/RegionOfInterest message.
        """
        if isinstance(value, ROI):
            return value
        if isinstance(value, dict):
            x = value.get('x', value.get('x_offset'))
            y = value.get('y', value.get('y_offset'))
            return cls(int(x), int(y), int(value['width']), int(value['height']))
        x, y, width, height = value
        return cls(int(x), int(y), int(width), int(height))


@dataclass(frozen=True)
class Point3:
    """A point in the frame_id coordinate system."""

    x: float
    y: float
    z: float

    def as_array(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z], dtype=np.float64)

    def to_list(self) -> List[float]:
        return [self.x, self.y, self.z]

    @classmethod
    def from_value(cls, value: Union[Sequence[float], Dict[str, float], "Point3"]) -> "Point3":
        if isinstance(value, Point3):
            return value
        if isinstance(value, dict):
            return cls(float(value['x']), float(value['y']), float(value['z']))
        x, y, z = value
        return cls(float(x), float(y), float(z))


@dataclass(frozen=True)
class Detection:
    """Class label and confidence for one ROI."""

    roi: ROI
    class_label: str
    confidence: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            'roi': self.roi.to_list(),
            'class_label': self.class_label,
            'confidence': self.confidence,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Detection":
        return cls(
            roi=ROI.from_value(data['roi']),
            class_label=str(data['class_label']),
            confidence=float(data['confidence']),
        )


@dataclass(frozen=True)
class Track:
    """Upstream identity for one ROI. The id is opaque and unique per frame."""

    roi: ROI
    id: int

    def to_dict(self) -> Dict[str, Any]:
        return {'roi': self.roi.to_list(), 'id': self.id}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Track":
        return cls(roi=ROI.from_value(data['roi']), id=int(data['id']))


@dataclass(frozen=True)
class Localization:
    """Axis-aligned 3D bounding box for one ROI."""

    roi: ROI
    min: Point3
    max: Point3

    def to_dict(self) -> Dict[str, Any]:
        return {
            'roi': self.roi.to_list(),
            'min': self.min.to_list(),
            'max': self.max.to_list(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Localization":
        return cls(
            roi=ROI.from_value(data['roi']),
            min=Point3.from_value(data['min']),
            max=Point3.from_value(data['max']),
        )


@dataclass(frozen=True)
class MovingObject:
    """
    Merged per-frame record.

    Class and confidence come from the detection stream, identity from the
    tracking stream and geometry from the localization stream.
    """

    id: int
    roi: ROI
    class_label: str
    confidence: float
    min: Point3
    max: Point3

    @property
    def centroid(self) -> Point3:
        return Point3(
            (self.min.x + self.max.x) / 2,
            (self.min.y + self.max.y) / 2,
            (self.min.z + self.max.z) / 2,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'roi': self.roi.to_list(),
            'class_label': self.class_label,
            'confidence': self.confidence,
            'min': self.min.to_list(),
            'max': self.max.to_list(),
            'centroid': self.centroid.to_list(),
        }


class ObservationKind(Enum):
    """The three inbound observation streams."""

    DETECTION = 'detection'
    TRACKING = 'tracking'
    LOCALIZATION = 'localization'


RECORD_TYPES = {
    ObservationKind.DETECTION: Detection,
    ObservationKind.TRACKING: Track,
    ObservationKind.LOCALIZATION: Localization,
}


@dataclass(frozen=True, order=True)
class FrameKey:
    """Identifies one camera exposure. Orders by stamp, then frame_id."""

    stamp: float
    frame_id: str

    def to_dict(self) -> Dict[str, Any]:
        return {'stamp': self.stamp, 'frame_id': self.frame_id}


@dataclass(frozen=True)
class ObservationBatch:
    """
    One message from an inbound stream.

    A tagged variant: ``kind`` selects which record type ``objects`` holds,
    so a single routing entry point serves all three streams.

    Attributes:
        kind: Stream the batch came from
        stamp: Header timestamp (seconds)
        frame_id: Header coordinate frame id
        objects: Records of the type matching ``kind``
    """

    kind: ObservationKind
    stamp: float
    frame_id: str
    objects: Tuple[Any, ...] = field(default_factory=tuple)

    @property
    def key(self) -> FrameKey:
        return FrameKey(self.stamp, self.frame_id)

    def __len__(self) -> int:
        return len(self.objects)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'kind': self.kind.value,
            'header': self.key.to_dict(),
            'objects': [obj.to_dict() for obj in self.objects],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ObservationBatch":
        """
        Parse a batch from its serialized form.

        Args:
            data: Dictionary with keys kind, header {stamp, frame_id}, objects

        Returns:
            ObservationBatch with typed records
        """
        kind = ObservationKind(data['kind'])
        header = data.get('header', data)
        record_type = RECORD_TYPES[kind]
        objects = tuple(record_type.from_dict(obj) for obj in data.get('objects', []))
        return cls(
            kind=kind,
            stamp=float(header['stamp']),
            frame_id=str(header['frame_id']),
            objects=objects,
        )

    @classmethod
    def detections(cls, stamp: float, frame_id: str, objects: Sequence[Detection]) -> "ObservationBatch":
        return cls(ObservationKind.DETECTION, stamp, frame_id, tuple(objects))

    @classmethod
    def tracks(cls, stamp: float, frame_id: str, objects: Sequence[Track]) -> "ObservationBatch":
        return cls(ObservationKind.TRACKING, stamp, frame_id, tuple(objects))

    @classmethod
    def localizations(cls, stamp: float, frame_id: str, objects: Sequence[Localization]) -> "ObservationBatch":
        return cls(ObservationKind.LOCALIZATION, stamp, frame_id, tuple(objects))
