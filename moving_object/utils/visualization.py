# moving_object/utils/visualization.py

import colorsys
import logging
from typing import Dict, Optional, Sequence, Tuple

import cv2
import numpy as np

from moving_object.observations.types import FrameKey, MovingObject

logger = logging.getLogger(__name__)


class MovingObjectVisualizer:
    """
    Draws merged moving objects onto BGR images.

    Each object gets its ROI rectangle and a label with class, confidence,
    track id and 3D centroid. Social objects are drawn with a thicker box.
    """

    def __init__(self, config: Dict = None):
        """
        Initialize the visualizer.

        Args:
            config: Configuration dictionary with visualization parameters
        """
        self.config = {
            'text_color': (255, 255, 255),  # BGR white
            'text_scale': 0.5,
            'text_thickness': 1,
            'box_thickness': 2,
            'social_box_thickness': 4,
            'show_centroid': True,
            'background_color': (32, 32, 32),
            **(config or {})
        }

    def create_canvas(self, width: int, height: int) -> np.ndarray:
        """Create a blank BGR image filled with the background color."""
        canvas = np.zeros((height, width, 3), dtype=np.uint8)
        canvas[:] = self.config['background_color']
        return canvas

    def visualize(
        self,
        image: np.ndarray,
        objects: Sequence[MovingObject],
        key: Optional[FrameKey] = None,
        social_labels: Sequence[str] = ()
    ) -> np.ndarray:
        """
        Draw moving objects on a copy of the image.

        Args:
            image: Input BGR image
            objects: Moving objects of one frame
            key: Frame header drawn in the top-left corner (optional)
            social_labels: Class labels drawn as social objects

        Returns:
            Image with the overlay
        """
        vis = image.copy()

        for obj in objects:
            vis = self.draw_object(vis, obj, social=obj.class_label in social_labels)

        if key is not None:
            cv2.putText(
                vis,
                f"{key.frame_id} @ {key.stamp:.3f}",
                (10, 20),
                cv2.FONT_HERSHEY_SIMPLEX,
                self.config['text_scale'],
                self.config['text_color'],
                self.config['text_thickness']
            )

        return vis

    def draw_object(self, image: np.ndarray, obj: MovingObject, social: bool = False) -> np.ndarray:
        """
        Draw one moving object.

        Args:
            image: BGR image, modified in place
            obj: Moving object
            social: Draw with the social box thickness

        Returns:
            The same image
        """
        x1, y1, x2, y2 = obj.roi.as_xyxy()
        color = self.get_color_by_id(obj.id)
        thickness = self.config['social_box_thickness'] if social else self.config['box_thickness']

        cv2.rectangle(image, (x1, y1), (x2, y2), color, thickness)

        label_parts = [obj.class_label, f"{obj.confidence:.2f}", f"ID:{obj.id}"]
        if self.config['show_centroid']:
            c = obj.centroid
            label_parts.append(f"({c.x:.1f}, {c.y:.1f}, {c.z:.1f})")
        label = ' | '.join(label_parts)

        text_size, _ = cv2.getTextSize(
            label,
            cv2.FONT_HERSHEY_SIMPLEX,
            self.config['text_scale'],
            self.config['text_thickness']
        )

        # Keep the label inside the image when the box touches the top edge
        label_y = max(y1, text_size[1] + 5)

        cv2.rectangle(
            image,
            (x1, label_y - text_size[1] - 5),
            (x1 + text_size[0], label_y),
            color,
            -1
        )
        cv2.putText(
            image,
            label,
            (x1, label_y - 5),
            cv2.FONT_HERSHEY_SIMPLEX,
            self.config['text_scale'],
            self.config['text_color'],
            self.config['text_thickness']
        )

        return image

    def get_color_by_id(self, id_value: int) -> Tuple[int, int, int]:
        """
        Generate a consistent color based on an ID.

        Args:
            id_value: Numeric ID

        Returns:
            BGR color tuple
        """
        golden_ratio = 0.618033988749895
        h = (id_value * golden_ratio) % 1.0
        r, g, b = colorsys.hsv_to_rgb(h, 0.8, 0.9)
        return (int(b * 255), int(g * 255), int(r * 255))

    def save(self, path: str, image: np.ndarray) -> bool:
        ok = cv2.imwrite(path, image)
        if not ok:
            logger.warning(f"Failed to write image: {path}")
        return ok
