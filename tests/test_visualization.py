# tests/test_visualization.py

import numpy as np

from moving_object.observations.types import FrameKey, MovingObject, Point3, ROI
from moving_object.utils.visualization import MovingObjectVisualizer


class TestMovingObjectVisualizer:
    """Test the overlay renderer."""

    def setup_method(self):
        self.visualizer = MovingObjectVisualizer()
        self.person = MovingObject(3, ROI(20, 30, 40, 50), "person", 0.87, Point3(0, 0, 1), Point3(1, 2, 3))

    def test_create_canvas(self):
        canvas = self.visualizer.create_canvas(64, 48)

        assert canvas.shape == (48, 64, 3)
        assert canvas.dtype == np.uint8
        assert tuple(canvas[0, 0]) == (32, 32, 32)

    def test_visualize_draws_on_copy(self):
        image = np.zeros((120, 160, 3), dtype=np.uint8)

        vis = self.visualizer.visualize(image, [self.person], key=FrameKey(1.5, "camera"))

        assert not np.array_equal(image, vis)
        assert not image.any()

    def test_box_drawn_at_roi(self):
        image = np.zeros((120, 160, 3), dtype=np.uint8)

        vis = self.visualizer.visualize(image, [self.person])

        # Bottom edge of the ROI rectangle
        assert vis[80, 40].any()
        # Far corner untouched
        assert not vis[119, 159].any()

    def test_social_objects_drawn_thicker(self):
        image = np.zeros((120, 160, 3), dtype=np.uint8)

        plain = self.visualizer.visualize(image, [self.person])
        social = self.visualizer.visualize(image, [self.person], social_labels=["person"])

        assert np.count_nonzero(social) > np.count_nonzero(plain)

    def test_color_by_id_is_stable(self):
        assert self.visualizer.get_color_by_id(5) == self.visualizer.get_color_by_id(5)
        assert self.visualizer.get_color_by_id(5) != self.visualizer.get_color_by_id(6)

    def test_save(self, tmp_path):
        path = tmp_path / "frame.png"

        assert self.visualizer.save(str(path), self.visualizer.create_canvas(8, 8))
        assert path.exists()
