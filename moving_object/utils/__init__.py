# moving_object/utils/__init__.py
"""
Utility functions for the moving object fusion system.
"""

from moving_object.utils.visualization import MovingObjectVisualizer

__all__ = ['MovingObjectVisualizer']
