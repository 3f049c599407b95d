# moving_object/__init__.py
"""
Moving object fusion: merges per-frame detections, tracks and 3D
localizations into moving objects and social objects.
"""

__version__ = "0.1.0"
