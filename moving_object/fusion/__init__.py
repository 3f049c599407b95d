# moving_object/fusion/__init__.py
"""
Per-frame fusion of detection, tracking and localization vectors.
"""

from moving_object.fusion.frame import MovingObjectFrame, FrameState
from moving_object.fusion.registry import FrameRegistry
from moving_object.fusion.matching import RoiMatcher, ExactRoiMatcher, IouRoiMatcher, create_matcher
from moving_object.fusion.stats import FusionStats

__all__ = [
    'MovingObjectFrame', 'FrameState', 'FrameRegistry',
    'RoiMatcher', 'ExactRoiMatcher', 'IouRoiMatcher', 'create_matcher',
    'FusionStats',
]
