# pipeline/__init__.py
"""
Stream integration for the moving object fusion engine.
"""

from pipeline.dispatcher import Dispatcher
from pipeline.data_sources import BatchSource, ListBatchSource, JsonlBatchSource

__all__ = ['Dispatcher', 'BatchSource', 'ListBatchSource', 'JsonlBatchSource']
