# moving_object/sinks/__init__.py
"""
Outbound sinks for the moving-object and social-object streams.
"""

from moving_object.sinks.sink import ObjectSink, deliver
from moving_object.sinks.memory_sink import MemorySink, LoggingSink
from moving_object.sinks.jsonl_sink import JsonlSink

__all__ = ['ObjectSink', 'deliver', 'MemorySink', 'LoggingSink', 'JsonlSink']
