"""Trace visitors rendering a class listing while forwarding every event."""

from .annotation import TraceAnnotationVisitor
from .classes import TraceClassVisitor
from .code import CodeState, TraceCodeVisitor
from .member import TraceMemberVisitor, TraceMethodVisitor

__all__ = [
    "CodeState",
    "TraceAnnotationVisitor",
    "TraceClassVisitor",
    "TraceCodeVisitor",
    "TraceMemberVisitor",
    "TraceMethodVisitor",
]
