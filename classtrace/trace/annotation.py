"""Annotation rendering shared by class, field and method tracers."""

from __future__ import annotations

from typing import Any, Optional

from ..errors import VisitorStateError
from ..formatting import format_value
from ..fragments import FragmentBuffer
from ..visitors import AnnotationVisitor


class TraceAnnotationVisitor(AnnotationVisitor):
    """Render element values as ``name=value`` pairs separated by commas.

    Nested annotations and arrays get their own tracer whose buffer is spliced
    into this one between the opening and closing delimiters, so the closing
    text is in place before the nested values arrive.
    """

    def __init__(self, downstream: Optional[AnnotationVisitor] = None) -> None:
        self.downstream = downstream
        self.buffer = FragmentBuffer("annotation")
        self._values = 0
        self._ended = False

    def visit(self, name: Optional[str], value: Any) -> None:
        self._require_open("visit")
        self._begin_value(name)
        self.buffer.append(format_value(value))
        if self.downstream is not None:
            self.downstream.visit(name, value)

    def visit_enum(self, name: Optional[str], desc: str, value: str) -> None:
        self._require_open("visit_enum")
        self._begin_value(name)
        self.buffer.append(f"{desc}.{value}")
        if self.downstream is not None:
            self.downstream.visit_enum(name, desc, value)

    def visit_annotation(self, name: Optional[str], desc: str) -> "TraceAnnotationVisitor":
        self._require_open("visit_annotation")
        self._begin_value(name)
        nested = None
        if self.downstream is not None:
            nested = self.downstream.visit_annotation(name, desc)
        return open_annotation(self.buffer, f"@{desc}(", ")", nested)

    def visit_array(self, name: Optional[str]) -> "TraceAnnotationVisitor":
        self._require_open("visit_array")
        self._begin_value(name)
        nested = None
        if self.downstream is not None:
            nested = self.downstream.visit_array(name)
        return open_annotation(self.buffer, "{", "}", nested)

    def visit_end(self) -> None:
        self._require_open("visit_end")
        self._ended = True
        self.buffer.freeze()
        if self.downstream is not None:
            self.downstream.visit_end()
        self.downstream = None

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------
    def _begin_value(self, name: Optional[str]) -> None:
        if self._values:
            self.buffer.append(", ")
        self._values += 1
        if name is not None:
            self.buffer.append(f"{name}=")

    def _require_open(self, event: str) -> None:
        if self._ended:
            raise VisitorStateError(f"{event} received after the annotation ended")


def open_annotation(
    buffer: FragmentBuffer,
    prefix: str,
    suffix: str,
    downstream: Optional[AnnotationVisitor],
) -> TraceAnnotationVisitor:
    """Append ``prefix``, a placeholder for a new tracer and ``suffix`` to ``buffer``."""

    tracer = TraceAnnotationVisitor(downstream)
    buffer.append(prefix)
    buffer.append_buffer(tracer.buffer)
    buffer.append(suffix)
    return tracer


def annotation_comment(visible: bool, parameter: Optional[int] = None) -> str:
    notes = []
    if not visible:
        notes.append("invisible")
    if parameter is not None:
        notes.append(f"parameter {parameter}")
    if not notes:
        return ""
    return " // " + ", ".join(notes)
