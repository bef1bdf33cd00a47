"""Top-level tracer printing a disassembled view of a class."""

from __future__ import annotations

import logging
import sys
from typing import Any, Optional, Sequence, TextIO

from ..errors import VisitorStateError
from ..formatting import (
    MEMBER_INDENT,
    format_attribute,
    format_class_header,
    format_field_header,
    format_inner_class,
    format_method_header,
)
from ..fragments import FragmentBuffer
from ..mnemonics import MnemonicTable
from ..visitors import Attribute, ClassVisitor
from .annotation import TraceAnnotationVisitor, annotation_comment, open_annotation
from .member import TraceMemberVisitor, TraceMethodVisitor


logger = logging.getLogger(__name__)


class TraceClassVisitor(ClassVisitor):
    """A class visitor that prints the classes it visits.

    It can be used alone, as the last element of a chain, to disassemble a
    class, or in the middle of a chain to trace what flows through that point
    while passing every event on to ``downstream`` untouched.  Visiting a
    ``Hello`` class prints::

        // class version 49.0 (49)
        // access flags 0x21
        public class Hello {

          // compiled from: Hello.java

          // access flags 0x9
          public static main ([Ljava/lang/String;)V
            GETSTATIC java/lang/System out Ljava/io/PrintStream;
            LDC "hello"
            INVOKEVIRTUAL java/io/PrintStream println (Ljava/lang/String;)V
            RETURN
            MAXSTACK = 2
            MAXLOCALS = 1
        }

    Member text is collected in per-member buffers that are spliced into the
    class buffer at declaration time and only resolved when ``visit_end``
    flattens the document, which is then written to ``sink`` in one go.
    """

    def __init__(
        self,
        downstream: Optional[ClassVisitor] = None,
        sink: Optional[TextIO] = None,
        *,
        mnemonics: Optional[MnemonicTable] = None,
    ) -> None:
        self.downstream = downstream
        self.sink = sink
        self.mnemonics = mnemonics or MnemonicTable.default()
        self.buffer = FragmentBuffer("class")
        self.text: Optional[str] = None
        self._started = False
        self._ended = False

    def visit(
        self,
        version: int,
        access: int,
        name: str,
        signature: Optional[str],
        super_name: Optional[str],
        interfaces: Sequence[str],
    ) -> None:
        if self._started:
            raise VisitorStateError("class header received twice")
        self._started = True
        self.buffer.append(
            format_class_header(version, access, name, signature, super_name, interfaces)
        )
        if self.downstream is not None:
            self.downstream.visit(version, access, name, signature, super_name, interfaces)

    def visit_source(self, source: Optional[str], debug: Optional[str]) -> None:
        self._require_open("visit_source")
        if source is not None:
            self.buffer.append(f"{MEMBER_INDENT}// compiled from: {source}\n")
        if debug is not None:
            self.buffer.append(f"{MEMBER_INDENT}// debug info: {debug}\n")
        if self.downstream is not None:
            self.downstream.visit_source(source, debug)

    def visit_outer_class(self, owner: str, name: Optional[str], desc: Optional[str]) -> None:
        self._require_open("visit_outer_class")
        parts = [part for part in (owner, name, desc) if part is not None]
        self.buffer.append(f"{MEMBER_INDENT}OUTERCLASS " + " ".join(parts) + "\n")
        if self.downstream is not None:
            self.downstream.visit_outer_class(owner, name, desc)

    def visit_annotation(self, desc: str, visible: bool) -> TraceAnnotationVisitor:
        self._require_open("visit_annotation")
        self.buffer.append("\n")
        nested = None
        if self.downstream is not None:
            nested = self.downstream.visit_annotation(desc, visible)
        return open_annotation(
            self.buffer,
            f"{MEMBER_INDENT}@{desc}(",
            ")" + annotation_comment(visible) + "\n",
            nested,
        )

    def visit_attribute(self, attribute: Attribute) -> None:
        self._require_open("visit_attribute")
        self.buffer.append("\n")
        self.buffer.append(format_attribute(MEMBER_INDENT, attribute.type, attribute.content))
        if self.downstream is not None:
            self.downstream.visit_attribute(attribute)

    def visit_inner_class(
        self,
        name: str,
        outer_name: Optional[str],
        inner_name: Optional[str],
        access: int,
    ) -> None:
        self._require_open("visit_inner_class")
        self.buffer.append(format_inner_class(name, outer_name, inner_name, access))
        if self.downstream is not None:
            self.downstream.visit_inner_class(name, outer_name, inner_name, access)

    def visit_field(
        self,
        access: int,
        name: str,
        desc: str,
        signature: Optional[str],
        value: Any,
    ) -> TraceMemberVisitor:
        self._require_open("visit_field")
        self.buffer.append("\n")
        self.buffer.append(format_field_header(access, name, desc, signature, value))
        nested = None
        if self.downstream is not None:
            nested = self.downstream.visit_field(access, name, desc, signature, value)
        tracer = TraceMemberVisitor(nested, mnemonics=self.mnemonics)
        self.buffer.append_buffer(tracer.buffer)
        return tracer

    def visit_method(
        self,
        access: int,
        name: str,
        desc: str,
        signature: Optional[str],
        exceptions: Sequence[str],
    ) -> TraceMethodVisitor:
        self._require_open("visit_method")
        self.buffer.append("\n")
        self.buffer.append(format_method_header(access, name, desc, signature, exceptions))
        nested = None
        if self.downstream is not None:
            nested = self.downstream.visit_method(access, name, desc, signature, exceptions)
        tracer = TraceMethodVisitor(nested, mnemonics=self.mnemonics)
        self.buffer.append_buffer(tracer.buffer)
        return tracer

    def visit_end(self) -> None:
        self._require_open("visit_end")
        self.buffer.append("}\n")
        self._ended = True
        if self.downstream is not None:
            self.downstream.visit_end()
        self.downstream = None

        self.buffer.freeze()
        self.text = self.buffer.flatten()
        logger.debug("class listing complete: %d characters", len(self.text))
        sink = self.sink if self.sink is not None else sys.stdout
        sink.write(self.text)
        sink.flush()

    def _require_open(self, event: str) -> None:
        if not self._started:
            raise VisitorStateError(f"{event} received before the class header")
        if self._ended:
            raise VisitorStateError(f"{event} received after the class ended")
