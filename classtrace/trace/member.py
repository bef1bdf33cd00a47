"""Tracers for field and method members."""

from __future__ import annotations

from typing import Any, Optional, Sequence

from ..errors import VisitorStateError
from ..formatting import MEMBER_INDENT, format_attribute
from ..fragments import FragmentBuffer
from ..mnemonics import MnemonicTable
from ..visitors import (
    AnnotationVisitor,
    Attribute,
    Handle,
    Label,
    MemberVisitor,
    MethodVisitor,
)
from .annotation import TraceAnnotationVisitor, annotation_comment, open_annotation
from .code import TraceCodeVisitor


class TraceMemberVisitor(MemberVisitor):
    """Render the annotations and attributes of one member.

    The member header itself is written by the class tracer; this visitor owns
    the buffer that the class tracer splices in right after the header.  Used
    as is for fields and extended by :class:`TraceMethodVisitor`.
    """

    kind = "field"

    def __init__(
        self,
        downstream: Optional[MemberVisitor] = None,
        *,
        mnemonics: Optional[MnemonicTable] = None,
    ) -> None:
        self.downstream = downstream
        self.mnemonics = mnemonics or MnemonicTable.default()
        self.buffer = FragmentBuffer(self.kind)
        self._ended = False

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

    def visit_end(self) -> None:
        self._require_open("visit_end")
        self._ended = True
        self.buffer.freeze()
        if self.downstream is not None:
            self.downstream.visit_end()
        self.downstream = None

    def _require_open(self, event: str) -> None:
        if self._ended:
            raise VisitorStateError(f"{event} received after the {self.kind} ended")


class TraceMethodVisitor(TraceMemberVisitor, MethodVisitor):
    """Member tracer for methods.

    Instruction-level events are delegated to a nested
    :class:`~classtrace.trace.code.TraceCodeVisitor`; its buffer joins this
    one when the body starts so annotations stay above the instructions.
    """

    kind = "method"

    def __init__(
        self,
        downstream: Optional[MethodVisitor] = None,
        *,
        mnemonics: Optional[MnemonicTable] = None,
    ) -> None:
        super().__init__(downstream, mnemonics=mnemonics)
        self.code = TraceCodeVisitor(downstream, mnemonics=self.mnemonics)

    def visit_parameter_annotation(
        self, parameter: int, desc: str, visible: bool
    ) -> TraceAnnotationVisitor:
        self._require_open("visit_parameter_annotation")
        self.buffer.append("\n")
        nested = None
        if self.downstream is not None:
            nested = self.downstream.visit_parameter_annotation(parameter, desc, visible)
        return open_annotation(
            self.buffer,
            f"{MEMBER_INDENT}@{desc}(",
            ")" + annotation_comment(visible, parameter) + "\n",
            nested,
        )

    def visit_annotation_default(self) -> TraceAnnotationVisitor:
        self._require_open("visit_annotation_default")
        self.buffer.append("\n")
        nested: Optional[AnnotationVisitor] = None
        if self.downstream is not None:
            nested = self.downstream.visit_annotation_default()
        return open_annotation(self.buffer, f"{MEMBER_INDENT}default=", "\n", nested)

    def visit_code(self) -> None:
        self._require_open("visit_code")
        self.code.visit_code()
        self.buffer.append_buffer(self.code.buffer)

    def visit_end(self) -> None:
        self._require_open("visit_end")
        self.code.finish()
        super().visit_end()

    # ------------------------------------------------------------------
    # code events, delegated to the nested tracer
    # ------------------------------------------------------------------
    def visit_frame(
        self,
        kind: int,
        num_local: int,
        local: Sequence[Any],
        num_stack: int,
        stack: Sequence[Any],
    ) -> None:
        self.code.visit_frame(kind, num_local, local, num_stack, stack)

    def visit_insn(self, opcode: int) -> None:
        self.code.visit_insn(opcode)

    def visit_int_insn(self, opcode: int, operand: int) -> None:
        self.code.visit_int_insn(opcode, operand)

    def visit_var_insn(self, opcode: int, var: int) -> None:
        self.code.visit_var_insn(opcode, var)

    def visit_type_insn(self, opcode: int, type_name: str) -> None:
        self.code.visit_type_insn(opcode, type_name)

    def visit_field_insn(self, opcode: int, owner: str, name: str, desc: str) -> None:
        self.code.visit_field_insn(opcode, owner, name, desc)

    def visit_method_insn(
        self, opcode: int, owner: str, name: str, desc: str, is_interface: bool
    ) -> None:
        self.code.visit_method_insn(opcode, owner, name, desc, is_interface)

    def visit_invoke_dynamic_insn(
        self, name: str, desc: str, bootstrap: Handle, bootstrap_args: Sequence[Any]
    ) -> None:
        self.code.visit_invoke_dynamic_insn(name, desc, bootstrap, bootstrap_args)

    def visit_jump_insn(self, opcode: int, label: Label) -> None:
        self.code.visit_jump_insn(opcode, label)

    def visit_label(self, label: Label) -> None:
        self.code.visit_label(label)

    def visit_ldc_insn(self, value: Any) -> None:
        self.code.visit_ldc_insn(value)

    def visit_iinc_insn(self, var: int, increment: int) -> None:
        self.code.visit_iinc_insn(var, increment)

    def visit_table_switch_insn(
        self, low: int, high: int, default: Label, labels: Sequence[Label]
    ) -> None:
        self.code.visit_table_switch_insn(low, high, default, labels)

    def visit_lookup_switch_insn(
        self, default: Label, keys: Sequence[int], labels: Sequence[Label]
    ) -> None:
        self.code.visit_lookup_switch_insn(default, keys, labels)

    def visit_multi_anew_array_insn(self, desc: str, dims: int) -> None:
        self.code.visit_multi_anew_array_insn(desc, dims)

    def visit_try_catch_block(
        self, start: Label, end: Label, handler: Label, type_name: Optional[str]
    ) -> None:
        self.code.visit_try_catch_block(start, end, handler, type_name)

    def visit_local_variable(
        self,
        name: str,
        desc: str,
        signature: Optional[str],
        start: Label,
        end: Label,
        index: int,
    ) -> None:
        self.code.visit_local_variable(name, desc, signature, start, end, index)

    def visit_line_number(self, line: int, start: Label) -> None:
        self.code.visit_line_number(line, start)

    def visit_maxs(self, max_stack: int, max_locals: int) -> None:
        self.code.visit_maxs(max_stack, max_locals)
