"""Event surfaces of the visitor chain and the values they carry.

Every scope of a class file has its own surface:

* :class:`ClassVisitor` receives the class header, class-level records and
  member declarations,
* :class:`MemberVisitor` receives the annotations and attributes of a field,
* :class:`CodeVisitor` receives the instruction stream of a method body,
* :class:`MethodVisitor` combines the member and code surfaces,
* :class:`AnnotationVisitor` receives the element values of an annotation.

The base classes are no-op terminals: every event is accepted and ignored and
every nested-scope event returns ``None``.  Chains are built by composition,
each visitor holding a reference to the next one.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Sequence, Tuple


class Label:
    """Opaque bytecode position.

    Identity is the only meaning of a label; ``offset`` is informational and
    only filled in by :class:`~classtrace.reader.ClassReader`.
    """

    __slots__ = ("offset",)

    def __init__(self, offset: Optional[int] = None) -> None:
        self.offset = offset

    def __repr__(self) -> str:
        if self.offset is None:
            return f"<Label {id(self):#x}>"
        return f"<Label @{self.offset}>"


@dataclass(frozen=True)
class Attribute:
    """A non-standard attribute passed through as raw bytes."""

    type: str
    content: bytes = b""


@dataclass(frozen=True)
class TypeRef:
    """A class literal or method type constant, identified by its descriptor."""

    descriptor: str


class Float(float):
    """A ``CONSTANT_Float`` value.

    The number itself is the exact widened double; the subclass only records
    that it was stored with single precision, so listings can print the
    shortest decimal that reads back as the same ``float32``.
    """

    __slots__ = ()


@dataclass(frozen=True)
class Handle:
    """A ``CONSTANT_MethodHandle`` value."""

    tag: int
    owner: str
    name: str
    desc: str
    is_interface: bool = False


@dataclass(frozen=True)
class DynamicConstant:
    """A ``CONSTANT_Dynamic`` value computed by a bootstrap method."""

    name: str
    desc: str
    bootstrap: Handle
    bootstrap_args: Tuple[Any, ...] = ()


class AnnotationVisitor:
    def visit(self, name: Optional[str], value: Any) -> None:
        pass

    def visit_enum(self, name: Optional[str], desc: str, value: str) -> None:
        pass

    def visit_annotation(self, name: Optional[str], desc: str) -> Optional["AnnotationVisitor"]:
        return None

    def visit_array(self, name: Optional[str]) -> Optional["AnnotationVisitor"]:
        return None

    def visit_end(self) -> None:
        pass


class MemberVisitor:
    def visit_annotation(self, desc: str, visible: bool) -> Optional[AnnotationVisitor]:
        return None

    def visit_attribute(self, attribute: Attribute) -> None:
        pass

    def visit_end(self) -> None:
        pass


class CodeVisitor:
    def visit_code(self) -> None:
        pass

    def visit_frame(
        self,
        kind: int,
        num_local: int,
        local: Sequence[Any],
        num_stack: int,
        stack: Sequence[Any],
    ) -> None:
        pass

    def visit_insn(self, opcode: int) -> None:
        pass

    def visit_int_insn(self, opcode: int, operand: int) -> None:
        pass

    def visit_var_insn(self, opcode: int, var: int) -> None:
        pass

    def visit_type_insn(self, opcode: int, type_name: str) -> None:
        pass

    def visit_field_insn(self, opcode: int, owner: str, name: str, desc: str) -> None:
        pass

    def visit_method_insn(
        self, opcode: int, owner: str, name: str, desc: str, is_interface: bool
    ) -> None:
        pass

    def visit_invoke_dynamic_insn(
        self, name: str, desc: str, bootstrap: Handle, bootstrap_args: Sequence[Any]
    ) -> None:
        pass

    def visit_jump_insn(self, opcode: int, label: Label) -> None:
        pass

    def visit_label(self, label: Label) -> None:
        pass

    def visit_ldc_insn(self, value: Any) -> None:
        pass

    def visit_iinc_insn(self, var: int, increment: int) -> None:
        pass

    def visit_table_switch_insn(
        self, low: int, high: int, default: Label, labels: Sequence[Label]
    ) -> None:
        pass

    def visit_lookup_switch_insn(
        self, default: Label, keys: Sequence[int], labels: Sequence[Label]
    ) -> None:
        pass

    def visit_multi_anew_array_insn(self, desc: str, dims: int) -> None:
        pass

    def visit_try_catch_block(
        self, start: Label, end: Label, handler: Label, type_name: Optional[str]
    ) -> None:
        pass

    def visit_local_variable(
        self,
        name: str,
        desc: str,
        signature: Optional[str],
        start: Label,
        end: Label,
        index: int,
    ) -> None:
        pass

    def visit_line_number(self, line: int, start: Label) -> None:
        pass

    def visit_maxs(self, max_stack: int, max_locals: int) -> None:
        pass

    def visit_end(self) -> None:
        pass


class MethodVisitor(MemberVisitor, CodeVisitor):
    def visit_parameter_annotation(
        self, parameter: int, desc: str, visible: bool
    ) -> Optional[AnnotationVisitor]:
        return None

    def visit_annotation_default(self) -> Optional[AnnotationVisitor]:
        return None


class ClassVisitor:
    def visit(
        self,
        version: int,
        access: int,
        name: str,
        signature: Optional[str],
        super_name: Optional[str],
        interfaces: Sequence[str],
    ) -> None:
        pass

    def visit_source(self, source: Optional[str], debug: Optional[str]) -> None:
        pass

    def visit_outer_class(self, owner: str, name: Optional[str], desc: Optional[str]) -> None:
        pass

    def visit_annotation(self, desc: str, visible: bool) -> Optional[AnnotationVisitor]:
        return None

    def visit_attribute(self, attribute: Attribute) -> None:
        pass

    def visit_inner_class(
        self,
        name: str,
        outer_name: Optional[str],
        inner_name: Optional[str],
        access: int,
    ) -> None:
        pass

    def visit_field(
        self,
        access: int,
        name: str,
        desc: str,
        signature: Optional[str],
        value: Any,
    ) -> Optional[MemberVisitor]:
        return None

    def visit_method(
        self,
        access: int,
        name: str,
        desc: str,
        signature: Optional[str],
        exceptions: Sequence[str],
    ) -> Optional[MethodVisitor]:
        return None

    def visit_end(self) -> None:
        pass
