"""Terminal visitor that records every event it receives."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Optional, Tuple

from .visitors import AnnotationVisitor, ClassVisitor, MethodVisitor


@dataclass(frozen=True)
class Event:
    """One recorded call: the scope that received it, its name and arguments."""

    scope: str
    name: str
    args: Tuple[Any, ...]

    def describe(self) -> str:
        rendered = ", ".join(repr(arg) for arg in self.args)
        return f"{self.scope}.{self.name}({rendered})"


class EventRecorder(ClassVisitor, MethodVisitor, AnnotationVisitor):
    """Append every call to a log shared by the recorder and its children.

    A single recorder serves all scopes: nested-scope events return a child
    recorder that writes to the same list, so ``events`` holds the whole call
    sequence in arrival order.  Placed downstream of a tracer it shows exactly
    what the tracer forwarded.
    """

    def __init__(self, scope: str = "class", events: Optional[List[Event]] = None) -> None:
        self.scope = scope
        self.events: List[Event] = events if events is not None else []

    def _record(self, name: str, *args: Any) -> None:
        self.events.append(Event(self.scope, name, args))

    def _child(self, scope: str) -> "EventRecorder":
        return EventRecorder(scope, self.events)

    # ------------------------------------------------------------------
    # shared by several scopes
    # ------------------------------------------------------------------
    def visit(self, *args: Any) -> None:
        self._record("visit", *args)

    def visit_annotation(self, *args: Any) -> "EventRecorder":
        self._record("visit_annotation", *args)
        return self._child("annotation")

    def visit_attribute(self, attribute: Any) -> None:
        self._record("visit_attribute", attribute)

    def visit_end(self) -> None:
        self._record("visit_end")

    # ------------------------------------------------------------------
    # class scope
    # ------------------------------------------------------------------
    def visit_source(self, source: Any, debug: Any) -> None:
        self._record("visit_source", source, debug)

    def visit_outer_class(self, owner: Any, name: Any, desc: Any) -> None:
        self._record("visit_outer_class", owner, name, desc)

    def visit_inner_class(self, name: Any, outer_name: Any, inner_name: Any, access: Any) -> None:
        self._record("visit_inner_class", name, outer_name, inner_name, access)

    def visit_field(self, *args: Any) -> "EventRecorder":
        self._record("visit_field", *args)
        return self._child("field")

    def visit_method(self, *args: Any) -> "EventRecorder":
        self._record("visit_method", *args)
        return self._child("method")

    # ------------------------------------------------------------------
    # method scope
    # ------------------------------------------------------------------
    def visit_parameter_annotation(self, *args: Any) -> "EventRecorder":
        self._record("visit_parameter_annotation", *args)
        return self._child("annotation")

    def visit_annotation_default(self) -> "EventRecorder":
        self._record("visit_annotation_default")
        return self._child("annotation")

    def visit_code(self) -> None:
        self._record("visit_code")

    def visit_frame(self, *args: Any) -> None:
        self._record("visit_frame", *args)

    def visit_insn(self, *args: Any) -> None:
        self._record("visit_insn", *args)

    def visit_int_insn(self, *args: Any) -> None:
        self._record("visit_int_insn", *args)

    def visit_var_insn(self, *args: Any) -> None:
        self._record("visit_var_insn", *args)

    def visit_type_insn(self, *args: Any) -> None:
        self._record("visit_type_insn", *args)

    def visit_field_insn(self, *args: Any) -> None:
        self._record("visit_field_insn", *args)

    def visit_method_insn(self, *args: Any) -> None:
        self._record("visit_method_insn", *args)

    def visit_invoke_dynamic_insn(self, *args: Any) -> None:
        self._record("visit_invoke_dynamic_insn", *args)

    def visit_jump_insn(self, *args: Any) -> None:
        self._record("visit_jump_insn", *args)

    def visit_label(self, *args: Any) -> None:
        self._record("visit_label", *args)

    def visit_ldc_insn(self, *args: Any) -> None:
        self._record("visit_ldc_insn", *args)

    def visit_iinc_insn(self, *args: Any) -> None:
        self._record("visit_iinc_insn", *args)

    def visit_table_switch_insn(self, *args: Any) -> None:
        self._record("visit_table_switch_insn", *args)

    def visit_lookup_switch_insn(self, *args: Any) -> None:
        self._record("visit_lookup_switch_insn", *args)

    def visit_multi_anew_array_insn(self, *args: Any) -> None:
        self._record("visit_multi_anew_array_insn", *args)

    def visit_try_catch_block(self, *args: Any) -> None:
        self._record("visit_try_catch_block", *args)

    def visit_local_variable(self, *args: Any) -> None:
        self._record("visit_local_variable", *args)

    def visit_line_number(self, *args: Any) -> None:
        self._record("visit_line_number", *args)

    def visit_maxs(self, *args: Any) -> None:
        self._record("visit_maxs", *args)

    # ------------------------------------------------------------------
    # annotation scope
    # ------------------------------------------------------------------
    def visit_enum(self, *args: Any) -> None:
        self._record("visit_enum", *args)

    def visit_array(self, *args: Any) -> "EventRecorder":
        self._record("visit_array", *args)
        return self._child("annotation")
