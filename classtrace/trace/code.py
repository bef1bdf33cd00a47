"""Tracer for the instruction stream of a single method body."""

from __future__ import annotations

from enum import Enum, auto
from typing import Any, Optional, Sequence

from ..errors import (
    ContractViolation,
    MissingArgumentError,
    SwitchArityError,
    VisitorStateError,
)
from ..formatting import (
    CASE_INDENT,
    INSN_INDENT,
    LABEL_INDENT,
    format_frame_types,
    format_handle,
    format_value,
    instruction,
)
from ..fragments import FragmentBuffer
from ..labels import LabelTable
from ..mnemonics import MnemonicTable
from ..opcodes import (
    F_APPEND,
    F_CHOP,
    F_FULL,
    F_NEW,
    F_SAME1,
    FRAME_KIND_NAMES,
    IINC,
    INVOKEDYNAMIC,
    INVOKEINTERFACE,
    LDC,
    LOOKUPSWITCH,
    MULTIANEWARRAY,
    NEWARRAY,
    TABLESWITCH,
)
from ..visitors import CodeVisitor, Handle, Label


class CodeState(Enum):
    NOT_STARTED = auto()
    ACCUMULATING = auto()
    FINISHED = auto()


class TraceCodeVisitor(CodeVisitor):
    """Render instructions, labels and code metadata one line per event.

    Events are accepted only between :meth:`visit_code` and the end of the
    body.  Anything delivered outside that window raises
    :class:`~classtrace.errors.VisitorStateError` instead of being rendered,
    and so does a second :meth:`visit_maxs`.  Every accepted event is
    forwarded to ``downstream`` with the arguments it was received with.
    """

    def __init__(
        self,
        downstream: Optional[CodeVisitor] = None,
        *,
        mnemonics: Optional[MnemonicTable] = None,
    ) -> None:
        self.downstream = downstream
        self.mnemonics = mnemonics or MnemonicTable.default()
        self.buffer = FragmentBuffer("code")
        self.labels = LabelTable()
        self.state = CodeState.NOT_STARTED
        self._maxs_seen = False

    # ------------------------------------------------------------------
    # lifecycle
    # ------------------------------------------------------------------
    def visit_code(self) -> None:
        if self.state is not CodeState.NOT_STARTED:
            raise VisitorStateError(f"visit_code received while {self.state.name.lower()}")
        self.state = CodeState.ACCUMULATING
        if self.downstream is not None:
            self.downstream.visit_code()

    def visit_maxs(self, max_stack: int, max_locals: int) -> None:
        self._require_accumulating("visit_maxs")
        if self._maxs_seen:
            raise VisitorStateError("visit_maxs received twice for the same body")
        self._maxs_seen = True
        self.buffer.append(f"{INSN_INDENT}MAXSTACK = {max_stack}\n")
        self.buffer.append(f"{INSN_INDENT}MAXLOCALS = {max_locals}\n")
        if self.downstream is not None:
            self.downstream.visit_maxs(max_stack, max_locals)

    def finish(self) -> None:
        """Close the body without forwarding; used by the enclosing method tracer."""

        if self.state is CodeState.FINISHED:
            raise VisitorStateError("method body already finished")
        self.state = CodeState.FINISHED
        self.buffer.freeze()
        self.downstream = None

    def visit_end(self) -> None:
        downstream = self.downstream
        self.finish()
        if downstream is not None:
            downstream.visit_end()

    # ------------------------------------------------------------------
    # instructions
    # ------------------------------------------------------------------
    def visit_insn(self, opcode: int) -> None:
        self._require_accumulating("visit_insn")
        self.buffer.append(instruction(self.mnemonics.opcode(opcode)))
        if self.downstream is not None:
            self.downstream.visit_insn(opcode)

    def visit_int_insn(self, opcode: int, operand: int) -> None:
        self._require_accumulating("visit_int_insn")
        if opcode == NEWARRAY:
            rendered = self.mnemonics.array_type(operand)
        else:
            rendered = str(operand)
        self.buffer.append(instruction(self.mnemonics.opcode(opcode), rendered))
        if self.downstream is not None:
            self.downstream.visit_int_insn(opcode, operand)

    def visit_var_insn(self, opcode: int, var: int) -> None:
        self._require_accumulating("visit_var_insn")
        self.buffer.append(instruction(self.mnemonics.opcode(opcode), var))
        if self.downstream is not None:
            self.downstream.visit_var_insn(opcode, var)

    def visit_type_insn(self, opcode: int, type_name: str) -> None:
        self._require_accumulating("visit_type_insn")
        self.buffer.append(instruction(self.mnemonics.opcode(opcode), type_name))
        if self.downstream is not None:
            self.downstream.visit_type_insn(opcode, type_name)

    def visit_field_insn(self, opcode: int, owner: str, name: str, desc: str) -> None:
        self._require_accumulating("visit_field_insn")
        self.buffer.append(instruction(self.mnemonics.opcode(opcode), owner, name, desc))
        if self.downstream is not None:
            self.downstream.visit_field_insn(opcode, owner, name, desc)

    def visit_method_insn(
        self, opcode: int, owner: str, name: str, desc: str, is_interface: bool
    ) -> None:
        self._require_accumulating("visit_method_insn")
        line = instruction(self.mnemonics.opcode(opcode), owner, name, desc)
        if is_interface and opcode != INVOKEINTERFACE:
            line = line[:-1] + " (itf)\n"
        self.buffer.append(line)
        if self.downstream is not None:
            self.downstream.visit_method_insn(opcode, owner, name, desc, is_interface)

    def visit_invoke_dynamic_insn(
        self, name: str, desc: str, bootstrap: Handle, bootstrap_args: Sequence[Any]
    ) -> None:
        self._require_accumulating("visit_invoke_dynamic_insn")
        arguments = [format_handle(bootstrap)]
        arguments.extend(format_value(argument) for argument in bootstrap_args)
        mnemonic = self.mnemonics.opcode(INVOKEDYNAMIC)
        self.buffer.append(instruction(mnemonic, name, desc, "[" + ", ".join(arguments) + "]"))
        if self.downstream is not None:
            self.downstream.visit_invoke_dynamic_insn(name, desc, bootstrap, bootstrap_args)

    def visit_jump_insn(self, opcode: int, label: Label) -> None:
        self._require_accumulating("visit_jump_insn")
        self.buffer.append(instruction(self.mnemonics.opcode(opcode), self.labels.name(label)))
        if self.downstream is not None:
            self.downstream.visit_jump_insn(opcode, label)

    def visit_label(self, label: Label) -> None:
        self._require_accumulating("visit_label")
        self.buffer.append(f"{LABEL_INDENT}{self.labels.name(label)}\n")
        if self.downstream is not None:
            self.downstream.visit_label(label)

    def visit_ldc_insn(self, value: Any) -> None:
        self._require_accumulating("visit_ldc_insn")
        if value is None:
            raise MissingArgumentError("LDC requires a constant value")
        self.buffer.append(instruction(self.mnemonics.opcode(LDC), format_value(value)))
        if self.downstream is not None:
            self.downstream.visit_ldc_insn(value)

    def visit_iinc_insn(self, var: int, increment: int) -> None:
        self._require_accumulating("visit_iinc_insn")
        self.buffer.append(instruction(self.mnemonics.opcode(IINC), var, increment))
        if self.downstream is not None:
            self.downstream.visit_iinc_insn(var, increment)

    def visit_table_switch_insn(
        self, low: int, high: int, default: Label, labels: Sequence[Label]
    ) -> None:
        self._require_accumulating("visit_table_switch_insn")
        expected = high - low + 1
        if expected < 0 or len(labels) != expected:
            raise SwitchArityError(
                f"TABLESWITCH {low}..{high} declares {max(expected, 0)} case(s) "
                f"but {len(labels)} target(s) were supplied"
            )
        lines = [instruction(self.mnemonics.opcode(TABLESWITCH))]
        for key, target in zip(range(low, high + 1), labels):
            lines.append(f"{CASE_INDENT}{key}: {self.labels.name(target)}\n")
        lines.append(f"{CASE_INDENT}default: {self.labels.name(default)}\n")
        self.buffer.append("".join(lines))
        if self.downstream is not None:
            self.downstream.visit_table_switch_insn(low, high, default, labels)

    def visit_lookup_switch_insn(
        self, default: Label, keys: Sequence[int], labels: Sequence[Label]
    ) -> None:
        self._require_accumulating("visit_lookup_switch_insn")
        if len(keys) != len(labels):
            raise SwitchArityError(
                f"LOOKUPSWITCH declares {len(keys)} key(s) but {len(labels)} target(s) were supplied"
            )
        lines = [instruction(self.mnemonics.opcode(LOOKUPSWITCH))]
        for key, target in zip(keys, labels):
            lines.append(f"{CASE_INDENT}{key}: {self.labels.name(target)}\n")
        lines.append(f"{CASE_INDENT}default: {self.labels.name(default)}\n")
        self.buffer.append("".join(lines))
        if self.downstream is not None:
            self.downstream.visit_lookup_switch_insn(default, keys, labels)

    def visit_multi_anew_array_insn(self, desc: str, dims: int) -> None:
        self._require_accumulating("visit_multi_anew_array_insn")
        self.buffer.append(instruction(self.mnemonics.opcode(MULTIANEWARRAY), desc, dims))
        if self.downstream is not None:
            self.downstream.visit_multi_anew_array_insn(desc, dims)

    # ------------------------------------------------------------------
    # metadata
    # ------------------------------------------------------------------
    def visit_try_catch_block(
        self, start: Label, end: Label, handler: Label, type_name: Optional[str]
    ) -> None:
        self._require_accumulating("visit_try_catch_block")
        operands = [self.labels.name(start), self.labels.name(end), self.labels.name(handler)]
        if type_name is not None:
            operands.append(type_name)
        self.buffer.append(instruction("TRYCATCHBLOCK", *operands))
        if self.downstream is not None:
            self.downstream.visit_try_catch_block(start, end, handler, type_name)

    def visit_local_variable(
        self,
        name: str,
        desc: str,
        signature: Optional[str],
        start: Label,
        end: Label,
        index: int,
    ) -> None:
        self._require_accumulating("visit_local_variable")
        line = instruction(
            "LOCALVARIABLE", name, desc, self.labels.name(start), self.labels.name(end), index
        )
        if signature is not None:
            line = line[:-1] + f" // signature {signature}\n"
        self.buffer.append(line)
        if self.downstream is not None:
            self.downstream.visit_local_variable(name, desc, signature, start, end, index)

    def visit_line_number(self, line: int, start: Label) -> None:
        self._require_accumulating("visit_line_number")
        self.buffer.append(instruction("LINENUMBER", line, self.labels.name(start)))
        if self.downstream is not None:
            self.downstream.visit_line_number(line, start)

    def visit_frame(
        self,
        kind: int,
        num_local: int,
        local: Sequence[Any],
        num_stack: int,
        stack: Sequence[Any],
    ) -> None:
        self._require_accumulating("visit_frame")
        name = FRAME_KIND_NAMES.get(kind)
        if name is None:
            raise ContractViolation(f"unknown frame kind {kind}")
        if len(local) < num_local and kind in (F_NEW, F_FULL, F_APPEND):
            raise ContractViolation(
                f"frame declares {num_local} local(s) but only {len(local)} were supplied"
            )
        required_stack = max(num_stack, 1) if kind == F_SAME1 else num_stack
        if len(stack) < required_stack and kind in (F_NEW, F_FULL, F_SAME1):
            raise ContractViolation(
                f"frame declares {num_stack} stack value(s) but only {len(stack)} were supplied"
            )

        operands = [name]
        if kind in (F_NEW, F_FULL):
            operands.append(format_frame_types(local, num_local, self.labels.name))
            operands.append(format_frame_types(stack, num_stack, self.labels.name))
        elif kind == F_APPEND:
            operands.append(format_frame_types(local, num_local, self.labels.name))
        elif kind == F_CHOP:
            operands.append(str(num_local))
        elif kind == F_SAME1:
            operands.append(format_frame_types(stack, 1, self.labels.name)[1:-1])
        self.buffer.append(instruction("FRAME", *operands))
        if self.downstream is not None:
            self.downstream.visit_frame(kind, num_local, local, num_stack, stack)

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------
    def _require_accumulating(self, event: str) -> None:
        if self.state is CodeState.NOT_STARTED:
            raise VisitorStateError(f"{event} received before visit_code")
        if self.state is CodeState.FINISHED:
            raise VisitorStateError(f"{event} received after the method body ended")
