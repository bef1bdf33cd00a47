"""Decode ``.class`` files and replay them as visitor events."""

from __future__ import annotations

import logging
import struct
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from .errors import ClassFormatError
from .opcodes import (
    ACC_DEPRECATED,
    ACC_SYNTHETIC,
    ALOAD_3,
    ANEWARRAY,
    ASTORE,
    ASTORE_3,
    BIPUSH,
    CHECKCAST,
    F_APPEND,
    F_CHOP,
    F_FULL,
    F_SAME,
    F_SAME1,
    GETSTATIC,
    GOTO,
    GOTO_W,
    IFEQ,
    IFNONNULL,
    IFNULL,
    IINC,
    ILOAD,
    ILOAD_0,
    INSTANCEOF,
    INVOKEDYNAMIC,
    INVOKEINTERFACE,
    INVOKEVIRTUAL,
    ISTORE,
    ISTORE_0,
    JSR,
    JSR_W,
    LDC,
    LDC2_W,
    LDC_W,
    LOOKUPSWITCH,
    MULTIANEWARRAY,
    NEW,
    NEWARRAY,
    PUTFIELD,
    RET,
    SIPUSH,
    TABLESWITCH,
    WIDE,
)
from .visitors import (
    AnnotationVisitor,
    Attribute,
    ClassVisitor,
    DynamicConstant,
    Float,
    Handle,
    Label,
    MethodVisitor,
    TypeRef,
)


logger = logging.getLogger(__name__)

MAGIC = 0xCAFEBABE

CONSTANT_UTF8 = 1
CONSTANT_INTEGER = 3
CONSTANT_FLOAT = 4
CONSTANT_LONG = 5
CONSTANT_DOUBLE = 6
CONSTANT_CLASS = 7
CONSTANT_STRING = 8
CONSTANT_FIELDREF = 9
CONSTANT_METHODREF = 10
CONSTANT_INTERFACE_METHODREF = 11
CONSTANT_NAME_AND_TYPE = 12
CONSTANT_METHOD_HANDLE = 15
CONSTANT_METHOD_TYPE = 16
CONSTANT_DYNAMIC = 17
CONSTANT_INVOKE_DYNAMIC = 18
CONSTANT_MODULE = 19
CONSTANT_PACKAGE = 20

# tag -> number of u2 references following the tag byte
_REFERENCE_CONSTANTS = {
    CONSTANT_CLASS: 1,
    CONSTANT_STRING: 1,
    CONSTANT_FIELDREF: 2,
    CONSTANT_METHODREF: 2,
    CONSTANT_INTERFACE_METHODREF: 2,
    CONSTANT_NAME_AND_TYPE: 2,
    CONSTANT_METHOD_TYPE: 1,
    CONSTANT_DYNAMIC: 2,
    CONSTANT_INVOKE_DYNAMIC: 2,
    CONSTANT_MODULE: 1,
    CONSTANT_PACKAGE: 1,
}

# Attributes consumed by the reader itself; everything else is passed through.
_CLASS_ATTRIBUTES = frozenset(
    {
        "SourceFile",
        "SourceDebugExtension",
        "EnclosingMethod",
        "InnerClasses",
        "Signature",
        "Deprecated",
        "Synthetic",
        "BootstrapMethods",
        "RuntimeVisibleAnnotations",
        "RuntimeInvisibleAnnotations",
    }
)
_FIELD_ATTRIBUTES = frozenset(
    {
        "ConstantValue",
        "Signature",
        "Deprecated",
        "Synthetic",
        "RuntimeVisibleAnnotations",
        "RuntimeInvisibleAnnotations",
    }
)
_METHOD_ATTRIBUTES = frozenset(
    {
        "Code",
        "Exceptions",
        "Signature",
        "Deprecated",
        "Synthetic",
        "AnnotationDefault",
        "RuntimeVisibleAnnotations",
        "RuntimeInvisibleAnnotations",
        "RuntimeVisibleParameterAnnotations",
        "RuntimeInvisibleParameterAnnotations",
    }
)
_CODE_ATTRIBUTES = frozenset(
    {
        "LineNumberTable",
        "LocalVariableTable",
        "LocalVariableTypeTable",
        "StackMapTable",
    }
)

# Single-byte instructions without operands.
_PLAIN_OPCODES = frozenset(
    list(range(0x00, 0x10))
    + list(range(0x2E, 0x36))
    + list(range(0x4F, 0x84))
    + list(range(0x85, 0x99))
    + list(range(0xAC, 0xB2))
    + [0xBE, 0xBF, 0xC2, 0xC3]
)


class _Cursor:
    """Big-endian reader over ``data[offset:end]``."""

    def __init__(self, data: bytes, offset: int = 0, end: Optional[int] = None) -> None:
        self.data = data
        self.offset = offset
        self.end = len(data) if end is None else end
        if not (0 <= offset <= self.end <= len(data)):
            raise ClassFormatError("structure extends beyond the end of the class file")

    def read(self, size: int) -> bytes:
        if size < 0 or self.offset + size > self.end:
            raise ClassFormatError(
                f"truncated class file: needed {size} byte(s) at offset {self.offset}"
            )
        chunk = self.data[self.offset : self.offset + size]
        self.offset += size
        return chunk

    def skip(self, size: int) -> None:
        self.read(size)

    def u1(self) -> int:
        return self.read(1)[0]

    def u2(self) -> int:
        return int.from_bytes(self.read(2), "big")

    def u4(self) -> int:
        return int.from_bytes(self.read(4), "big")

    def s1(self) -> int:
        return int.from_bytes(self.read(1), "big", signed=True)

    def s2(self) -> int:
        return int.from_bytes(self.read(2), "big", signed=True)

    def s4(self) -> int:
        return int.from_bytes(self.read(4), "big", signed=True)

    def s8(self) -> int:
        return int.from_bytes(self.read(8), "big", signed=True)

    def f4(self) -> Float:
        return Float(struct.unpack(">f", self.read(4))[0])

    def f8(self) -> float:
        return struct.unpack(">d", self.read(8))[0]

    @property
    def remaining(self) -> int:
        return self.end - self.offset


def decode_modified_utf8(raw: bytes) -> str:
    """Decode the JVM flavour of UTF-8 used by ``CONSTANT_Utf8`` entries.

    It differs from standard UTF-8 in two places: ``U+0000`` is stored as
    ``C0 80`` and supplementary characters are stored as two encoded
    surrogates.  Plain UTF-8 input takes the fast path.
    """

    if b"\xc0\x80" not in raw and b"\xed" not in raw:
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ClassFormatError(f"malformed UTF-8 constant: {exc}") from exc

    units: List[int] = []
    index = 0
    try:
        while index < len(raw):
            byte = raw[index]
            if byte < 0x80:
                units.append(byte)
                index += 1
            elif byte & 0xE0 == 0xC0:
                units.append(((byte & 0x1F) << 6) | (raw[index + 1] & 0x3F))
                index += 2
            elif byte & 0xF0 == 0xE0:
                units.append(
                    ((byte & 0x0F) << 12)
                    | ((raw[index + 1] & 0x3F) << 6)
                    | (raw[index + 2] & 0x3F)
                )
                index += 3
            else:
                raise ClassFormatError(f"invalid modified UTF-8 lead byte 0x{byte:02X}")
    except IndexError as exc:
        raise ClassFormatError("truncated modified UTF-8 sequence") from exc
    encoded = b"".join(unit.to_bytes(2, "big") for unit in units)
    return encoded.decode("utf-16-be", "surrogatepass")


class ConstantPool:
    """Indexed view over the constant pool entries of one class file."""

    def __init__(self, cursor: _Cursor) -> None:
        count = cursor.u2()
        if count == 0:
            raise ClassFormatError("constant pool count must be at least 1")
        self._entries: List[Optional[Tuple[int, Any]]] = [None] * count
        index = 1
        while index < count:
            tag = cursor.u1()
            if tag == CONSTANT_UTF8:
                value: Any = decode_modified_utf8(cursor.read(cursor.u2()))
            elif tag == CONSTANT_INTEGER:
                value = cursor.s4()
            elif tag == CONSTANT_FLOAT:
                value = cursor.f4()
            elif tag == CONSTANT_LONG:
                value = cursor.s8()
            elif tag == CONSTANT_DOUBLE:
                value = cursor.f8()
            elif tag == CONSTANT_METHOD_HANDLE:
                value = (cursor.u1(), cursor.u2())
            elif tag in _REFERENCE_CONSTANTS:
                value = tuple(cursor.u2() for _ in range(_REFERENCE_CONSTANTS[tag]))
            else:
                raise ClassFormatError(f"unknown constant pool tag {tag} at index {index}")
            self._entries[index] = (tag, value)
            # long and double constants occupy two slots
            index += 2 if tag in (CONSTANT_LONG, CONSTANT_DOUBLE) else 1
        if index != count:
            raise ClassFormatError("wide constant overruns the constant pool")
        self.bootstrap_methods: List[Tuple[int, Tuple[int, ...]]] = []

    def __len__(self) -> int:
        return len(self._entries)

    def entry(self, index: int, *tags: int) -> Tuple[int, Any]:
        if not (0 < index < len(self._entries)) or self._entries[index] is None:
            raise ClassFormatError(f"invalid constant pool index {index}")
        tag, value = self._entries[index]
        if tags and tag not in tags:
            raise ClassFormatError(
                f"constant pool index {index} has tag {tag}, expected one of {list(tags)}"
            )
        return tag, value

    def utf8(self, index: int) -> str:
        return self.entry(index, CONSTANT_UTF8)[1]

    def optional_utf8(self, index: int) -> Optional[str]:
        return self.utf8(index) if index else None

    def class_name(self, index: int) -> str:
        (name_index,) = self.entry(index, CONSTANT_CLASS)[1]
        return self.utf8(name_index)

    def optional_class_name(self, index: int) -> Optional[str]:
        return self.class_name(index) if index else None

    def name_and_type(self, index: int) -> Tuple[str, str]:
        name_index, desc_index = self.entry(index, CONSTANT_NAME_AND_TYPE)[1]
        return self.utf8(name_index), self.utf8(desc_index)

    def member_ref(self, index: int) -> Tuple[str, str, str, bool]:
        """Return ``(owner, name, desc, is_interface)`` for a field or method ref."""

        tag, (class_index, nat_index) = self.entry(
            index, CONSTANT_FIELDREF, CONSTANT_METHODREF, CONSTANT_INTERFACE_METHODREF
        )
        name, desc = self.name_and_type(nat_index)
        return self.class_name(class_index), name, desc, tag == CONSTANT_INTERFACE_METHODREF

    def handle(self, index: int) -> Handle:
        kind, reference = self.entry(index, CONSTANT_METHOD_HANDLE)[1]
        owner, name, desc, is_interface = self.member_ref(reference)
        return Handle(kind, owner, name, desc, is_interface)

    def bootstrap(self, index: int) -> Tuple[Handle, Tuple[Any, ...]]:
        if not (0 <= index < len(self.bootstrap_methods)):
            raise ClassFormatError(f"invalid bootstrap method index {index}")
        handle_index, arguments = self.bootstrap_methods[index]
        return self.handle(handle_index), tuple(self.constant(arg) for arg in arguments)

    def dynamic(self, index: int, tag: int) -> Tuple[str, str, Handle, Tuple[Any, ...]]:
        bootstrap_index, nat_index = self.entry(index, tag)[1]
        name, desc = self.name_and_type(nat_index)
        handle, arguments = self.bootstrap(bootstrap_index)
        return name, desc, handle, arguments

    def constant(self, index: int) -> Any:
        """Return the loadable constant at ``index`` as a visitor value."""

        tag, value = self.entry(index)
        if tag in (CONSTANT_INTEGER, CONSTANT_FLOAT, CONSTANT_LONG, CONSTANT_DOUBLE):
            return value
        if tag == CONSTANT_STRING:
            return self.utf8(value[0])
        if tag == CONSTANT_CLASS:
            name = self.utf8(value[0])
            return TypeRef(name if name.startswith("[") else f"L{name};")
        if tag == CONSTANT_METHOD_TYPE:
            return TypeRef(self.utf8(value[0]))
        if tag == CONSTANT_METHOD_HANDLE:
            return self.handle(index)
        if tag == CONSTANT_DYNAMIC:
            return DynamicConstant(*self.dynamic(index, CONSTANT_DYNAMIC))
        raise ClassFormatError(f"constant pool index {index} (tag {tag}) is not loadable")


# (kind, num_local, local, num_stack, stack) as passed to visit_frame
_Frame = Tuple[int, int, List[Any], int, List[Any]]


@dataclass(frozen=True)
class _RawAttribute:
    name: str
    offset: int
    length: int


@dataclass(frozen=True)
class _RawMember:
    access: int
    name: str
    desc: str
    attributes: Tuple[_RawAttribute, ...]


class ClassReader:
    """Parse a class file and drive a :class:`~classtrace.visitors.ClassVisitor`.

    The structure is validated eagerly: construction raises
    :class:`~classtrace.errors.ClassFormatError` for a bad magic number, an
    inconsistent constant pool or truncated tables.  Attribute bodies are only
    decoded when :meth:`accept` replays the class.
    """

    def __init__(self, data: bytes) -> None:
        self.data = bytes(data)
        cursor = _Cursor(self.data)
        if cursor.remaining < 10 or cursor.u4() != MAGIC:
            raise ClassFormatError("not a class file: bad magic number")
        minor = cursor.u2()
        major = cursor.u2()
        self.version = minor << 16 | major
        self.pool = ConstantPool(cursor)
        self.access = cursor.u2()
        self.class_name = self.pool.class_name(cursor.u2())
        self.super_name = self.pool.optional_class_name(cursor.u2())
        self.interfaces: List[str] = [
            self.pool.class_name(cursor.u2()) for _ in range(cursor.u2())
        ]
        self.fields = self._read_members(cursor)
        self.methods = self._read_members(cursor)
        self.attributes = self._read_attributes(cursor)
        if cursor.remaining:
            logger.warning(
                "%s: ignoring %d trailing byte(s)", self.class_name, cursor.remaining
            )
        bootstrap = self._find(self.attributes, "BootstrapMethods")
        if bootstrap is not None:
            self.pool.bootstrap_methods = self._read_bootstrap_methods(bootstrap)

    # ------------------------------------------------------------------
    # replay
    # ------------------------------------------------------------------
    def accept(self, visitor: ClassVisitor, *, skip_debug: bool = False) -> None:
        """Replay the class as events on ``visitor``.

        With ``skip_debug`` the source file, line numbers and local variable
        tables are not reported.
        """

        attributes = self.attributes
        signature = self._signature(attributes)
        access = self.access | self._pseudo_access(attributes)
        visitor.visit(
            self.version,
            access,
            self.class_name,
            signature,
            self.super_name,
            list(self.interfaces),
        )

        if not skip_debug:
            source_attr = self._find(attributes, "SourceFile")
            debug_attr = self._find(attributes, "SourceDebugExtension")
            source = self.pool.utf8(self._cursor(source_attr).u2()) if source_attr else None
            debug = None
            if debug_attr is not None:
                debug = decode_modified_utf8(self._slice(debug_attr))
            if source is not None or debug is not None:
                visitor.visit_source(source, debug)

        enclosing = self._find(attributes, "EnclosingMethod")
        if enclosing is not None:
            cursor = self._cursor(enclosing)
            owner = self.pool.class_name(cursor.u2())
            nat_index = cursor.u2()
            name, desc = self.pool.name_and_type(nat_index) if nat_index else (None, None)
            visitor.visit_outer_class(owner, name, desc)

        self._accept_annotations(visitor, attributes)
        self._accept_attributes(visitor, attributes, _CLASS_ATTRIBUTES)

        inner = self._find(attributes, "InnerClasses")
        if inner is not None:
            cursor = self._cursor(inner)
            for _ in range(cursor.u2()):
                name = self.pool.class_name(cursor.u2())
                outer_name = self.pool.optional_class_name(cursor.u2())
                inner_name = self.pool.optional_utf8(cursor.u2())
                visitor.visit_inner_class(name, outer_name, inner_name, cursor.u2())

        for field in self.fields:
            self._accept_field(visitor, field)
        for method in self.methods:
            self._accept_method(visitor, method, skip_debug)
        visitor.visit_end()

    def _accept_field(self, visitor: ClassVisitor, field: _RawMember) -> None:
        attributes = field.attributes
        value = None
        constant = self._find(attributes, "ConstantValue")
        if constant is not None:
            value = self.pool.constant(self._cursor(constant).u2())
        member = visitor.visit_field(
            field.access | self._pseudo_access(attributes),
            field.name,
            field.desc,
            self._signature(attributes),
            value,
        )
        if member is None:
            return
        self._accept_annotations(member, attributes)
        self._accept_attributes(member, attributes, _FIELD_ATTRIBUTES)
        member.visit_end()

    def _accept_method(
        self, visitor: ClassVisitor, method: _RawMember, skip_debug: bool
    ) -> None:
        attributes = method.attributes
        exceptions: List[str] = []
        exceptions_attr = self._find(attributes, "Exceptions")
        if exceptions_attr is not None:
            cursor = self._cursor(exceptions_attr)
            exceptions = [self.pool.class_name(cursor.u2()) for _ in range(cursor.u2())]
        member = visitor.visit_method(
            method.access | self._pseudo_access(attributes),
            method.name,
            method.desc,
            self._signature(attributes),
            exceptions,
        )
        if member is None:
            return

        default = self._find(attributes, "AnnotationDefault")
        if default is not None:
            annotation = member.visit_annotation_default()
            self._read_element_value(self._cursor(default), None, annotation)
            if annotation is not None:
                annotation.visit_end()
        self._accept_annotations(member, attributes)
        for attr_name, visible in (
            ("RuntimeVisibleParameterAnnotations", True),
            ("RuntimeInvisibleParameterAnnotations", False),
        ):
            attribute = self._find(attributes, attr_name)
            if attribute is None:
                continue
            cursor = self._cursor(attribute)
            for parameter in range(cursor.u1()):
                for _ in range(cursor.u2()):
                    desc = self.pool.utf8(cursor.u2())
                    annotation = member.visit_parameter_annotation(parameter, desc, visible)
                    self._read_annotation_body(cursor, annotation)
        self._accept_attributes(member, attributes, _METHOD_ATTRIBUTES)

        code = self._find(attributes, "Code")
        if code is not None:
            self._accept_code(member, code, skip_debug)
        member.visit_end()

    # ------------------------------------------------------------------
    # code
    # ------------------------------------------------------------------
    def _accept_code(
        self, visitor: MethodVisitor, attribute: _RawAttribute, skip_debug: bool
    ) -> None:
        cursor = self._cursor(attribute)
        max_stack = cursor.u2()
        max_locals = cursor.u2()
        code_length = cursor.u4()
        code_start = cursor.offset
        cursor.skip(code_length)

        labels: Dict[int, Label] = {}

        def label_at(offset: int) -> Label:
            if not (0 <= offset <= code_length):
                raise ClassFormatError(
                    f"branch target {offset} outside code of {code_length} byte(s)"
                )
            label = labels.get(offset)
            if label is None:
                label = labels[offset] = Label(offset)
            return label

        instructions = self._decode_instructions(code_start, code_length, label_at)

        handlers = []
        for _ in range(cursor.u2()):
            start, end, handler = cursor.u2(), cursor.u2(), cursor.u2()
            catch_type = self.pool.optional_class_name(cursor.u2())
            handlers.append((label_at(start), label_at(end), label_at(handler), catch_type))

        line_numbers: Dict[int, List[int]] = {}
        local_variables: List[Tuple[str, str, int, int, int]] = []
        local_signatures: Dict[Tuple[int, int, int], str] = {}
        frames: Dict[int, _Frame] = {}
        extra: List[_RawAttribute] = []
        for sub in self._read_attributes(cursor):
            body = self._cursor(sub)
            if sub.name == "LineNumberTable" and not skip_debug:
                for _ in range(body.u2()):
                    start = body.u2()
                    label_at(start)
                    line_numbers.setdefault(start, []).append(body.u2())
            elif sub.name == "LocalVariableTable" and not skip_debug:
                for _ in range(body.u2()):
                    start, length = body.u2(), body.u2()
                    name, desc = self.pool.utf8(body.u2()), self.pool.utf8(body.u2())
                    label_at(start)
                    label_at(start + length)
                    local_variables.append((name, desc, start, length, body.u2()))
            elif sub.name == "LocalVariableTypeTable" and not skip_debug:
                for _ in range(body.u2()):
                    start, length = body.u2(), body.u2()
                    body.u2()
                    signature = self.pool.utf8(body.u2())
                    local_signatures[(start, length, body.u2())] = signature
            elif sub.name == "StackMapTable":
                frames.update(self._read_stack_map(body, label_at))
            elif sub.name not in _CODE_ATTRIBUTES:
                extra.append(sub)

        for offset in sorted(frames):
            if offset not in instructions:
                logger.warning(
                    "%s: dropping stack map frame at offset %d, not an instruction boundary",
                    self.class_name,
                    offset,
                )
                del frames[offset]

        self._accept_attributes(visitor, extra, _CODE_ATTRIBUTES)
        visitor.visit_code()
        for handler in handlers:
            visitor.visit_try_catch_block(*handler)
        for offset, (method_name, args) in instructions.items():
            label = labels.get(offset)
            if label is not None:
                visitor.visit_label(label)
                for line in line_numbers.get(offset, ()):
                    visitor.visit_line_number(line, label)
            if offset in frames:
                visitor.visit_frame(*frames[offset])
            getattr(visitor, method_name)(*args)
        if code_length in labels:
            visitor.visit_label(labels[code_length])
        for name, desc, start, length, index in local_variables:
            visitor.visit_local_variable(
                name,
                desc,
                local_signatures.get((start, length, index)),
                labels[start],
                labels[start + length],
                index,
            )
        visitor.visit_maxs(max_stack, max_locals)

    def _decode_instructions(
        self, code_start: int, code_length: int, label_at: Callable[[int], Label]
    ) -> Dict[int, Tuple[str, Tuple[Any, ...]]]:
        """Decode a method body into ``offset -> (visitor method, arguments)``."""

        pool = self.pool
        cursor = _Cursor(self.data, code_start, code_start + code_length)
        decoded: Dict[int, Tuple[str, Tuple[Any, ...]]] = {}
        while cursor.remaining:
            offset = cursor.offset - code_start
            opcode = cursor.u1()
            if opcode in _PLAIN_OPCODES:
                entry: Tuple[str, Tuple[Any, ...]] = ("visit_insn", (opcode,))
            elif opcode == BIPUSH:
                entry = ("visit_int_insn", (opcode, cursor.s1()))
            elif opcode == SIPUSH:
                entry = ("visit_int_insn", (opcode, cursor.s2()))
            elif opcode == NEWARRAY:
                entry = ("visit_int_insn", (opcode, cursor.u1()))
            elif opcode == LDC:
                entry = ("visit_ldc_insn", (pool.constant(cursor.u1()),))
            elif opcode in (LDC_W, LDC2_W):
                entry = ("visit_ldc_insn", (pool.constant(cursor.u2()),))
            elif ILOAD <= opcode < ILOAD_0 or ISTORE <= opcode <= ASTORE or opcode == RET:
                entry = ("visit_var_insn", (opcode, cursor.u1()))
            elif ILOAD_0 <= opcode <= ALOAD_3:
                base, var = divmod(opcode - ILOAD_0, 4)
                entry = ("visit_var_insn", (ILOAD + base, var))
            elif ISTORE_0 <= opcode <= ASTORE_3:
                base, var = divmod(opcode - ISTORE_0, 4)
                entry = ("visit_var_insn", (ISTORE + base, var))
            elif opcode == IINC:
                entry = ("visit_iinc_insn", (cursor.u1(), cursor.s1()))
            elif IFEQ <= opcode <= JSR or opcode in (IFNULL, IFNONNULL):
                entry = ("visit_jump_insn", (opcode, label_at(offset + cursor.s2())))
            elif opcode in (GOTO_W, JSR_W):
                target = label_at(offset + cursor.s4())
                entry = ("visit_jump_insn", (GOTO if opcode == GOTO_W else JSR, target))
            elif opcode in (TABLESWITCH, LOOKUPSWITCH):
                cursor.skip((4 - (offset + 1) % 4) % 4)
                default = label_at(offset + cursor.s4())
                if opcode == TABLESWITCH:
                    low, high = cursor.s4(), cursor.s4()
                    if high < low:
                        raise ClassFormatError(f"TABLESWITCH at {offset} has high < low")
                    targets = [label_at(offset + cursor.s4()) for _ in range(high - low + 1)]
                    entry = ("visit_table_switch_insn", (low, high, default, targets))
                else:
                    keys: List[int] = []
                    targets = []
                    for _ in range(cursor.s4()):
                        keys.append(cursor.s4())
                        targets.append(label_at(offset + cursor.s4()))
                    entry = ("visit_lookup_switch_insn", (default, keys, targets))
            elif GETSTATIC <= opcode <= PUTFIELD:
                owner, name, desc, _ = pool.member_ref(cursor.u2())
                entry = ("visit_field_insn", (opcode, owner, name, desc))
            elif INVOKEVIRTUAL <= opcode <= INVOKEINTERFACE:
                owner, name, desc, is_interface = pool.member_ref(cursor.u2())
                if opcode == INVOKEINTERFACE:
                    cursor.skip(2)
                entry = ("visit_method_insn", (opcode, owner, name, desc, is_interface))
            elif opcode == INVOKEDYNAMIC:
                name, desc, handle, arguments = pool.dynamic(cursor.u2(), CONSTANT_INVOKE_DYNAMIC)
                cursor.skip(2)
                entry = ("visit_invoke_dynamic_insn", (name, desc, handle, arguments))
            elif opcode in (NEW, ANEWARRAY, CHECKCAST, INSTANCEOF):
                entry = ("visit_type_insn", (opcode, pool.class_name(cursor.u2())))
            elif opcode == WIDE:
                widened = cursor.u1()
                if widened == IINC:
                    entry = ("visit_iinc_insn", (cursor.u2(), cursor.s2()))
                elif ILOAD <= widened < ILOAD_0 or ISTORE <= widened <= ASTORE or widened == RET:
                    entry = ("visit_var_insn", (widened, cursor.u2()))
                else:
                    raise ClassFormatError(f"WIDE cannot modify opcode 0x{widened:02X} at {offset}")
            elif opcode == MULTIANEWARRAY:
                entry = ("visit_multi_anew_array_insn", (pool.class_name(cursor.u2()), cursor.u1()))
            else:
                raise ClassFormatError(f"invalid opcode 0x{opcode:02X} at offset {offset}")
            decoded[offset] = entry
        return decoded

    def _read_stack_map(
        self, cursor: _Cursor, label_at: Callable[[int], Label]
    ) -> Dict[int, _Frame]:
        frames: Dict[int, _Frame] = {}
        offset = -1
        for _ in range(cursor.u2()):
            frame_type = cursor.u1()
            if frame_type < 64:
                delta = frame_type
                frame: _Frame = (F_SAME, 0, [], 0, [])
            elif frame_type < 128:
                delta = frame_type - 64
                frame = (F_SAME1, 0, [], 1, [self._verification_type(cursor, label_at)])
            elif frame_type < 247:
                raise ClassFormatError(f"reserved stack map frame type {frame_type}")
            elif frame_type == 247:
                delta = cursor.u2()
                frame = (F_SAME1, 0, [], 1, [self._verification_type(cursor, label_at)])
            elif frame_type < 251:
                delta = cursor.u2()
                frame = (F_CHOP, 251 - frame_type, [], 0, [])
            elif frame_type == 251:
                delta = cursor.u2()
                frame = (F_SAME, 0, [], 0, [])
            elif frame_type < 255:
                delta = cursor.u2()
                count = frame_type - 251
                local = [self._verification_type(cursor, label_at) for _ in range(count)]
                frame = (F_APPEND, count, local, 0, [])
            else:
                delta = cursor.u2()
                local = [self._verification_type(cursor, label_at) for _ in range(cursor.u2())]
                stack = [self._verification_type(cursor, label_at) for _ in range(cursor.u2())]
                frame = (F_FULL, len(local), local, len(stack), stack)
            offset += delta + 1
            frames[offset] = frame
        return frames

    def _verification_type(self, cursor: _Cursor, label_at: Callable[[int], Label]) -> Any:
        tag = cursor.u1()
        if tag <= 6:
            return tag
        if tag == 7:
            return self.pool.class_name(cursor.u2())
        if tag == 8:
            return label_at(cursor.u2())
        raise ClassFormatError(f"unknown verification type tag {tag}")

    # ------------------------------------------------------------------
    # annotations
    # ------------------------------------------------------------------
    def _accept_annotations(self, visitor: Any, attributes: Sequence[_RawAttribute]) -> None:
        for attr_name, visible in (
            ("RuntimeVisibleAnnotations", True),
            ("RuntimeInvisibleAnnotations", False),
        ):
            attribute = self._find(attributes, attr_name)
            if attribute is None:
                continue
            cursor = self._cursor(attribute)
            for _ in range(cursor.u2()):
                desc = self.pool.utf8(cursor.u2())
                self._read_annotation_body(cursor, visitor.visit_annotation(desc, visible))

    def _read_annotation_body(self, cursor: _Cursor, visitor: Optional[AnnotationVisitor]) -> None:
        for _ in range(cursor.u2()):
            name = self.pool.utf8(cursor.u2())
            self._read_element_value(cursor, name, visitor)
        if visitor is not None:
            visitor.visit_end()

    def _read_element_value(
        self, cursor: _Cursor, name: Optional[str], visitor: Optional[AnnotationVisitor]
    ) -> None:
        tag = chr(cursor.u1())
        pool = self.pool
        if tag in "BIJSDFs":
            value = pool.constant(cursor.u2()) if tag != "s" else pool.utf8(cursor.u2())
            if visitor is not None:
                visitor.visit(name, value)
        elif tag == "C":
            value = pool.constant(cursor.u2())
            if visitor is not None:
                visitor.visit(name, chr(value))
        elif tag == "Z":
            value = pool.constant(cursor.u2())
            if visitor is not None:
                visitor.visit(name, bool(value))
        elif tag == "e":
            desc = pool.utf8(cursor.u2())
            constant = pool.utf8(cursor.u2())
            if visitor is not None:
                visitor.visit_enum(name, desc, constant)
        elif tag == "c":
            value = TypeRef(pool.utf8(cursor.u2()))
            if visitor is not None:
                visitor.visit(name, value)
        elif tag == "@":
            desc = pool.utf8(cursor.u2())
            nested = visitor.visit_annotation(name, desc) if visitor is not None else None
            self._read_annotation_body(cursor, nested)
        elif tag == "[":
            array = visitor.visit_array(name) if visitor is not None else None
            for _ in range(cursor.u2()):
                self._read_element_value(cursor, None, array)
            if array is not None:
                array.visit_end()
        else:
            raise ClassFormatError(f"unknown annotation element tag {tag!r}")

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------
    def _read_members(self, cursor: _Cursor) -> List[_RawMember]:
        members: List[_RawMember] = []
        for _ in range(cursor.u2()):
            access = cursor.u2()
            name = self.pool.utf8(cursor.u2())
            desc = self.pool.utf8(cursor.u2())
            members.append(_RawMember(access, name, desc, tuple(self._read_attributes(cursor))))
        return members

    def _read_attributes(self, cursor: _Cursor) -> List[_RawAttribute]:
        attributes: List[_RawAttribute] = []
        for _ in range(cursor.u2()):
            name = self.pool.utf8(cursor.u2())
            length = cursor.u4()
            attributes.append(_RawAttribute(name, cursor.offset, length))
            cursor.skip(length)
        return attributes

    def _read_bootstrap_methods(
        self, attribute: _RawAttribute
    ) -> List[Tuple[int, Tuple[int, ...]]]:
        cursor = self._cursor(attribute)
        methods: List[Tuple[int, Tuple[int, ...]]] = []
        for _ in range(cursor.u2()):
            handle_index = cursor.u2()
            methods.append((handle_index, tuple(cursor.u2() for _ in range(cursor.u2()))))
        return methods

    def _accept_attributes(
        self, visitor: Any, attributes: Sequence[_RawAttribute], known: frozenset
    ) -> None:
        for attribute in attributes:
            if attribute.name in known:
                continue
            logger.debug(
                "%s: passing through attribute %s (%d bytes)",
                self.class_name,
                attribute.name,
                attribute.length,
            )
            visitor.visit_attribute(Attribute(attribute.name, self._slice(attribute)))

    def _signature(self, attributes: Sequence[_RawAttribute]) -> Optional[str]:
        attribute = self._find(attributes, "Signature")
        if attribute is None:
            return None
        return self.pool.utf8(self._cursor(attribute).u2())

    def _pseudo_access(self, attributes: Sequence[_RawAttribute]) -> int:
        access = 0
        if self._find(attributes, "Deprecated") is not None:
            access |= ACC_DEPRECATED
        if self._find(attributes, "Synthetic") is not None:
            access |= ACC_SYNTHETIC
        return access

    @staticmethod
    def _find(attributes: Sequence[_RawAttribute], name: str) -> Optional[_RawAttribute]:
        for attribute in attributes:
            if attribute.name == name:
                return attribute
        return None

    def _cursor(self, attribute: _RawAttribute) -> _Cursor:
        return _Cursor(self.data, attribute.offset, attribute.offset + attribute.length)

    def _slice(self, attribute: _RawAttribute) -> bytes:
        return self.data[attribute.offset : attribute.offset + attribute.length]
