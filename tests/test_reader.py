import io
import struct

import pytest

from classtrace import ClassDisassembler, ClassReader, TraceClassVisitor
from classtrace.errors import ClassFormatError
from classtrace.opcodes import ACC_DEPRECATED, F_SAME, GETSTATIC, INVOKEVIRTUAL, RETURN
from classtrace.reader import decode_modified_utf8
from classtrace.recorder import EventRecorder
from classtrace.visitors import Attribute, Float, TypeRef


def _u1(value: int) -> bytes:
    return value.to_bytes(1, "big")


def _u2(value: int) -> bytes:
    return value.to_bytes(2, "big")


def _u4(value: int) -> bytes:
    return value.to_bytes(4, "big")


class ClassFileBuilder:
    """Assemble minimal class files for reader tests."""

    def __init__(self, name: str, *, version: int = 52, access: int = 0x21,
                 super_name: str = "java/lang/Object") -> None:
        self.name = name
        self.version = version
        self.access = access
        self.super_name = super_name
        self.entries = []
        self.index = {}
        self.fields = []
        self.methods = []
        self.attributes = []

    def _constant(self, payload: bytes) -> int:
        if payload not in self.index:
            self.entries.append(payload)
            self.index[payload] = len(self.entries)
        return self.index[payload]

    def utf8(self, text: str) -> int:
        raw = text.encode("utf-8")
        return self._constant(_u1(1) + _u2(len(raw)) + raw)

    def integer(self, value: int) -> int:
        return self._constant(_u1(3) + value.to_bytes(4, "big", signed=True))

    def float32(self, value: float) -> int:
        return self._constant(_u1(4) + struct.pack(">f", value))

    def class_ref(self, name: str) -> int:
        return self._constant(_u1(7) + _u2(self.utf8(name)))

    def string(self, text: str) -> int:
        return self._constant(_u1(8) + _u2(self.utf8(text)))

    def name_and_type(self, name: str, desc: str) -> int:
        return self._constant(_u1(12) + _u2(self.utf8(name)) + _u2(self.utf8(desc)))

    def field_ref(self, owner: str, name: str, desc: str) -> int:
        return self._constant(
            _u1(9) + _u2(self.class_ref(owner)) + _u2(self.name_and_type(name, desc))
        )

    def method_ref(self, owner: str, name: str, desc: str) -> int:
        return self._constant(
            _u1(10) + _u2(self.class_ref(owner)) + _u2(self.name_and_type(name, desc))
        )

    def attribute(self, name: str, body: bytes) -> bytes:
        return _u2(self.utf8(name)) + _u4(len(body)) + body

    def code(self, max_stack: int, max_locals: int, code: bytes, attributes=()) -> bytes:
        body = _u2(max_stack) + _u2(max_locals) + _u4(len(code)) + code
        body += _u2(0)
        body += _u2(len(attributes)) + b"".join(attributes)
        return self.attribute("Code", body)

    def add_field(self, access: int, name: str, desc: str, attributes=()) -> None:
        self.fields.append(self._member(access, name, desc, attributes))

    def add_method(self, access: int, name: str, desc: str, attributes=()) -> None:
        self.methods.append(self._member(access, name, desc, attributes))

    def _member(self, access, name, desc, attributes) -> bytes:
        return (
            _u2(access)
            + _u2(self.utf8(name))
            + _u2(self.utf8(desc))
            + _u2(len(attributes))
            + b"".join(attributes)
        )

    def build(self) -> bytes:
        this_index = self.class_ref(self.name)
        super_index = self.class_ref(self.super_name)
        body = (
            _u2(self.access)
            + _u2(this_index)
            + _u2(super_index)
            + _u2(0)
            + _u2(len(self.fields))
            + b"".join(self.fields)
            + _u2(len(self.methods))
            + b"".join(self.methods)
            + _u2(len(self.attributes))
            + b"".join(self.attributes)
        )
        pool = _u2(len(self.entries) + 1) + b"".join(self.entries)
        return _u4(0xCAFEBABE) + _u2(0) + _u2(self.version) + pool + body


def _hello_class() -> bytes:
    builder = ClassFileBuilder("Hello", version=49)
    code = (
        _u1(GETSTATIC)
        + _u2(builder.field_ref("java/lang/System", "out", "Ljava/io/PrintStream;"))
        + _u1(0x12)
        + _u1(builder.string("hello"))
        + _u1(INVOKEVIRTUAL)
        + _u2(builder.method_ref("java/io/PrintStream", "println", "(Ljava/lang/String;)V"))
        + _u1(RETURN)
    )
    builder.add_method(0x9, "main", "([Ljava/lang/String;)V", [builder.code(2, 1, code)])
    builder.attributes.append(builder.attribute("SourceFile", _u2(builder.utf8("Hello.java"))))
    return builder.build()


def _branching_class() -> bytes:
    builder = ClassFileBuilder("demo/Branch")
    code = bytes(
        [
            0x1B,              # 0: ILOAD_1
            0x99, 0x00, 0x05,  # 1: IFEQ +5
            0x04,              # 4: ICONST_1
            0xAC,              # 5: IRETURN
            0x03,              # 6: ICONST_0
            0xAC,              # 7: IRETURN
        ]
    )
    lines = builder.attribute(
        "LineNumberTable", _u2(2) + _u2(0) + _u2(10) + _u2(6) + _u2(12)
    )
    frames = builder.attribute("StackMapTable", _u2(1) + _u1(6))
    builder.add_method(
        0x9, "pick", "(I)I", [builder.code(1, 2, code, [lines, frames])]
    )
    builder.add_field(
        0x19, "COUNT", "I",
        [
            builder.attribute("ConstantValue", _u2(builder.integer(3))),
            builder.attribute("Deprecated", b""),
        ],
    )
    builder.attributes.append(builder.attribute("SourceFile", _u2(builder.utf8("Branch.java"))))
    builder.attributes.append(builder.attribute("Custom", b"\x01\x02\x03"))
    return builder.build()


BRANCH_CODE = (
    "   L0\n"
    "    LINENUMBER 10 L0\n"
    "    ILOAD 1\n"
    "    IFEQ L1\n"
    "    ICONST_1\n"
    "    IRETURN\n"
    "   L1\n"
    "    LINENUMBER 12 L1\n"
    "    FRAME SAME\n"
    "    ICONST_0\n"
    "    IRETURN\n"
    "    MAXSTACK = 1\n"
    "    MAXLOCALS = 2\n"
)


def test_reader_exposes_header():
    reader = ClassReader(_hello_class())

    assert reader.version == 49
    assert reader.access == 0x21
    assert reader.class_name == "Hello"
    assert reader.super_name == "java/lang/Object"
    assert reader.interfaces == []


def test_hello_class_listing():
    listing = ClassDisassembler().generate_listing(_hello_class())

    assert listing == (
        "// class version 49.0 (49)\n"
        "// access flags 0x21\n"
        "public class Hello {\n"
        "\n"
        "  // compiled from: Hello.java\n"
        "\n"
        "  // access flags 0x9\n"
        "  public static main ([Ljava/lang/String;)V\n"
        "    GETSTATIC java/lang/System out Ljava/io/PrintStream;\n"
        '    LDC "hello"\n'
        "    INVOKEVIRTUAL java/io/PrintStream println (Ljava/lang/String;)V\n"
        "    RETURN\n"
        "    MAXSTACK = 2\n"
        "    MAXLOCALS = 1\n"
        "}\n"
    )


def test_branches_lines_and_frames():
    listing = ClassDisassembler().generate_listing(_branching_class())

    assert BRANCH_CODE in listing
    assert "  // DEPRECATED\n  // access flags 0x19\n  public final static I COUNT = 3\n" in listing
    assert "\n  ATTRIBUTE Custom : 3 byte(s)\n" in listing


def test_skip_debug_drops_source_and_lines():
    listing = ClassDisassembler().generate_listing(_branching_class(), skip_debug=True)

    assert "compiled from" not in listing
    assert "LINENUMBER" not in listing
    assert "   L0\n    FRAME SAME\n" in listing


def test_reader_event_order():
    recorder = EventRecorder()
    ClassReader(_branching_class()).accept(recorder)
    names = [(event.scope, event.name) for event in recorder.events]

    assert names[:3] == [
        ("class", "visit"),
        ("class", "visit_source"),
        ("class", "visit_attribute"),
    ]
    assert recorder.events[2].args == (Attribute("Custom", b"\x01\x02\x03"),)
    field_event = recorder.events[3]
    assert field_event.name == "visit_field"
    assert field_event.args == (0x19 | ACC_DEPRECATED, "COUNT", "I", None, 3)

    method_names = [name for scope, name in names if scope == "method"]
    assert method_names == [
        "visit_code",
        "visit_label",
        "visit_line_number",
        "visit_var_insn",
        "visit_jump_insn",
        "visit_insn",
        "visit_insn",
        "visit_label",
        "visit_line_number",
        "visit_frame",
        "visit_insn",
        "visit_insn",
        "visit_maxs",
        "visit_end",
    ]
    frame = next(event for event in recorder.events if event.name == "visit_frame")
    assert frame.args == (F_SAME, 0, [], 0, [])
    assert names[-1] == ("class", "visit_end")


def test_float_constants_keep_single_precision():
    builder = ClassFileBuilder("demo/Rates")
    for name, value in (("RATE", 0.1), ("LIMIT", float("inf")), ("UNKNOWN", float("nan"))):
        constant = builder.attribute("ConstantValue", _u2(builder.float32(value)))
        builder.add_field(0x19, name, "F", [constant])
    data = builder.build()

    listing = ClassDisassembler().generate_listing(data)
    recorder = EventRecorder()
    ClassReader(data).accept(recorder)
    rate = next(event for event in recorder.events if event.name == "visit_field")

    assert "  public final static F RATE = 0.1\n" in listing
    assert "  public final static F LIMIT = Infinity\n" in listing
    assert "  public final static F UNKNOWN = NaN\n" in listing
    assert isinstance(rate.args[4], Float)
    assert rate.args[4] == struct.unpack(">f", struct.pack(">f", 0.1))[0]


def test_unknown_code_attributes_are_passed_through():
    builder = ClassFileBuilder("demo/Commented")
    comment = builder.attribute("CodeComment", b"note")
    builder.add_method(0x1, "m", "()V", [builder.code(0, 1, _u1(RETURN), [comment])])
    recorder = EventRecorder()
    sink = io.StringIO()

    ClassReader(builder.build()).accept(TraceClassVisitor(recorder, sink))

    method_events = [(event.name, event.args) for event in recorder.events
                     if event.scope == "method"]
    assert method_events[:2] == [
        ("visit_attribute", (Attribute("CodeComment", b"note"),)),
        ("visit_code", ()),
    ]
    assert "  public m ()V\n\n  ATTRIBUTE CodeComment : 4 byte(s)\n    RETURN\n" in sink.getvalue()


def test_class_constant_loads_as_type():
    builder = ClassFileBuilder("demo/Types")
    code = _u1(0x13) + _u2(builder.class_ref("java/lang/String")) + _u1(0x57) + _u1(RETURN)
    builder.add_method(0x8, "f", "()V", [builder.code(1, 0, code)])
    recorder = EventRecorder()

    ClassReader(builder.build()).accept(recorder)

    ldc = next(event for event in recorder.events if event.name == "visit_ldc_insn")
    assert ldc.args == (TypeRef("Ljava/lang/String;"),)


def test_rejects_bad_magic():
    with pytest.raises(ClassFormatError, match="magic"):
        ClassReader(b"\x00" * 32)


def test_rejects_truncated_class():
    data = _hello_class()

    with pytest.raises(ClassFormatError, match="truncated"):
        ClassReader(data[:-5])


def test_rejects_invalid_opcode():
    builder = ClassFileBuilder("demo/Bad")
    builder.add_method(0x8, "f", "()V", [builder.code(0, 0, b"\xcb")])
    reader = ClassReader(builder.build())

    with pytest.raises(ClassFormatError, match="invalid opcode"):
        reader.accept(EventRecorder())


def test_rejects_branch_outside_code():
    builder = ClassFileBuilder("demo/Jump")
    builder.add_method(0x8, "f", "()V", [builder.code(0, 0, b"\xa7\x00\x40")])

    with pytest.raises(ClassFormatError, match="outside code"):
        ClassReader(builder.build()).accept(EventRecorder())


def test_modified_utf8_decoding():
    assert decode_modified_utf8(b"plain") == "plain"
    assert decode_modified_utf8(b"a\xc0\x80b") == "a\x00b"
    assert decode_modified_utf8(b"\xed\xa0\xbd\xed\xb8\x80") == "\U0001F600"
    with pytest.raises(ClassFormatError):
        decode_modified_utf8(b"\xe0\x80")
