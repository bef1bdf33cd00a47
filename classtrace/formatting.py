"""Pure helpers rendering single structural events into listing lines."""

from __future__ import annotations

import math
import struct
from typing import Any, Callable, List, Optional, Sequence

from .opcodes import (
    ACC_ABSTRACT,
    ACC_BRIDGE,
    ACC_DEPRECATED,
    ACC_ENUM,
    ACC_FINAL,
    ACC_INTERFACE,
    ACC_NATIVE,
    ACC_PRIVATE,
    ACC_PROTECTED,
    ACC_PUBLIC,
    ACC_STATIC,
    ACC_STRICT,
    ACC_SUPER,
    ACC_SYNCHRONIZED,
    ACC_TRANSIENT,
    ACC_VARARGS,
    ACC_VOLATILE,
    HANDLE_KIND_NAMES,
    OBJECT_CLASS,
    VERIFICATION_TYPE_NAMES,
)
from .visitors import DynamicConstant, Float, Handle, TypeRef

MEMBER_INDENT = "  "
LABEL_INDENT = "   "
INSN_INDENT = "    "
CASE_INDENT = "      "

_VISIBILITY = (
    (ACC_PUBLIC, "public"),
    (ACC_PRIVATE, "private"),
    (ACC_PROTECTED, "protected"),
)

_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\b": "\\b",
    "\f": "\\f",
}


def format_access(access: int, kind: str = "field") -> str:
    """Return the modifiers of ``access`` in source order, each followed by a space.

    ``kind`` is one of ``"class"``, ``"field"`` or ``"method"``.  Bits 0x20,
    0x40 and 0x80 change meaning between kinds: fields render them as
    ``volatile``/``transient``, methods as ``synchronized``/``bridge``/
    ``varargs`` (plus ``native``), classes not at all.
    """

    words: List[str] = [word for flag, word in _VISIBILITY if access & flag]
    if access & ACC_FINAL:
        words.append("final")
    if access & ACC_STATIC:
        words.append("static")
    if kind == "method":
        if access & ACC_SYNCHRONIZED:
            words.append("synchronized")
        if access & ACC_BRIDGE:
            words.append("bridge")
        if access & ACC_VARARGS:
            words.append("varargs")
        if access & ACC_NATIVE:
            words.append("native")
    elif kind == "field":
        if access & ACC_VOLATILE:
            words.append("volatile")
        if access & ACC_TRANSIENT:
            words.append("transient")
    if access & ACC_ABSTRACT:
        words.append("abstract")
    if access & ACC_STRICT:
        words.append("strictfp")
    return "".join(f"{word} " for word in words)


def describe_version(version: int) -> str:
    major = version & 0xFFFF
    minor = version >> 16
    return f"{major}.{minor} ({version})"


def quote(text: str) -> str:
    """Return ``text`` as a double-quoted Java string literal."""

    parts = ['"']
    for char in text:
        escaped = _ESCAPES.get(char)
        if escaped is not None:
            parts.append(escaped)
        elif ord(char) < 0x20 or 0x7F <= ord(char) < 0xA0:
            parts.append(f"\\u{ord(char):04x}")
        else:
            parts.append(char)
    parts.append('"')
    return "".join(parts)


def format_handle(handle: Handle) -> str:
    kind = HANDLE_KIND_NAMES.get(handle.tag, str(handle.tag))
    text = f"{kind} {handle.owner} {handle.name} {handle.desc}"
    if handle.is_interface:
        text += " itf"
    return text


def _single_precision(value: float) -> str:
    packed = struct.pack(">f", value)
    for digits in range(1, 10):
        text = f"{value:.{digits}g}"
        try:
            if struct.pack(">f", float(text)) == packed:
                return repr(float(text))
        except OverflowError:
            continue
    return repr(value)


def format_number(value: float) -> str:
    """Render a float or double, spelling the special values as Java does."""

    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if isinstance(value, Float):
        return _single_precision(value)
    return repr(value)


def format_value(value: Any) -> str:
    """Render a constant: strings quoted, class literals as ``desc.class``."""

    if isinstance(value, str):
        return quote(value)
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return format_number(value)
    if isinstance(value, TypeRef):
        if value.descriptor.startswith("("):
            return value.descriptor
        return f"{value.descriptor}.class"
    if isinstance(value, Handle):
        return format_handle(value)
    if isinstance(value, DynamicConstant):
        arguments = [format_handle(value.bootstrap)]
        arguments.extend(format_value(argument) for argument in value.bootstrap_args)
        return f"{value.name} : {value.desc} [" + ", ".join(arguments) + "]"
    if isinstance(value, (list, tuple)):
        return "{" + ", ".join(format_value(item) for item in value) + "}"
    return repr(value)


def format_frame_types(
    items: Sequence[Any], count: int, label_name: Callable[[Any], str]
) -> str:
    """Render verification types of a stack map frame as ``[I java/lang/String]``."""

    rendered: List[str] = []
    for item in items[:count]:
        if isinstance(item, str):
            rendered.append(item)
        elif isinstance(item, int):
            rendered.append(VERIFICATION_TYPE_NAMES.get(item, str(item)))
        else:
            rendered.append(label_name(item))
    return "[" + " ".join(rendered) + "]"


def format_class_header(
    version: int,
    access: int,
    name: str,
    signature: Optional[str],
    super_name: Optional[str],
    interfaces: Sequence[str],
) -> str:
    lines = [f"// class version {describe_version(version)}\n"]
    if access & ACC_DEPRECATED:
        lines.append("// DEPRECATED\n")
    lines.append(f"// access flags 0x{access & 0xFFFF:X}\n")

    declaration = format_access(access & ~ACC_SUPER, "class")
    if access & ACC_INTERFACE:
        declaration += "interface "
    elif access & ACC_ENUM:
        declaration += "enum "
    else:
        declaration += "class "
    declaration += f"{name} "
    if super_name and super_name != OBJECT_CLASS:
        declaration += f"extends {super_name} "
    if interfaces:
        declaration += "implements " + " ".join(interfaces) + " "
    if signature is not None:
        declaration += f"/* {signature} */ "
    lines.append(declaration + "{\n\n")
    return "".join(lines)


def _member_preamble(access: int) -> str:
    text = ""
    if access & ACC_DEPRECATED:
        text += f"{MEMBER_INDENT}// DEPRECATED\n"
    return text + f"{MEMBER_INDENT}// access flags 0x{access & 0xFFFF:X}\n"


def format_field_header(
    access: int,
    name: str,
    desc: str,
    signature: Optional[str],
    value: Any,
) -> str:
    line = MEMBER_INDENT + format_access(access, "field")
    if access & ACC_ENUM:
        line += "enum "
    line += f"{desc} {name}"
    if value is not None:
        line += f" = {format_value(value)}"
    if signature is not None:
        line += f" // signature {signature}"
    return _member_preamble(access) + line + "\n"


def format_method_header(
    access: int,
    name: str,
    desc: str,
    signature: Optional[str],
    exceptions: Sequence[str],
) -> str:
    line = MEMBER_INDENT + format_access(access, "method") + f"{name} {desc}"
    if exceptions:
        line += " throws " + " ".join(exceptions)
    if signature is not None:
        line += f" // signature {signature}"
    return _member_preamble(access) + line + "\n"


def format_inner_class(
    name: str, outer_name: Optional[str], inner_name: Optional[str], access: int
) -> str:
    parts = [part for part in (name, outer_name, inner_name) if part is not None]
    modifiers = format_access(access, "class").rstrip()
    comment = f"{MEMBER_INDENT}// access flags 0x{access & 0xFFFF:X}"
    if modifiers:
        comment += f" ({modifiers})"
    return f"{comment}\n{MEMBER_INDENT}INNERCLASS " + " ".join(parts) + "\n"


def format_attribute(indent: str, type_name: str, content: bytes) -> str:
    return f"{indent}ATTRIBUTE {type_name} : {len(content)} byte(s)\n"


def instruction(mnemonic: str, *operands: Any) -> str:
    """Return one indented instruction line."""

    if operands:
        return INSN_INDENT + mnemonic + " " + " ".join(str(operand) for operand in operands) + "\n"
    return INSN_INDENT + mnemonic + "\n"
