"""Public package exports for the class tracing toolkit."""

from .classpath import ClassPath
from .errors import (
    ClassFormatError,
    ClassNotFoundError,
    ContractViolation,
    FrozenBufferError,
    MissingArgumentError,
    SwitchArityError,
    TraceError,
    VisitorStateError,
)
from .fragments import FragmentBuffer
from .labels import LabelTable
from .listing import ClassDisassembler
from .mnemonics import MnemonicTable
from .reader import ClassReader
from .recorder import Event, EventRecorder
from .trace import (
    TraceAnnotationVisitor,
    TraceClassVisitor,
    TraceCodeVisitor,
    TraceMemberVisitor,
    TraceMethodVisitor,
)
from .visitors import (
    AnnotationVisitor,
    Attribute,
    ClassVisitor,
    CodeVisitor,
    DynamicConstant,
    Float,
    Handle,
    Label,
    MemberVisitor,
    MethodVisitor,
    TypeRef,
)

__all__ = [
    "AnnotationVisitor",
    "Attribute",
    "ClassVisitor",
    "CodeVisitor",
    "DynamicConstant",
    "Float",
    "Handle",
    "Label",
    "MemberVisitor",
    "MethodVisitor",
    "TypeRef",
    "FragmentBuffer",
    "LabelTable",
    "MnemonicTable",
    "TraceAnnotationVisitor",
    "TraceClassVisitor",
    "TraceCodeVisitor",
    "TraceMemberVisitor",
    "TraceMethodVisitor",
    "Event",
    "EventRecorder",
    "ClassReader",
    "ClassPath",
    "ClassDisassembler",
    "TraceError",
    "ContractViolation",
    "VisitorStateError",
    "SwitchArityError",
    "MissingArgumentError",
    "FrozenBufferError",
    "ClassFormatError",
    "ClassNotFoundError",
]
