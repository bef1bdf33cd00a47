"""Exception hierarchy shared by the tracer, the reader and the class path."""

from __future__ import annotations


class TraceError(Exception):
    """Base class for every error raised by :mod:`classtrace`."""


class ContractViolation(TraceError):
    """An event was delivered in a way the visitor protocol does not allow.

    These are programming errors on the caller side.  Visitors raise them
    before touching their buffers so partial output never escapes.
    """


class VisitorStateError(ContractViolation):
    """An event arrived before the scope started or after it ended."""


class SwitchArityError(ContractViolation, ValueError):
    """The number of switch targets does not match the declared cases."""


class MissingArgumentError(ContractViolation, ValueError):
    """A mandatory argument (typically a label) was ``None``."""


class FrozenBufferError(ContractViolation):
    """A fragment was appended to a buffer whose owner already finished."""


class ClassFormatError(TraceError, ValueError):
    """The class-file bytes are truncated or structurally invalid."""


class ClassNotFoundError(TraceError, LookupError):
    """A class name could not be resolved on the class path."""
