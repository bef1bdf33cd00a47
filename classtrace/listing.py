"""Class listing utilities."""

from __future__ import annotations

import io
from pathlib import Path
from typing import Optional

from .mnemonics import MnemonicTable
from .reader import ClassReader
from .trace import TraceClassVisitor
from .visitors import ClassVisitor


class ClassDisassembler:
    """Render textual listings of class files through the trace visitors."""

    def __init__(self, mnemonics: Optional[MnemonicTable] = None) -> None:
        self.mnemonics = mnemonics or MnemonicTable.default()

    def generate_listing(
        self,
        data: bytes,
        *,
        skip_debug: bool = False,
        downstream: Optional[ClassVisitor] = None,
    ) -> str:
        sink = io.StringIO()
        tracer = TraceClassVisitor(downstream, sink, mnemonics=self.mnemonics)
        ClassReader(data).accept(tracer, skip_debug=skip_debug)
        return sink.getvalue()

    def write_listing(
        self,
        data: bytes,
        output_path: Path,
        *,
        skip_debug: bool = False,
    ) -> None:
        listing = self.generate_listing(data, skip_debug=skip_debug)
        output_path.write_text(listing, "utf-8")
