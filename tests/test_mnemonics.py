import json
import logging
from pathlib import Path

from classtrace.mnemonics import MnemonicTable
from classtrace.opcodes import GETSTATIC, NEWARRAY, OPCODES
from classtrace.trace import TraceCodeVisitor


def _write_table(base: Path, payload) -> Path:
    path = base / "mnemonics.json"
    path.write_text(json.dumps(payload, indent=2), "utf-8")
    return path


def test_default_table_uses_jvm_names():
    table = MnemonicTable.default()

    assert table.opcode(0) == "NOP"
    assert table.opcode(GETSTATIC) == "GETSTATIC"
    assert table.opcode(0xCB) == "op_CB"
    assert table.array_type(10) == "T_INT"
    assert table.array_type(99) == "99"


def test_overrides_accept_hex_and_decimal_keys(tmp_path: Path):
    path = _write_table(
        tmp_path,
        {
            "opcodes": {"0xB2": "getstatic", "18": "ldc", "bogus-key": "x", "300": "big"},
            "types": {"0A": "int", "4": "boolean"},
        },
    )

    table = MnemonicTable.load(path)

    assert table.path == path
    assert table.opcode(GETSTATIC) == "getstatic"
    assert table.opcode(OPCODES["LDC"]) == "ldc"
    assert table.opcode(OPCODES["NOP"]) == "NOP"
    assert table.opcode(300) == "op_2C"
    assert table.array_type(10) == "int"
    assert table.array_type(4) == "boolean"


def test_missing_table_falls_back_to_defaults(tmp_path: Path, caplog):
    with caplog.at_level(logging.WARNING, logger="classtrace.mnemonics"):
        table = MnemonicTable.load(tmp_path / "absent.json")

    assert table.opcode(GETSTATIC) == "GETSTATIC"
    assert "not found" in caplog.text


def test_trace_visitor_uses_injected_table(tmp_path: Path):
    path = _write_table(tmp_path, {"opcodes": {"188": "newarray"}, "types": {"10": "int"}})
    code = TraceCodeVisitor(mnemonics=MnemonicTable.load(path))

    code.visit_code()
    code.visit_int_insn(NEWARRAY, 10)
    code.visit_int_insn(NEWARRAY, 4)

    assert code.buffer.flatten() == "    newarray int\n    newarray T_BOOLEAN\n"
