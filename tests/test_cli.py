import json
import os
import subprocess
import sys
from pathlib import Path

SCRIPT = Path(__file__).resolve().parents[1] / "class_trace.py"


def _utf8(text: str) -> bytes:
    raw = text.encode("utf-8")
    return b"\x01" + len(raw).to_bytes(2, "big") + raw


def _hello_bytes() -> bytes:
    pool = [
        _utf8("demo/Hello"),                  # 1
        b"\x07\x00\x01",                      # 2 class demo/Hello
        _utf8("java/lang/Object"),            # 3
        b"\x07\x00\x03",                      # 4 class java/lang/Object
        _utf8("run"),                         # 5
        _utf8("()V"),                         # 6
        _utf8("Code"),                        # 7
        _utf8("SourceFile"),                  # 8
        _utf8("Hello.java"),                  # 9
    ]
    code = b"\x10\x2a\x57\xb1"  # BIPUSH 42, POP, RETURN
    code_attr = (
        (7).to_bytes(2, "big")
        + (12 + len(code)).to_bytes(4, "big")
        + (1).to_bytes(2, "big")
        + (0).to_bytes(2, "big")
        + len(code).to_bytes(4, "big")
        + code
        + (0).to_bytes(2, "big")
        + (0).to_bytes(2, "big")
    )
    method = (
        (0x9).to_bytes(2, "big")
        + (5).to_bytes(2, "big")
        + (6).to_bytes(2, "big")
        + (1).to_bytes(2, "big")
        + code_attr
    )
    source = (8).to_bytes(2, "big") + (2).to_bytes(4, "big") + (9).to_bytes(2, "big")
    return (
        (0xCAFEBABE).to_bytes(4, "big")
        + (0).to_bytes(2, "big")
        + (52).to_bytes(2, "big")
        + (len(pool) + 1).to_bytes(2, "big")
        + b"".join(pool)
        + (0x21).to_bytes(2, "big")
        + (2).to_bytes(2, "big")
        + (4).to_bytes(2, "big")
        + (0).to_bytes(2, "big")
        + (0).to_bytes(2, "big")
        + (1).to_bytes(2, "big")
        + method
        + (1).to_bytes(2, "big")
        + source
    )


def _write_class(base: Path) -> Path:
    root = base / "classes"
    (root / "demo").mkdir(parents=True)
    path = root / "demo" / "Hello.class"
    path.write_bytes(_hello_bytes())
    return path


def _run(*args: str, cwd: Path) -> subprocess.CompletedProcess:
    env = dict(os.environ)
    env.pop("CLASSPATH", None)
    return subprocess.run(
        [sys.executable, str(SCRIPT), *args],
        capture_output=True,
        text=True,
        cwd=cwd,
        env=env,
    )


def test_cli_prints_listing_for_class_file(tmp_path: Path) -> None:
    class_path = _write_class(tmp_path)

    result = _run(str(class_path), cwd=tmp_path)

    assert result.returncode == 0, result.stderr
    assert result.stdout.startswith("// class version 52.0 (52)\n")
    assert "  // compiled from: Hello.java\n" in result.stdout
    assert "    BIPUSH 42\n    POP\n    RETURN\n" in result.stdout
    assert result.stdout.endswith("}\n")


def test_cli_resolves_class_names_on_the_classpath(tmp_path: Path) -> None:
    _write_class(tmp_path)
    output = tmp_path / "listing.txt"
    mnemonics = tmp_path / "names.json"
    mnemonics.write_text(json.dumps({"opcodes": {"0x10": "bipush"}}), "utf-8")

    result = _run(
        "demo.Hello",
        "--classpath",
        str(tmp_path / "classes"),
        "--skip-debug",
        "--mnemonics",
        str(mnemonics),
        "--output",
        str(output),
        cwd=tmp_path,
    )

    assert result.returncode == 0, result.stderr
    assert f"listing written to {output}" in result.stdout
    text = output.read_text("utf-8")
    assert "compiled from" not in text
    assert "    bipush 42\n" in text


def test_cli_reports_missing_class(tmp_path: Path) -> None:
    result = _run("demo.Missing", "--classpath", str(tmp_path), cwd=tmp_path)

    assert result.returncode == 1
    assert "demo.Missing" in result.stderr
    assert result.stdout == ""


def test_cli_reports_malformed_class(tmp_path: Path) -> None:
    broken = tmp_path / "Broken.class"
    broken.write_bytes(b"\x00" * 16)

    result = _run(str(broken), cwd=tmp_path)

    assert result.returncode == 1
    assert "magic" in result.stderr


def test_cli_reports_invalid_mnemonic_table(tmp_path: Path) -> None:
    class_path = _write_class(tmp_path)
    mnemonics = tmp_path / "names.json"
    mnemonics.write_text("{not json", "utf-8")

    result = _run(str(class_path), "--mnemonics", str(mnemonics), cwd=tmp_path)

    assert result.returncode == 1
    assert f"invalid mnemonic table {mnemonics}" in result.stderr
    assert "Traceback" not in result.stderr


def test_cli_usage_error(tmp_path: Path) -> None:
    result = _run(cwd=tmp_path)

    assert result.returncode == 2
    assert "usage" in result.stderr
