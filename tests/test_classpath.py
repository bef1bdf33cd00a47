import os
import zipfile
from pathlib import Path

import pytest

from classtrace.classpath import ClassPath, entry_name
from classtrace.errors import ClassNotFoundError


def _write_directory_entry(base: Path) -> Path:
    root = base / "classes"
    (root / "demo").mkdir(parents=True)
    (root / "demo" / "Widget.class").write_bytes(b"from-directory")
    return root


def _write_archive_entry(base: Path) -> Path:
    archive = base / "lib.jar"
    with zipfile.ZipFile(archive, "w") as bundle:
        bundle.writestr("demo/Widget.class", b"from-archive")
        bundle.writestr("demo/Gadget.class", b"gadget")
    return archive


def test_entry_name_accepts_dotted_and_internal_names():
    assert entry_name("java.lang.String") == "java/lang/String.class"
    assert entry_name("java/lang/String") == "java/lang/String.class"
    assert entry_name("demo.Widget.class") == "demo/Widget.class"


def test_first_matching_entry_wins(tmp_path: Path):
    directory = _write_directory_entry(tmp_path)
    archive = _write_archive_entry(tmp_path)

    assert ClassPath([directory, archive]).find("demo.Widget") == b"from-directory"
    assert ClassPath([archive, directory]).find("demo.Widget") == b"from-archive"
    assert ClassPath([directory, archive]).find("demo.Gadget") == b"gadget"


def test_missing_class_raises_lookup_error(tmp_path: Path):
    classpath = ClassPath([tmp_path / "nowhere", _write_directory_entry(tmp_path)])

    with pytest.raises(ClassNotFoundError, match="demo.Missing"):
        classpath.find("demo.Missing")
    with pytest.raises(LookupError):
        classpath.find("demo.Missing")


def test_corrupt_archive_is_skipped(tmp_path: Path):
    broken = tmp_path / "broken.jar"
    broken.write_bytes(b"not a zip")
    directory = _write_directory_entry(tmp_path)

    assert ClassPath([broken, directory]).find("demo.Widget") == b"from-directory"


def test_from_environment_orders_entries(tmp_path: Path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    extra = os.pathsep.join(["first", "second"])

    classpath = ClassPath.from_environment([extra], environ={"CLASSPATH": "third"})

    assert classpath.entries == [Path("first"), Path("second"), Path("third"), Path.cwd()]

