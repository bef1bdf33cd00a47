"""Resolve class names to class-file bytes."""

from __future__ import annotations

import logging
import os
import zipfile
from pathlib import Path
from typing import Iterable, List, Mapping, Optional, Sequence

from .errors import ClassNotFoundError


logger = logging.getLogger(__name__)

ARCHIVE_SUFFIXES = (".jar", ".zip")


def entry_name(class_name: str) -> str:
    """Return the archive member name for ``java.lang.String`` style names."""

    internal = class_name.strip().replace(".", "/")
    if internal.endswith("/class"):
        internal = internal[: -len("/class")]
    return internal + ".class"


class ClassPath:
    """Ordered list of directories and ``.jar``/``.zip`` archives.

    Entries are searched in order and the first match wins.  Entries that do
    not exist are kept so the search log shows them, but never match.
    """

    def __init__(self, entries: Iterable[Path]) -> None:
        self.entries: List[Path] = [Path(entry) for entry in entries]

    @classmethod
    def from_environment(
        cls,
        extra: Optional[Sequence[str]] = None,
        *,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "ClassPath":
        """Combine ``extra`` entries, ``$CLASSPATH`` and the current directory."""

        environ = os.environ if environ is None else environ
        entries: List[Path] = []
        for value in list(extra or ()) + [environ.get("CLASSPATH", "")]:
            entries.extend(Path(part) for part in value.split(os.pathsep) if part)
        entries.append(Path.cwd())
        return cls(entries)

    def find(self, class_name: str) -> bytes:
        """Return the bytes of ``class_name`` or raise :class:`ClassNotFoundError`."""

        member = entry_name(class_name)
        for entry in self.entries:
            logger.debug("looking for %s in %s", member, entry)
            if entry.is_dir():
                candidate = entry / member
                if candidate.is_file():
                    return candidate.read_bytes()
            elif entry.suffix.lower() in ARCHIVE_SUFFIXES and entry.is_file():
                data = self._read_archive(entry, member)
                if data is not None:
                    return data
        raise ClassNotFoundError(f"class {class_name} not found on the class path")

    @staticmethod
    def _read_archive(archive: Path, member: str) -> Optional[bytes]:
        try:
            with zipfile.ZipFile(archive) as bundle:
                try:
                    return bundle.read(member)
                except KeyError:
                    return None
        except zipfile.BadZipFile:
            logger.warning("skipping unreadable archive %s", archive)
            return None
