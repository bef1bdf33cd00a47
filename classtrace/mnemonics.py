"""Opcode and array-type mnemonic lookup support."""

from __future__ import annotations

import json
import logging
import string
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from .opcodes import ARRAY_TYPE_NAMES, OPCODE_NAMES


logger = logging.getLogger(__name__)


class MnemonicTable:
    """Resolve opcode numbers and ``NEWARRAY`` codes to printable names.

    Trace visitors never consult module globals directly; they receive a table
    instance so tests can swap in custom spellings.  The default table carries
    the JVM specification names.  :meth:`load` layers a JSON document on top of
    the defaults::

        {
          "opcodes": {"0xB2": "getstatic", "18": "ldc"},
          "types": {"10": "int"}
        }

    Keys may be hexadecimal (``0x`` prefixed or containing hex letters) or
    decimal.  Entries that cannot be parsed are ignored, mirroring the lenient
    behaviour of the annotation loaders this module grew out of.
    """

    def __init__(
        self,
        opcodes: Mapping[int, str],
        *,
        array_types: Optional[Mapping[int, str]] = None,
        path: Optional[Path] = None,
    ) -> None:
        self._opcodes: Dict[int, str] = dict(opcodes)
        self._array_types: Dict[int, str] = dict(array_types or {})
        self.path = path

    @classmethod
    def default(cls) -> "MnemonicTable":
        return cls(dict(enumerate(OPCODE_NAMES)), array_types=ARRAY_TYPE_NAMES)

    @classmethod
    def load(cls, path: Path) -> "MnemonicTable":
        """Load overrides from ``path`` on top of the default tables."""

        table = cls.default()
        table.path = path
        if not path.exists():
            logger.warning("mnemonic table %s not found, using defaults", path)
            return table

        data = json.loads(path.read_text("utf-8"))
        if not isinstance(data, Mapping):
            return table

        opcodes = data.get("opcodes")
        if isinstance(opcodes, Mapping):
            table._opcodes.update(_normalize_entries(opcodes, limit=0xFF))
        types = data.get("types")
        if isinstance(types, Mapping):
            table._array_types.update(_normalize_entries(types, limit=0xFF))
        return table

    def opcode(self, opcode: int) -> str:
        """Return the mnemonic for ``opcode`` or an ``op_XX`` placeholder."""

        name = self._opcodes.get(opcode)
        if name is not None:
            return name
        return f"op_{opcode & 0xFF:02X}"

    def array_type(self, code: int) -> str:
        name = self._array_types.get(code)
        if name is not None:
            return name
        return str(code)


def _parse_component(token: str) -> int:
    """Parse a single key which may be hex or decimal."""

    token = token.strip()
    if not token:
        raise ValueError("empty component")

    if token.lower().startswith("0x"):
        return int(token, 16)

    if any(ch in string.hexdigits[10:] for ch in token):
        return int(token, 16)

    return int(token, 10)


def _normalize_entries(entries: Mapping[Any, Any], *, limit: int) -> Dict[int, str]:
    normalized: Dict[int, str] = {}
    for key, value in entries.items():
        if not isinstance(value, str):
            continue
        if isinstance(key, int):
            number = key
        else:
            try:
                number = _parse_component(str(key))
            except ValueError:
                logger.debug("ignoring mnemonic override with key %r", key)
                continue
        if not (0 <= number <= limit):
            continue
        normalized[number] = value
    return normalized
