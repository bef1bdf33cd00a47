"""Symbolic names for bytecode labels."""

from __future__ import annotations

from typing import Dict, Hashable, Optional

from .errors import MissingArgumentError


class LabelTable:
    """Assign ``L0``, ``L1``... to labels in order of first reference.

    A label referenced by a forward jump receives its name at the jump and
    keeps it when its position is marked later on.  One table covers a single
    method body.
    """

    def __init__(self, prefix: str = "L") -> None:
        self.prefix = prefix
        self._names: Dict[Hashable, str] = {}

    def name(self, label: Optional[Hashable]) -> str:
        if label is None:
            raise MissingArgumentError("label reference is missing")
        name = self._names.get(label)
        if name is None:
            name = f"{self.prefix}{len(self._names)}"
            self._names[label] = name
        return name

    def __contains__(self, label: object) -> bool:
        return label in self._names

    def __len__(self) -> int:
        return len(self._names)
