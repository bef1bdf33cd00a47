"""Deferred text buffers used to keep nested listings in declaration order."""

from __future__ import annotations

from typing import Iterator, List, Union

from .errors import ContractViolation, FrozenBufferError


Fragment = Union[str, "FragmentBuffer"]


class FragmentBuffer:
    """Ordered sequence of text fragments with late-bound placeholders.

    A parent visitor that hands out a nested visitor appends the child's
    buffer as a fragment *before* the child has produced anything.  The child
    keeps appending to its own buffer while it receives events; the parent only
    resolves the placeholder when the document is flattened.  Positions never
    move once appended, so the flattened text follows declaration order no
    matter when the nested content arrives.

    The owning visitor freezes its buffer when its scope ends.  Frozen buffers
    reject further appends with :class:`~classtrace.errors.FrozenBufferError`.
    """

    def __init__(self, owner: str = "") -> None:
        self.owner = owner
        self._fragments: List[Fragment] = []
        self._frozen = False

    @property
    def frozen(self) -> bool:
        return self._frozen

    def append(self, text: str) -> None:
        self._check_writable()
        if text:
            self._fragments.append(text)

    def append_buffer(self, child: "FragmentBuffer") -> None:
        """Append a placeholder resolved from ``child`` at flatten time."""

        self._check_writable()
        if child is self or child._references(self):
            raise ContractViolation(
                f"fragment buffer {child.owner or '?'} would contain itself"
            )
        self._fragments.append(child)

    def freeze(self) -> None:
        self._frozen = True

    def __len__(self) -> int:
        return len(self._fragments)

    def __iter__(self) -> Iterator[Fragment]:
        return iter(self._fragments)

    # ------------------------------------------------------------------
    # flattening
    # ------------------------------------------------------------------
    def iter_leaves(self) -> Iterator[str]:
        for fragment in self._fragments:
            if isinstance(fragment, FragmentBuffer):
                yield from fragment.iter_leaves()
            else:
                yield fragment

    def flatten(self) -> str:
        return "".join(self.iter_leaves())

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------
    def _check_writable(self) -> None:
        if self._frozen:
            raise FrozenBufferError(
                f"fragment buffer {self.owner or '?'} is frozen; its visitor already ended"
            )

    def _references(self, target: "FragmentBuffer") -> bool:
        pending = [fragment for fragment in self._fragments if isinstance(fragment, FragmentBuffer)]
        while pending:
            buffer = pending.pop()
            if buffer is target:
                return True
            pending.extend(
                fragment for fragment in buffer._fragments if isinstance(fragment, FragmentBuffer)
            )
        return False
