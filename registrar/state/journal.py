"""
registrar.state.journal — journaling writes, checkpoints, revert/commit.

A deterministic, in-memory write journal shared by every host collaborator
(resource ledger, token balances, collectible registry). Each collaborator keeps
its data in a `JournaledMap` bound to one `Journal`; the journal owns a stack of
overlays. Writes go to the top overlay; reads consult overlays from top → base.
`commit()` merges the top overlay into the next layer (or the base maps if it is
the last layer). `revert()` discards the top overlay.

Outside any checkpoint, writes go straight to the base maps (used to seed state).

Intended usage
--------------
    j = Journal()
    balances = JournaledMap(j, "balances")
    with j.checkpoint():
        balances[addr] = 10
        raise SomeError  # → every write inside the block is discarded

Values should be immutable (frozen dataclasses, bytes, ints): overlays store the
objects themselves, so mutating a value in place would bypass the journal.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, Hashable, Iterator, List, MutableMapping, Optional, Tuple

_Key = Tuple[str, Hashable]


class _Tombstone:
    __slots__ = ()

    def __repr__(self) -> str:  # pragma: no cover - debugging aid
        return "<deleted>"


_DELETED = _Tombstone()


class Journal:
    """
    A copy-on-write journal with nested checkpoints.

    API highlights
    --------------
    - begin() / commit() / revert()
    - checkpoint(): context manager committing on success, reverting on any exception
    - depth(): number of open checkpoints
    """

    def __init__(self) -> None:
        self._layers: List[Dict[_Key, Any]] = []
        self._maps: Dict[str, "JournaledMap"] = {}

    # --------------------------------------------------------------------- #
    # Registration
    # --------------------------------------------------------------------- #

    def _register(self, m: "JournaledMap") -> None:
        if m.namespace in self._maps:
            raise ValueError(f"namespace already registered: {m.namespace!r}")
        self._maps[m.namespace] = m

    # --------------------------------------------------------------------- #
    # Checkpointing
    # --------------------------------------------------------------------- #

    def depth(self) -> int:
        return len(self._layers)

    def begin(self) -> int:
        """Start a new checkpoint. Returns the new depth marker."""
        self._layers.append({})
        return len(self._layers)

    def commit(self) -> None:
        """Merge the top overlay into its parent, or into the base maps."""
        if not self._layers:
            raise RuntimeError("commit without an open checkpoint")
        top = self._layers.pop()
        if self._layers:
            self._layers[-1].update(top)
            return
        for (ns, key), value in top.items():
            base = self._maps[ns]._base
            if value is _DELETED:
                base.pop(key, None)
            else:
                base[key] = value

    def revert(self) -> None:
        """Discard the top overlay."""
        if not self._layers:
            raise RuntimeError("revert without an open checkpoint")
        self._layers.pop()

    @contextmanager
    def checkpoint(self) -> Iterator["Journal"]:
        marker = self.begin()
        try:
            yield self
        except BaseException:
            while len(self._layers) >= marker:
                self.revert()
            raise
        else:
            while len(self._layers) > marker:
                self.commit()
            self.commit()

    # --------------------------------------------------------------------- #
    # Overlay access (used by JournaledMap)
    # --------------------------------------------------------------------- #

    def _lookup(self, key: _Key) -> Tuple[bool, Any]:
        for layer in reversed(self._layers):
            if key in layer:
                return True, layer[key]
        return False, None

    def _write(self, key: _Key, value: Any) -> bool:
        if not self._layers:
            return False
        self._layers[-1][key] = value
        return True

    def _staged_keys(self, ns: str) -> Dict[Hashable, Any]:
        staged: Dict[Hashable, Any] = {}
        for layer in self._layers:
            for (lns, key), value in layer.items():
                if lns == ns:
                    staged[key] = value
        return staged


class JournaledMap(MutableMapping):
    """A dict-like view whose writes are recorded by a `Journal`."""

    def __init__(
        self,
        journal: Journal,
        namespace: str,
        base: Optional[MutableMapping[Hashable, Any]] = None,
    ) -> None:
        self.journal = journal
        self.namespace = namespace
        self._base: MutableMapping[Hashable, Any] = {} if base is None else base
        journal._register(self)

    def __getitem__(self, key: Hashable) -> Any:
        found, value = self.journal._lookup((self.namespace, key))
        if found:
            if value is _DELETED:
                raise KeyError(key)
            return value
        return self._base[key]

    def __setitem__(self, key: Hashable, value: Any) -> None:
        if not self.journal._write((self.namespace, key), value):
            self._base[key] = value

    def __delitem__(self, key: Hashable) -> None:
        if key not in self:
            raise KeyError(key)
        if not self.journal._write((self.namespace, key), _DELETED):
            del self._base[key]

    def __iter__(self) -> Iterator[Hashable]:
        staged = self.journal._staged_keys(self.namespace)
        for key in self._base:
            if staged.get(key, None) is not _DELETED:
                yield key
        for key, value in staged.items():
            if key not in self._base and value is not _DELETED:
                yield key

    def __len__(self) -> int:
        return sum(1 for _ in self)


__all__ = ["Journal", "JournaledMap"]
