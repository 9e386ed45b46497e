"""
Transaction manager handling nested transactions and savepoints.
"""

from __future__ import annotations

import itertools
from contextlib import contextmanager
from typing import Generator, List, Protocol

from .errors import ConnectionStateError


class TransactionControl(Protocol):
    def begin(self, savepoint: str | None = None) -> None: ...

    def commit(self, savepoint: str | None = None) -> None: ...

    def rollback(self, savepoint: str | None = None) -> None: ...


class TransactionManager:
    """
    Coordinates begin/commit/rollback; nested levels become savepoints.
    """

    def __init__(self, control: TransactionControl, *, prefix: str = "sqlweave_sp") -> None:
        self.control = control
        self.prefix = prefix
        self._stack: List[str | None] = []
        self._savepoint_counter = itertools.count(1)

    @property
    def depth(self) -> int:
        return len(self._stack)

    def begin(self) -> None:
        if self.depth == 0:
            self.control.begin()
            self._stack.append(None)
            return

        name = self._next_savepoint_name()
        self.control.begin(name)
        self._stack.append(name)

    def commit(self) -> None:
        if self.depth == 0:
            raise ConnectionStateError("No active transaction to commit.")

        savepoint_name = self._stack.pop()
        self.control.commit(savepoint_name)

    def rollback(self) -> None:
        if self.depth == 0:
            raise ConnectionStateError("No active transaction to roll back.")

        savepoint_name = self._stack.pop()
        if savepoint_name is None:
            self.control.rollback()
            return

        self.control.rollback(savepoint_name)
        self.control.commit(savepoint_name)

    def reset(self) -> None:
        self._stack.clear()

    @contextmanager
    def transaction(self) -> Generator[None, None, None]:
        self.begin()
        try:
            yield
        except BaseException:
            self.rollback()
            raise
        else:
            self.commit()

    def _next_savepoint_name(self) -> str:
        return f"{self.prefix}_{next(self._savepoint_counter)}"
