from __future__ import annotations

from contextlib import contextmanager
from typing import Callable, Iterator, TypeVar

from sqlalchemy.engine import Connection
from sqlalchemy.exc import SQLAlchemyError

from app.domain.exceptions import StorageError


TRepo = TypeVar("TRepo", bound="SqlRepository")
TResult = TypeVar("TResult")


class SqlRepository:
    """Connection handling shared by the raw-SQL repositories.

    A repository bound to a connection (inside ``execute_in_transaction``)
    reuses it for every statement; an unbound one opens a connection per call.
    SQLAlchemy failures surface as ``StorageError``.
    """

    def __init__(self, engine, *, connection: Connection | None = None):
        self._engine = engine
        self._connection = connection

    @contextmanager
    def _connect(self, *, write: bool = False) -> Iterator[Connection]:
        if self._connection is not None:
            yield self._connection
            return
        try:
            with (self._engine.begin() if write else self._engine.connect()) as conn:
                yield conn
        except SQLAlchemyError as exc:
            raise StorageError(f"{type(self).__name__}: database operation failed.") from exc

    def execute_in_transaction(self: TRepo, fn: Callable[[TRepo], TResult]) -> TResult:
        if self._connection is not None:
            return fn(self)
        try:
            with self._engine.begin() as conn:
                return fn(type(self)(self._engine, connection=conn))
        except SQLAlchemyError as exc:
            raise StorageError(f"{type(self).__name__}: transaction failed.") from exc
