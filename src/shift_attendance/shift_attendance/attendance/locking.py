from __future__ import annotations

import hashlib
import threading
from contextlib import contextmanager
from datetime import date
from typing import Iterator, Protocol

from ..core.exceptions import LockTimeoutError
from ..database.connection import DatabaseConnection


def lock_key(employee_number: str, work_date: date) -> str:
    return f"attendance:{employee_number.upper()}:{work_date.isoformat()}"


class LockProvider(Protocol):
    def hold(self, employee_number: str, work_date: date) -> Iterator[None]:
        """Context manager serializing runs for one (employee, date)."""

        raise NotImplementedError


class InProcessLockProvider(LockProvider):
    """Keyed ``threading.Lock``; enough when a single process does all the writes.

    A key's lock lives only while someone holds or waits for it.
    """

    def __init__(self, *, timeout_seconds: float = 30.0):
        self._timeout = float(timeout_seconds)
        self._guard = threading.Lock()
        # key -> [lock, holders + waiters]
        self._locks: dict[str, list] = {}

    def _checkout(self, key: str) -> threading.Lock:
        with self._guard:
            entry = self._locks.get(key)
            if entry is None:
                entry = [threading.Lock(), 0]
                self._locks[key] = entry
            entry[1] += 1
            return entry[0]

    def _checkin(self, key: str) -> None:
        with self._guard:
            entry = self._locks[key]
            entry[1] -= 1
            if entry[1] == 0:
                del self._locks[key]

    @property
    def active_keys(self) -> int:
        with self._guard:
            return len(self._locks)

    @contextmanager
    def hold(self, employee_number: str, work_date: date) -> Iterator[None]:
        key = lock_key(employee_number, work_date)
        lock = self._checkout(key)
        try:
            if not lock.acquire(timeout=self._timeout):
                raise LockTimeoutError(f"Could not lock {key} within {self._timeout:g}s")
            try:
                yield
            finally:
                lock.release()
        finally:
            self._checkin(key)


class MySQLLockProvider(LockProvider):
    """MySQL advisory lock (``GET_LOCK``), shared by every process using the database.

    The lock belongs to the session, so the connection stays open while it is held.
    """

    def __init__(self, conn_factory: DatabaseConnection, *, timeout_seconds: float = 30.0):
        self._conn_factory = conn_factory
        self._timeout = float(timeout_seconds)

    @staticmethod
    def _name(key: str) -> str:
        # GET_LOCK names are limited to 64 characters
        return "att_" + hashlib.sha1(key.encode("utf-8")).hexdigest()

    @contextmanager
    def hold(self, employee_number: str, work_date: date) -> Iterator[None]:
        key = lock_key(employee_number, work_date)
        name = self._name(key)
        conn = self._conn_factory.connect()
        try:
            cur = conn.cursor()
            try:
                cur.execute("SELECT GET_LOCK(%s, %s)", (name, int(self._timeout)))
                row = cur.fetchone()
                if not row or row[0] != 1:
                    raise LockTimeoutError(f"Could not lock {key} within {self._timeout:g}s")
                try:
                    yield
                finally:
                    cur.execute("SELECT RELEASE_LOCK(%s)", (name,))
                    cur.fetchone()
            finally:
                cur.close()
        finally:
            conn.close()
