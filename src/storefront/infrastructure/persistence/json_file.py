"""A JSON document on disk with atomic read-modify-write.

Every path gets one process-wide lock.  ``update()`` holds it across the
read, the caller's change and the write, and the write goes to a
temporary file that then replaces the original, so readers never see a
half-written document.
"""

from __future__ import annotations

import json
import os
import tempfile
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator

_locks: dict[Path, threading.RLock] = {}
_locks_guard = threading.Lock()


def _lock_for(path: Path) -> threading.RLock:
    key = path.resolve()
    with _locks_guard:
        lock = _locks.get(key)
        if lock is None:
            lock = _locks[key] = threading.RLock()
        return lock


class JsonFile:

    def __init__(self, path: Path, default: Any) -> None:
        self._path = path
        self._default = default
        self._lock = _lock_for(path)
        self._ensure_file()

    @property
    def path(self) -> Path:
        return self._path

    def read(self) -> Any:
        with self._lock:
            return json.loads(self._path.read_text(encoding="utf-8"))

    @contextmanager
    def update(self) -> Iterator[Any]:
        """Yield the parsed document; whatever it holds afterwards is written back.

        Nothing is written if the block raises.
        """
        with self._lock:
            data = json.loads(self._path.read_text(encoding="utf-8"))
            yield data
            self._write(data)

    def write(self, data: Any) -> None:
        with self._lock:
            self._write(data)

    # --- File helpers ---------------------------------------------------------

    def _write(self, data: Any) -> None:
        fd, tmp_name = tempfile.mkstemp(
            dir=self._path.parent, prefix=f".{self._path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(json.dumps(data, indent=2) + "\n")
            os.replace(tmp_name, self._path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

    def _ensure_file(self) -> None:
        with self._lock:
            if not self._path.exists():
                self._path.parent.mkdir(parents=True, exist_ok=True)
                self._write(self._default)
