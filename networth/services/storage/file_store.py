"""
File-Backed Slot Storage

One JSON file per slot key inside a directory. Writes go to a temporary
file first and are moved into place, so a reader never sees half a
value.

Other processes writing the same directory are the "other tabs".
There is no OS-level notification: call `poll()` (e.g. on every UI
refresh) to detect their writes and notify subscribers.
"""

import os
import re
import tempfile
from pathlib import Path
from typing import Optional, Union

from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from networth.services.storage.interface import BaseSlotStorage, StorageError


_SAFE_KEY = re.compile(r"^[A-Za-z0-9_.-]+$")

# (mtime_ns, size) of a slot file, None when the file is absent
_Signature = Optional[tuple[int, int]]


class FileSlotStorage(BaseSlotStorage):
    """
    Slot storage in a directory of JSON files.

    Args:
        directory: Where slot files live. Created on first write.
    """

    def __init__(self, directory: Union[str, Path]):
        super().__init__()
        self._directory = Path(directory)
        self._seen: dict[str, _Signature] = {}

    def _path(self, key: str) -> Path:
        if not _SAFE_KEY.match(key):
            raise StorageError(f"Invalid slot key: {key!r}")
        return self._directory / f"{key}.json"

    def _signature(self, key: str) -> _Signature:
        try:
            stat = self._path(key).stat()
        except FileNotFoundError:
            return None
        return stat.st_mtime_ns, stat.st_size

    def _read_raw(self, key: str) -> Optional[str]:
        path = self._path(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StorageError(f"Could not read slot {key!r}: {e}") from e

    @retry(
        retry=retry_if_exception_type(OSError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.05, min=0.05, max=0.5),
        reraise=True,
    )
    def _replace_file(self, path: Path, raw: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.stem}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as tmp:
                tmp.write(raw)
            os.replace(tmp_name, path)
        except OSError:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

    def _write_raw(self, key: str, raw: str) -> None:
        path = self._path(key)
        try:
            self._replace_file(path, raw)
        except OSError as e:
            raise StorageError(f"Could not write slot {key!r}: {e}") from e
        # Our own write is not an external change
        self._seen[key] = self._signature(key)

    def _delete_raw(self, key: str) -> bool:
        path = self._path(key)
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            raise StorageError(f"Could not remove slot {key!r}: {e}") from e
        self._seen[key] = None
        return True

    def subscribe(self, key, on_external_change):
        # Baseline, so that only changes after subscribing are reported
        self._seen.setdefault(key, self._signature(key))
        return super().subscribe(key, on_external_change)

    def poll(self) -> list[str]:
        """
        Check subscribed slots for writes by other processes.

        Subscribers of every changed slot are notified with the new value.

        Returns:
            The keys that changed
        """
        changed = []
        for key in list(self._subscribers):
            if not self._subscribers[key]:
                continue
            signature = self._signature(key)
            if signature == self._seen.get(key):
                continue
            self._seen[key] = signature
            changed.append(key)
            try:
                raw = self._read_raw(key)
            except StorageError as e:
                self._logger.error("slot_read_failed", key=key, error=str(e))
                raw = None
            self._notify(key, raw)
        return changed
