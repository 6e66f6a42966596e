from __future__ import annotations
from pathlib import Path
from typing import Protocol


class RecordingStoragePort(Protocol):
    """Persists finished recordings. Failures raise StorageFailure."""

    def store(self, local_path: Path) -> str: ...

    def delete(self, remote_key: str) -> None: ...
