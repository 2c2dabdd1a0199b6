"""Audit logger — append-only JSON Lines logging with size-based rotation."""

from __future__ import annotations

import fcntl
from pathlib import Path

from src.models import AuditEvent

DEFAULT_MAX_BYTES = 10_485_760
DEFAULT_BACKUP_COUNT = 5


class AuditLogger:
    """Append-only structured audit logger.

    Events never carry secret values; callers pass only request facts
    (source IP, method and path, outcome).
    """

    def __init__(
        self,
        log_path: str,
        max_bytes: int = DEFAULT_MAX_BYTES,
        backup_count: int = DEFAULT_BACKUP_COUNT,
    ) -> None:
        self.log_path = Path(log_path)
        self._max_bytes = max_bytes
        self._backup_count = backup_count

    def _maybe_rotate(self) -> None:
        """Rotate log file if it exceeds max_bytes."""
        if not self.log_path.exists():
            return
        if self.log_path.stat().st_size < self._max_bytes:
            return

        # Drop the oldest backup to make room
        oldest = self.log_path.with_name(f"{self.log_path.name}.{self._backup_count}")
        if oldest.exists():
            oldest.unlink()

        # audit.jsonl.1 -> .2, .2 -> .3, ...
        for i in range(self._backup_count - 1, 0, -1):
            src = self.log_path.with_name(f"{self.log_path.name}.{i}")
            if src.exists():
                src.rename(self.log_path.with_name(f"{self.log_path.name}.{i + 1}"))

        # Current file becomes .1; the next write starts a fresh file
        self.log_path.rename(self.log_path.with_name(f"{self.log_path.name}.1"))

    def log(self, event: AuditEvent) -> None:
        self.log_path.parent.mkdir(parents=True, exist_ok=True)
        line = event.model_dump_json()

        # Rotation check and append happen under the same lock
        lock_file = self.log_path.parent / f".{self.log_path.name}.lock"
        with open(lock_file, "w") as lf:
            fcntl.flock(lf, fcntl.LOCK_EX)
            try:
                self._maybe_rotate()
                with open(self.log_path, "a") as f:
                    f.write(line + "\n")
            finally:
                fcntl.flock(lf, fcntl.LOCK_UN)
