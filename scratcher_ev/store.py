"""Append-only snapshot storage."""

import json
import logging
import threading
from datetime import datetime
from pathlib import Path
from typing import Iterable, List, Protocol

from scratcher_ev.models import Snapshot

logger = logging.getLogger(__name__)


class SnapshotStore(Protocol):
    def append(self, snapshot: Snapshot) -> None:
        ...

    def query_range(self, since: datetime) -> List[Snapshot]:
        ...


def _in_order(snapshots: Iterable[Snapshot], since: datetime) -> List[Snapshot]:
    return sorted((s for s in snapshots if s.timestamp >= since), key=lambda s: s.timestamp)


class MemorySnapshotStore:
    """In-process store, mostly for tests and one-off runs"""

    def __init__(self, snapshots: Iterable[Snapshot] = ()):
        self._snapshots: List[Snapshot] = list(snapshots)
        self._lock = threading.Lock()

    def append(self, snapshot: Snapshot) -> None:
        with self._lock:
            self._snapshots.append(snapshot)

    def query_range(self, since: datetime) -> List[Snapshot]:
        with self._lock:
            return _in_order(self._snapshots, since)

    def __len__(self) -> int:
        return len(self._snapshots)


class JsonSnapshotStore:
    """
    Snapshots as JSON lines in a single file.

    Records are only ever appended. Lines that fail to parse are logged and
    skipped on read so one bad write does not hide the rest of the history.
    """

    def __init__(self, path):
        self.path = Path(path)
        self._lock = threading.Lock()
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def append(self, snapshot: Snapshot) -> None:
        self.extend([snapshot])

    def extend(self, snapshots: Iterable[Snapshot]) -> int:
        lines = [json.dumps(s.to_dict()) for s in snapshots]
        if not lines:
            return 0
        with self._lock:
            with open(self.path, "a", encoding="utf-8") as f:
                f.write("\n".join(lines) + "\n")
        return len(lines)

    def _load(self) -> List[Snapshot]:
        if not self.path.exists():
            return []
        snapshots = []
        with open(self.path, "r", encoding="utf-8") as f:
            for line_no, line in enumerate(f, 1):
                line = line.strip()
                if not line:
                    continue
                try:
                    snapshots.append(Snapshot.from_dict(json.loads(line)))
                except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
                    logger.warning("Skipping bad snapshot at %s:%d: %s", self.path.name, line_no, e)
        return snapshots

    def query_range(self, since: datetime) -> List[Snapshot]:
        with self._lock:
            return _in_order(self._load(), since)
