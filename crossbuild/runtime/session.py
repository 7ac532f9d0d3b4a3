# Copyright (c) Meta Platforms, Inc. and affiliates.
# Modifications copyright (c) 2025 Logan Martel.
# Adapted from https://github.com/meta-pytorch/KernelAgent (Apache-2.0).

"""Run records: session metadata, event stream and summary."""

from __future__ import annotations

import json
import threading
import time
import uuid

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from crossbuild.runtime.paths import RunDirectories, make_run_dirs


@dataclass
class EventRecord:
    kind: str
    data: Dict[str, Any]
    ts: float = field(default_factory=time.time)

    def to_json_line(self) -> str:
        payload = {"ts": self.ts, "kind": self.kind, "data": self.data}
        return json.dumps(payload, default=str)


def new_run_id() -> str:
    ts = time.strftime("%Y%m%d_%H%M%S")
    short = uuid.uuid4().hex[:8]
    return f"run_{ts}_{short}"


class RunSession:
    """Helper that materializes run directories and metadata files."""

    def __init__(
        self,
        run_root: Path,
        run_id: Optional[str] = None,
        *,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.run_root = run_root
        self.run_id = run_id or new_run_id()
        self.dirs: RunDirectories = make_run_dirs(
            run_root, self.run_id, exist_ok=run_id is not None
        )
        self.events_path = self.dirs.run_dir / "events.jsonl"
        self.session_path = self.dirs.run_dir / "session.json"
        self.log_path = self.dirs.logs / "crossbuild.log"
        self._lock = threading.Lock()
        session = {
            "run_id": self.run_id,
            "created_ts": time.time(),
            "run_dir": str(self.dirs.run_dir),
        }
        if metadata:
            session.update(metadata)
        self.session_path.write_text(
            json.dumps(session, indent=2, default=str), encoding="utf-8"
        )

    def write_metadata(self, name: str, data: dict) -> Path:
        path = self.dirs.run_dir / f"{name}.json"
        path.write_text(
            json.dumps(data, indent=2, default=str), encoding="utf-8"
        )
        return path

    def log_event(self, kind: str, data: Dict[str, Any]) -> None:
        record = EventRecord(kind=kind, data=data)
        line = record.to_json_line()
        with self._lock:
            with self.events_path.open("a", encoding="utf-8") as handle:
                handle.write(line + "\n")

    def read_events(self) -> List[Dict[str, Any]]:
        if not self.events_path.exists():
            return []
        text = self.events_path.read_text(encoding="utf-8")
        return [json.loads(line) for line in text.splitlines() if line.strip()]

    def write_summary(self, extra: Optional[Dict[str, Any]] = None) -> Path:
        summary: Dict[str, Any] = {
            "run_id": self.run_id,
            "written_ts": time.time(),
        }
        if extra:
            summary.update(extra)
        return self.write_metadata("summary", summary)
