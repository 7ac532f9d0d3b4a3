"""Runtime helpers (run records, runners, path utilities)."""

from . import paths
from .runner import (
    CommandResult,
    CommandRunner,
    RecordedCall,
    RecordingRunner,
    SubprocessRunner,
)
from .session import EventRecord, RunSession, new_run_id

__all__ = [
    "CommandResult",
    "CommandRunner",
    "EventRecord",
    "RecordedCall",
    "RecordingRunner",
    "RunSession",
    "SubprocessRunner",
    "new_run_id",
    "paths",
]
