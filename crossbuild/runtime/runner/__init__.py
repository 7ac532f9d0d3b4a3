"""Runtime runner exports."""

from .base import CommandResult, CommandRunner
from .recording import RecordedCall, RecordingRunner
from .subprocess_runner import SubprocessRunner, normalize_returncode

__all__ = [
    "CommandResult",
    "CommandRunner",
    "RecordedCall",
    "RecordingRunner",
    "SubprocessRunner",
    "normalize_returncode",
]
