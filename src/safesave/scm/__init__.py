"""Process runner, output parsers and backend probers."""

from safesave.scm.models import (
    CommandResult,
    DirtyState,
    ErrorKind,
    LaunchFailure,
    ProbeResult,
    ProviderKind,
    StatusSnapshot,
    classify_error,
)
from safesave.scm.runner import CommandRunner

__all__ = [
    "CommandResult",
    "CommandRunner",
    "DirtyState",
    "ErrorKind",
    "LaunchFailure",
    "ProbeResult",
    "ProviderKind",
    "StatusSnapshot",
    "classify_error",
]
