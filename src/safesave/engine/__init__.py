"""Status engine: aggregation, safety gates, command execution and scheduling."""

from safesave.engine.aggregator import StatusAggregator
from safesave.engine.executor import CommandExecutor, CommandOutcome
from safesave.engine.notifications import (
    LoggingNotifier,
    Notifier,
    RecordingNotifier,
    StatusChangeNotifier,
)
from safesave.engine.scheduler import PollScheduler, TickResult
from safesave.engine.session import EngineSession
from safesave.engine.summary import build_status_summary, provider_label, status_label

__all__ = [
    "CommandExecutor",
    "CommandOutcome",
    "EngineSession",
    "LoggingNotifier",
    "Notifier",
    "PollScheduler",
    "RecordingNotifier",
    "StatusAggregator",
    "StatusChangeNotifier",
    "TickResult",
    "build_status_summary",
    "provider_label",
    "status_label",
]
