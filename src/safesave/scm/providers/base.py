"""
safesave — provider capability interface.

File: src/safesave/scm/providers/base.py

Purpose
- Describe what the engine needs from a source-control backend so that the
  aggregator and executor never branch on a concrete backend type.

Contract
- ``probe`` is synchronous and blocking. It never raises for VCS or process
  failures; those degrade into ``ProbeResult`` fields.
- ``run_command`` executes one client command in ``working_dir``.
- Adding a backend means adding one ``Provider`` implementation.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from safesave.scm.models import ProbeResult, ProviderKind, RunOutcome
    from safesave.scm.runner import CommandRunner


@runtime_checkable
class Provider(Protocol):
    kind: ProviderKind
    label: str
    unavailable_message: str

    def matches_host_provider(self, name: str) -> bool: ...

    def probe(self, project_dir: Path) -> ProbeResult: ...

    def run_command(self, args: Sequence[str], working_dir: Path | str) -> RunOutcome: ...


class CommandProviderBase:
    """Shared plumbing for providers that drive a single CLI executable."""

    kind: ProviderKind
    label: str
    unavailable_message: str
    host_keywords: tuple[str, ...] = ()

    def __init__(self, runner: CommandRunner, executable: str) -> None:
        self._runner = runner
        self.executable = executable

    def matches_host_provider(self, name: str) -> bool:
        lowered = name.lower()
        return any(keyword in lowered for keyword in self.host_keywords)

    def run_command(self, args: Sequence[str], working_dir: Path | str) -> RunOutcome:
        return self._runner.run(self.executable, args, working_dir)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(executable={self.executable!r})"


__all__ = ["CommandProviderBase", "Provider"]
