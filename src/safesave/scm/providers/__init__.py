"""Source-control backends behind the ``Provider`` interface."""

from __future__ import annotations

from typing import TYPE_CHECKING

from safesave.scm.providers.base import CommandProviderBase, Provider
from safesave.scm.providers.git import GitProvider
from safesave.scm.providers.plastic import PlasticProvider
from safesave.scm.runner import CommandRunner

if TYPE_CHECKING:
    from safesave.config.settings import SafeSaveSettings


def default_providers(settings: SafeSaveSettings) -> tuple[Provider, ...]:
    """Build the Git-then-Plastic provider chain from settings."""

    runner = CommandRunner(timeout_seconds=settings.command_timeout_seconds)
    return (
        GitProvider(runner, settings.git_executable),
        PlasticProvider(runner, settings.plastic_executable),
    )


__all__ = [
    "CommandProviderBase",
    "GitProvider",
    "PlasticProvider",
    "Provider",
    "default_providers",
]
