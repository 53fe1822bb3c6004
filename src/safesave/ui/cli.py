"""Command-line interface router for safesave."""

from __future__ import annotations

import argparse
import asyncio
import dataclasses
import json
import sys
import uuid
from collections.abc import Callable, Iterator, Mapping, Sequence
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from safesave.config import (
    ConfigLoadError,
    ConfigValidationError,
    SafeSaveSettings,
    dump_effective_config,
    load_config,
)
from safesave.engine import EngineSession, LoggingNotifier
from safesave.engine.summary import auto_fetch_interval_label
from safesave.observability import setup_logging, shutdown_logging
from safesave.scm.models import DirtyState, classify_error
from safesave.ui.render import CLIRenderer, create_renderer

if TYPE_CHECKING:
    from safesave.engine.executor import CommandOutcome

_ACTION_COMMANDS = ("fetch", "pull", "push", "update")


@dataclass(frozen=True, slots=True)
class CLIError(RuntimeError):
    """Typed CLI failure with an explicit process exit code."""

    message: str
    exit_code: int = 1

    def __str__(self) -> str:
        return self.message


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse command router for all supported CLI workflows."""

    parser = argparse.ArgumentParser(
        prog="safesave",
        description=(
            "safesave - source-control status and safety gates for Git and Plastic SCM.\n\n"
            "Common workflows:\n"
            "  safesave status             Probe once and print the summary\n"
            "  safesave pull --yes         Pull with rebase if the gates allow it\n"
            "  safesave watch              Print the status label whenever it changes\n"
            "  safesave tui                Open the terminal status view\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--repo-root",
        default=".",
        help="Project directory to inspect (default: current working directory).",
    )
    common.add_argument(
        "--config",
        dest="config_path",
        default=None,
        help="Path to safesave TOML config (default: ./safesave.toml if present).",
    )
    common.add_argument(
        "--provider",
        dest="preferred_provider",
        default=None,
        help="Host-declared backend name, e.g. 'git' or 'plastic' (overrides config).",
    )
    common.add_argument(
        "--unsaved-count",
        type=int,
        default=0,
        help="Number of unsaved editor documents to report to the gates.",
    )
    common.add_argument(
        "--unsaved-sample",
        default="",
        help="Name of one unsaved document, shown in the summary.",
    )
    common.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        default=False,
        help="Show detailed output and stream logs to stderr.",
    )
    common.add_argument(
        "--no-color",
        action="store_true",
        default=False,
        help="Disable colored output (also respects NO_COLOR env var).",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # status --------------------------------------------------------------
    status_parser = subparsers.add_parser(
        "status",
        parents=[common],
        help="Probe once and show the status summary and gate states",
        description=(
            "Probe the project directory once and print the status summary.\n\n"
            "Examples:\n"
            "  safesave status\n"
            "  safesave status --json\n"
            "  safesave status --provider plastic\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    status_parser.add_argument("--json", action="store_true", help="Emit deterministic JSON output")
    status_parser.set_defaults(handler=_cmd_status)

    # actions -------------------------------------------------------------
    action_help = {
        "fetch": "Run 'git fetch --prune'",
        "pull": "Run 'git pull --rebase' when the working tree is clean",
        "push": "Run 'git push' when there is something to push",
        "update": "Run 'cm update' when the workspace is clean",
    }
    for name in _ACTION_COMMANDS:
        action_parser = subparsers.add_parser(name, parents=[common], help=action_help[name])
        if name != "fetch":
            action_parser.add_argument(
                "--yes",
                "-y",
                action="store_true",
                default=False,
                help="Skip the confirmation prompt.",
            )
        action_parser.set_defaults(handler=_cmd_action, action=name)

    # watch ---------------------------------------------------------------
    watch_parser = subparsers.add_parser(
        "watch",
        parents=[common],
        help="Poll and print the status label whenever it changes",
        description="Poll the project until Ctrl-C and print each new status label.",
    )
    watch_parser.add_argument(
        "--auto-fetch",
        action="store_true",
        default=None,
        help="Enable periodic 'git fetch --prune' for this session.",
    )
    watch_parser.set_defaults(handler=_cmd_watch)

    # config --------------------------------------------------------------
    config_parser = subparsers.add_parser(
        "config",
        parents=[common],
        help="Print the effective configuration as JSON",
    )
    config_parser.set_defaults(handler=_cmd_config)

    # tui -----------------------------------------------------------------
    tui_parser = subparsers.add_parser(
        "tui",
        parents=[common],
        help="Open the terminal status view (requires the 'tui' extra)",
    )
    tui_parser.set_defaults(handler=_cmd_tui)

    return parser


def run_cli(argv: Sequence[str] | None = None) -> int:
    """Parse argv, route to a command handler, and return process exit code."""

    parser = build_parser()
    namespace = parser.parse_args(list(argv) if argv is not None else None)
    handler = getattr(namespace, "handler", None)
    if not callable(handler):
        parser.print_help(sys.stderr)
        return 2

    try:
        result = handler(namespace)
    except CLIError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return exc.exit_code
    return int(result)


def main(argv: Sequence[str] | None = None) -> int:
    """Compatibility wrapper for main-module wiring."""

    return run_cli(argv)


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------


def _cmd_status(args: argparse.Namespace) -> int:
    with _session_scope(args, notifier=LoggingNotifier()) as session:
        snapshot = asyncio.run(session.refresh_and_wait())
        gate_states = session.gate_states()
        error_kind = classify_error(snapshot)

        if _flag(args, "json"):
            _emit_json(
                {
                    "command": "status",
                    "label": session.status_label(),
                    "error_kind": error_kind.value if error_kind is not None else None,
                    "snapshot": snapshot.to_dict(),
                    "unsaved": dataclasses.asdict(session.dirty),
                    "gates": gate_states,
                }
            )
            return 0

        renderer = _get_renderer(args)
        renderer.heading(session.status_label())
        renderer.blank()
        renderer.block(session.build_status_summary())
        renderer.section("Actions:")
        renderer.gates(gate_states)
        renderer.text(
            auto_fetch_interval_label(
                session.settings.auto_fetch_interval, enabled=session.auto_fetch_enabled
            )
        )
    return 0


def _cmd_action(args: argparse.Namespace) -> int:
    action = str(getattr(args, "action", ""))
    renderer = _get_renderer(args)
    confirm = None if _flag(args, "yes") else _prompt_confirm

    with _session_scope(args, notifier=LoggingNotifier(echo=renderer.text)) as session:
        outcome = asyncio.run(_run_action(session, action, confirm))
    if outcome is None or not outcome.success:
        return 1
    return 0


def _cmd_watch(args: argparse.Namespace) -> int:
    renderer = _get_renderer(args)
    auto_fetch = getattr(args, "auto_fetch", None)
    overrides = {"scm.auto_fetch_enabled": True} if auto_fetch else {}

    with _session_scope(
        args, notifier=LoggingNotifier(echo=renderer.text), extra_overrides=overrides
    ) as session:
        renderer.text(f"Watching {session.project_dir} (Ctrl-C to stop)")
        try:
            asyncio.run(_watch(session, renderer.text))
        except KeyboardInterrupt:
            renderer.text("Stopped.")
    return 0


def _cmd_config(args: argparse.Namespace) -> int:
    config = _load_effective_config(args)
    _get_renderer(args).block(dump_effective_config(config))
    return 0


def _cmd_tui(args: argparse.Namespace) -> int:
    from safesave.ui.tui import run_tui

    config = _load_effective_config(args)
    settings = SafeSaveSettings.from_config(config)
    logging_started = _start_logging(config, args, log_to_stderr=False)
    try:
        return run_tui(
            settings,
            _repo_root(args),
            dirty_source=_dirty_source(args),
            no_color=_flag(args, "no_color"),
        )
    finally:
        if logging_started:
            shutdown_logging()


# ---------------------------------------------------------------------------
# Async drivers
# ---------------------------------------------------------------------------


async def _run_action(
    session: EngineSession,
    action: str,
    confirm: Callable[[str], bool] | None,
) -> CommandOutcome | None:
    await session.refresh_and_wait()
    if action == "fetch":
        task = session.fetch()
    elif action == "pull":
        task = session.pull(confirm)
    elif action == "push":
        task = session.push(confirm)
    elif action == "update":
        task = session.update(confirm)
    else:
        raise CLIError(f"unknown action: {action}", exit_code=2)

    if task is None:
        return None
    outcome = await task
    await session.aggregator.wait_idle()
    return outcome


async def _watch(session: EngineSession, echo: Callable[[str], None]) -> None:
    stop = asyncio.Event()
    runner = asyncio.create_task(session.run(stop), name="safesave-watch")
    last_label: str | None = None
    try:
        while not runner.done():
            label = session.status_label()
            if session.snapshot().last_update is not None and label != last_label:
                echo(label)
                last_label = label
            await asyncio.sleep(0.5)
    finally:
        stop.set()
        await runner


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


@contextmanager
def _session_scope(
    args: argparse.Namespace,
    *,
    notifier: LoggingNotifier,
    extra_overrides: Mapping[str, object] | None = None,
) -> Iterator[EngineSession]:
    """Load config, start logging and yield a session; tear both down afterwards."""

    config = _load_effective_config(args, extra_overrides=extra_overrides)
    # The CLI reports status through its own output, not through change toasts.
    settings = dataclasses.replace(
        SafeSaveSettings.from_config(config), toast_on_status_change=False
    )
    logging_started = _start_logging(config, args, log_to_stderr=_flag(args, "verbose"))
    session = EngineSession(
        settings,
        _repo_root(args),
        dirty_source=_dirty_source(args),
        notifier=notifier,
    )
    try:
        yield session
    finally:
        session.close()
        if logging_started:
            shutdown_logging()


def _start_logging(
    config: Mapping[str, object], args: argparse.Namespace, *, log_to_stderr: bool
) -> bool:
    observability = config.get("observability")
    observability_map = observability if isinstance(observability, Mapping) else {}
    if not log_to_stderr and not observability_map.get("log_to_file", False):
        return False
    setup_logging(
        observability_map,
        session_id=uuid.uuid4().hex[:12],
        log_to_stderr=log_to_stderr,
        level_override="DEBUG" if _flag(args, "verbose") else None,
    )
    return True


def _dirty_source(args: argparse.Namespace) -> Callable[[], DirtyState]:
    count = max(0, int(getattr(args, "unsaved_count", 0) or 0))
    sample = str(getattr(args, "unsaved_sample", "") or "")
    state = DirtyState(has_unsaved_assets=count > 0, count=count, sample_name=sample)

    def current() -> DirtyState:
        return state

    return current


def _prompt_confirm(prompt: str) -> bool:
    try:
        answer = input(f"{prompt} [y/N] ")
    except EOFError:
        return False
    return answer.strip().lower() in {"y", "yes"}


def _emit_json(payload: Mapping[str, object]) -> None:
    """Emit a JSON payload to stdout with deterministic formatting."""

    print(json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False))


def _get_renderer(args: argparse.Namespace) -> CLIRenderer:
    """Retrieve or create a CLI renderer from the parsed namespace."""

    no_color = _flag(args, "no_color")
    verbose = _flag(args, "verbose")
    return create_renderer(no_color=no_color, verbose=verbose)


def _repo_root(args: argparse.Namespace) -> Path:
    raw = getattr(args, "repo_root", None)
    if not isinstance(raw, str) or not raw.strip():
        raise CLIError("repo_root must be a non-empty string", exit_code=2)
    candidate = Path(raw).expanduser().resolve()
    if not candidate.exists() or not candidate.is_dir():
        raise CLIError(f"repo root is not a directory: {candidate}", exit_code=2)
    return candidate


def _load_effective_config(
    args: argparse.Namespace,
    *,
    extra_overrides: Mapping[str, object] | None = None,
) -> dict[str, object]:
    config_path = getattr(args, "config_path", None)
    overrides: dict[str, object] = dict(extra_overrides or {})
    preferred = getattr(args, "preferred_provider", None)
    if isinstance(preferred, str):
        overrides["scm.preferred_provider"] = preferred

    try:
        loaded = load_config(config_path, cli_overrides=overrides)
    except (ConfigLoadError, ConfigValidationError) as exc:
        raise CLIError(str(exc), exit_code=2) from exc

    return {key: value for key, value in loaded.items()}


def _flag(args: argparse.Namespace, name: str) -> bool:
    return bool(getattr(args, name, False))


__all__ = ["CLIError", "build_parser", "main", "run_cli"]
