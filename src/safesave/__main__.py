"""Module entrypoint for ``python -m safesave``."""

from __future__ import annotations

from safesave.main import cli_entrypoint

if __name__ == "__main__":
    raise SystemExit(cli_entrypoint())
