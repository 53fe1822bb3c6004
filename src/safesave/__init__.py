"""
safesave — unified source-control status for a local working copy.

File: src/safesave/__init__.py

Purpose
- Package root. Probes Git or Plastic SCM, normalizes the result into one
  status snapshot, and gates fetch/pull/push/update on that snapshot.

Import boundary
- Must not have side effects at import time (no config loading, no logging init).
- Heavy or optional modules (Textual) are imported lazily by the UI layer.
"""

__version__ = "0.3.0"

__all__ = ["__version__"]
