# flairc/env.py
"""
flairc.env
==========

Single source-of-truth for:

• Project-root discovery (cwd, overridable once per process)
• Standard *project-local* tree
      <project>/.flair
      <project>/.flair/settings
      <project>/.flair/logs
• Log-directory override via FLAIR_LOGS_DIR (used by CI and the test-suite)
"""

from __future__ import annotations

import os
from pathlib import Path
from threading import Lock


# ──────────────────────────────────────────────────────────────
# internal state
# ──────────────────────────────────────────────────────────────
_LOCK = Lock()
_PROJECT_ROOT: Path = Path.cwd().resolve()  # locked-in once per process


# ──────────────────────────────────────────────────────────────
# project root helpers
# ──────────────────────────────────────────────────────────────
def set_project_root(path: Path) -> None:
    """Change the canonical project root."""
    global _PROJECT_ROOT
    with _LOCK:
        _PROJECT_ROOT = Path(path).resolve()


def get_project_root() -> Path:  # hot-path – keep ultra-cheap
    return _PROJECT_ROOT


# ──────────────────────────────────────────────────────────────
# project-local directory helpers
# ──────────────────────────────────────────────────────────────
def _ensure_dir(p: Path) -> Path:
    p.mkdir(parents=True, exist_ok=True)
    return p


def get_dot_flair() -> Path:
    """`<project>/.flair` – lazily created on first call."""
    return _ensure_dir(get_project_root() / ".flair")


def get_settings_dir() -> Path:
    """`<project>/.flair/settings` – preferences.yml lives here."""
    return get_project_root() / ".flair" / "settings"


def get_logs_root() -> Path:
    """
    `$FLAIR_LOGS_DIR` when set, otherwise `<project>/.flair/logs`.
    """
    custom = os.getenv("FLAIR_LOGS_DIR")
    if custom:
        return _ensure_dir(Path(custom).expanduser().resolve())
    return _ensure_dir(get_dot_flair() / "logs")


def resolve_path(value: str | Path) -> Path:
    """Expand `~` and anchor relative paths at the project root."""
    p = Path(value).expanduser()
    if not p.is_absolute():
        p = get_project_root() / p
    return p.resolve()
