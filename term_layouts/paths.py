"""Working directory resolution for replayed terminals."""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Mapping

ENV_VAR_PATTERN = re.compile(r"\$\{env:([^}]+)\}", re.IGNORECASE)


def expand_env_vars(text: str, environ: Mapping[str, str] | None = None) -> str:
    """Replace ``${env:NAME}`` tokens with environment values.

    Unset variables expand to an empty string.

    Args:
        text: String possibly containing ``${env:NAME}`` tokens.
        environ: Environment to read from (default: os.environ).

    Returns:
        The expanded string.
    """
    if not text:
        return text
    env = os.environ if environ is None else environ

    def replace(match: re.Match[str]) -> str:
        return env.get(match.group(1), "")

    return ENV_VAR_PATTERN.sub(replace, text)


def resolve_working_directory(
    cwd: str | None,
    workspace_root: str | Path | None,
    environ: Mapping[str, str] | None = None,
) -> Path | None:
    """Resolve a layout's working directory to an absolute path.

    Absolute paths are returned as-is; relative ones are joined to the
    workspace root. Returns None when ``cwd`` is empty or relative with no
    workspace root to resolve against.
    """
    if not cwd:
        return None

    expanded = Path(expand_env_vars(cwd, environ)).expanduser()
    if expanded.is_absolute():
        return expanded

    if workspace_root is None:
        return None
    return (Path(workspace_root).expanduser() / expanded).resolve()
