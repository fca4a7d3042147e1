"""Config file discovery and the default template.

Walk-up finder locates workforce.toml, similar to how git finds .git/.
Supports the WORKFORCE_CONFIG env var and --config CLI flag overrides.
"""

from __future__ import annotations

import os
from pathlib import Path

CONFIG_FILENAME = "workforce.toml"
CONFIG_ENV_VAR = "WORKFORCE_CONFIG"


def find_config(start: Path | None = None) -> Path | None:
    """Walk up from *start* (default: cwd) looking for workforce.toml.

    Returns the path to the config file, or None if not found.
    Checks WORKFORCE_CONFIG env var first.
    """
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        p = Path(env_path)
        return p if p.is_file() else None

    current = (start or Path.cwd()).resolve()
    while True:
        candidate = current / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
        if current.parent == current:
            return None
        current = current.parent


DEFAULT_CONFIG = """\
# workforce configuration. Every key is optional; defaults apply when absent.

[store]
# db_name = "workforce.db"
# conflict_retries = 3

[events]
# sync = false
# max_retries = 3

[leave]
# cancellation_window_hours = 24
# accrual_rates = { Vacation = "2.0", Sick = "1.0", Personal = "0.5" }
# max_carry_over = { Vacation = "5" }

[team]
# default_max_size = 12
"""


def write_default_config(root: Path) -> tuple[Path, bool]:
    """Write a commented workforce.toml into *root* unless one exists.

    Returns the config path and whether it was created.
    """
    path = root / CONFIG_FILENAME
    if path.exists():
        return path, False
    root.mkdir(parents=True, exist_ok=True)
    path.write_text(DEFAULT_CONFIG, encoding="utf-8")
    return path, True
