"""Config template creation."""

from __future__ import annotations

from dataclasses import asdict
from pathlib import Path

import yaml

from .loader import default_config_path
from .models import RedFoxConfig

_HEADER = """\
# RedFox configuration.
# Environment variables (REDFOX_THREADS, REDFOX_RATE_LIMIT, ...) override these values.
# scanning.rate_limit is in attempts per second across all workers; 0 disables throttling.
# scanning.allowed_targets restricts scans to hosts, *.domains, IPs or CIDR ranges
# covered by your engagement; an empty list applies no restriction.
"""


def config_as_dict(config: RedFoxConfig) -> dict:
    """Return the config sections as a plain mapping."""
    data = asdict(config)
    data.pop("source", None)
    return data


def create_global_config(path: Path | None = None, force: bool = False) -> Path:
    """Write a config file with default values if it doesn't exist."""
    config_path = path or default_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)

    if config_path.exists() and not force:
        return config_path

    defaults = config_as_dict(RedFoxConfig())
    with open(config_path, "w", encoding="utf-8") as f:
        f.write(_HEADER)
        yaml.safe_dump(defaults, f, default_flow_style=False, sort_keys=False)

    return config_path
