"""Configuration loading for ForceMergeConfig."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import ValidationError

from ..exceptions import InvalidConfigurationError
from .paths import get_default_config_path
from .settings import ForceMergeConfig


def _lower_keys(d: Dict[str, Any]) -> Dict[str, Any]:
    """Normalize dictionary keys to lowercase."""
    return {k.lower(): v for k, v in d.items()}


def _apply_env_overrides(cfg: Dict[str, Any], env: Dict[str, str], prefix: str) -> None:
    """Apply simple env overrides using DOUBLE-UNDERSCORE path syntax.

    Example: AFM_THRESHOLDS__CPU_THRESHOLD_PERCENT=70 overrides thresholds.cpu_threshold_percent
    """
    plen = len(prefix)
    for key, value in env.items():
        if not key.startswith(prefix):
            continue
        path = key[plen:].lower().split("__")
        cur: Any = cfg
        for part in path[:-1]:
            if part not in cur or not isinstance(cur[part], dict):
                cur[part] = {}
            cur = cur[part]
        # Basic type coercion for ints/bools/floats
        leaf = path[-1]
        if value.lower() in {"true", "false"}:
            cur[leaf] = value.lower() == "true"
        else:
            try:
                if "." in value:
                    cur[leaf] = float(value)
                else:
                    cur[leaf] = int(value)
            except ValueError:
                cur[leaf] = value


def load_force_merge_config(
    path: Optional[Path | str] = None,
    *,
    env_overrides: bool = True,
    env: Optional[Dict[str, str]] = None,
    env_prefix: str = "AFM_",
) -> ForceMergeConfig:
    """Load YAML config and return a typed `ForceMergeConfig`.

    - Falls back to the default config path when `path` is None
    - Optionally applies environment variable overrides
    """
    p = Path(path) if path is not None else get_default_config_path()
    if not p.exists():
        raise FileNotFoundError(f"Config file not found: {p}")

    with open(p, "r") as fh:
        raw = yaml.safe_load(fh) or {}

    if not isinstance(raw, dict):
        raise InvalidConfigurationError(
            "Top-level YAML document must be a mapping", config_path=str(p)
        )

    return config_from_dict(
        raw, env_overrides=env_overrides, env=env, env_prefix=env_prefix, source=str(p)
    )


def config_from_dict(
    raw: Dict[str, Any],
    *,
    env_overrides: bool = True,
    env: Optional[Dict[str, str]] = None,
    env_prefix: str = "AFM_",
    source: Optional[str] = None,
) -> ForceMergeConfig:
    """Validate an already parsed config mapping, e.g. `{}` for built-in defaults."""
    # Normalize to lowercase keys at top level for resilience
    data = _lower_keys(raw)

    if env_overrides:
        _apply_env_overrides(data, env if env is not None else dict(os.environ), env_prefix)

    try:
        return ForceMergeConfig(**data)
    except ValidationError as e:
        raise InvalidConfigurationError(
            f"Invalid force merge configuration: {e}", config_path=source
        ) from e
