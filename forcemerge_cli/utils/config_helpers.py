"""
Configuration helper utilities for the force-merge CLI

Functions to find and load configuration files.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Tuple

from forcemerge_orchestrator.config import (ForceMergeConfig,
                                            config_from_dict,
                                            get_default_config_path,
                                            load_force_merge_config)


def find_default_config() -> Optional[Path]:
    """Find the force-merge configuration file, or None when there is none."""
    default_paths = [
        get_default_config_path(),
        Path("config/force_merge_config.yaml"),
        Path("force_merge_config.yaml"),
    ]

    for config_path in default_paths:
        if config_path.exists():
            return config_path

    return None


def load_cli_config(config: Optional[str]) -> Tuple[ForceMergeConfig, Optional[Path]]:
    """
    Load the config named on the command line.

    An explicit path must exist. Without one the default file is used when
    present, otherwise built-in defaults with AFM_ overrides.
    """
    path = Path(config) if config else find_default_config()
    if path is None:
        return config_from_dict({}, source="<defaults>"), None
    return load_force_merge_config(path), path
