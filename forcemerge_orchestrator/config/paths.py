"""Path utilities for configuration management."""

from __future__ import annotations

import os
from pathlib import Path


def get_project_root() -> Path:
    """Get project root directory.

    Returns:
        Path: Absolute path to project root
    """
    # This file lives at forcemerge_orchestrator/config/paths.py
    return Path(__file__).resolve().parent.parent.parent


def get_default_config_path() -> Path:
    """Get the force-merge config path with environment variable support.

    Uses FORCEMERGE_CONFIG when set, otherwise config/force_merge_config.yaml
    under the project root.

    Returns:
        Path: Absolute path to the configuration file
    """
    configured = os.getenv("FORCEMERGE_CONFIG")
    if configured:
        return Path(configured).resolve()
    return get_project_root() / "config" / "force_merge_config.yaml"
