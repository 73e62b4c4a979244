"""
Force Merge CLI Package

A Rich-based CLI for checking node health and configuration of the
auto force-merge orchestrator.
"""

from .main import app
from _version import __version__, get_full_version, get_version_dict

__all__ = ["app", "__version__", "get_full_version", "get_version_dict"]
