"""Writable directories used by nestedtree."""

import os
import sys
from pathlib import Path
from typing import Optional


def get_log_dir(override: Optional[str] = None) -> Path:
    """
    Returns a writable directory for logs, creating it when missing.

    Args:
        override: Directory configured by the caller (TreeConfig.log_dir).
                  The per-platform default is used when it is not set.
    """
    if override:
        log_dir = Path(override).expanduser()
    elif sys.platform == "darwin":
        log_dir = Path.home() / "Library" / "Logs" / "nestedtree"
    elif sys.platform == "win32":
        log_dir = Path(os.environ.get("LOCALAPPDATA", Path.home())) / "nestedtree" / "logs"
    else:
        log_dir = Path.home() / ".nestedtree" / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir
