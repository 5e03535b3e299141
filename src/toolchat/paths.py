"""Common path utilities for toolchat."""

from __future__ import annotations

import os
from pathlib import Path


def get_toolchat_home() -> Path:
    """Return the base toolchat directory, honoring TOOLCHAT_HOME if set."""

    env_path = os.environ.get("TOOLCHAT_HOME")
    return Path(env_path).expanduser() if env_path else Path.home() / ".toolchat"


__all__ = ["get_toolchat_home"]
