"""Executable discovery utilities for Zazzy.

Plugins are plain executables. They are looked up in the site's
configuration directory first and then on the system PATH, so a local
plugin shadows a system command of the same name.

Functions:
    find_executable: Locate an executable in a local folder or PATH.
"""

from __future__ import annotations

import os
import shutil
from pathlib import Path


def find_executable(name: str, local_dir: Path | None = None) -> str | None:
    """Find an executable in a local folder or PATH.

    Args:
        name: Name of the executable to find (e.g., 'prehook', 'date').
        local_dir: Optional folder searched before PATH.

    Returns:
        Full path to the executable if found, None otherwise.

    Examples:
        >>> find_executable('date')  # System PATH lookup
        '/usr/bin/date'

        >>> find_executable('prehook', Path('/my/site/.zazzy'))  # Local plugin
        '/my/site/.zazzy/prehook'
    """
    if local_dir is not None:
        local = local_dir / name
        if local.is_file() and os.access(local, os.X_OK):
            return str(local)

    return shutil.which(name)
