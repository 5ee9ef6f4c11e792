# SPDX-License-Identifier: GPL-3.0-or-later
"""
goal: read-only access to the Windows registry (HKEY_LOCAL_MACHINE) and to install-path existence.
a missing key, a missing value, a permission problem or a non-Windows host all come back as None / False,
never as an exception, so the fact extractor can just move on to its next fallback.
"""

from __future__ import annotations  # lets us use string annotations before classes are defined

import logging  # for the diagnostic trace
import os  # for expanding %ProgramFiles% style variables and checking paths
import pathlib  # for normalizing path separators
import sys  # for checking if we are on Windows
from typing import Any, Protocol  # flexible registry values, collaborator interface

log = logging.getLogger("tmprobe.registry")


class ConfigSource(Protocol):
    def exists(self, path: str) -> bool: ...

    def read(self, path: str, key: str) -> Any | None: ...


def normalize_path(raw: str) -> str:
    """expand %ENVVARS% and ~ and normalize slashes."""
    expanded = os.path.expandvars(os.path.expanduser(raw))
    return str(pathlib.Path(expanded))


class RegistryConfigSource:
    """ConfigSource backed by winreg. reads always use the 64-bit view so WOW6432Node paths stay literal."""

    def exists(self, path: str) -> bool:
        try:
            resolved = normalize_path(path)
            found = os.path.exists(resolved)
        except (OSError, ValueError):  # bad characters, unreadable parent, etc
            found = False
        log.debug("path %s -> %s", path, "found" if found else "missing")
        return found

    def read(self, path: str, key: str) -> Any | None:
        if sys.platform != "win32":  # no registry to read
            return None
        import winreg  # only importable on Windows

        try:
            with winreg.OpenKey(
                winreg.HKEY_LOCAL_MACHINE,
                path,
                0,
                winreg.KEY_READ | winreg.KEY_WOW64_64KEY,
            ) as handle:
                value, _kind = winreg.QueryValueEx(handle, key)
        except OSError:  # FileNotFoundError for missing key/value, PermissionError, etc
            return None
        if value is None or value == "":
            return None
        return value
