# SPDX-License-Identifier: GPL-3.0-or-later
"""
goal: ask Windows whether a named service is running. uses psutil's service API so we never shell out
to sc.exe. the probe only reports state; it never starts, stops or reconfigures anything.
"""

from __future__ import annotations  # lets us use string annotations before classes are defined

import logging  # for the diagnostic trace
import sys  # for checking if we are on Windows
from collections.abc import Iterable  # type hint for service name lists
from enum import Enum  # for the run-state tag
from typing import Protocol  # collaborator interface

import psutil  # library for querying Windows services

log = logging.getLogger("tmprobe.services")


class ServiceState(Enum):
    RUNNING = "running"
    STOPPED = "stopped"
    NOT_FOUND = "not_found"
    ERROR = "error"


class ServiceProbe(Protocol):
    def status(self, name: str) -> ServiceState: ...


class PsutilServiceProbe:
    """ServiceProbe backed by psutil.win_service_get. anything but "running" counts as stopped."""

    def status(self, name: str) -> ServiceState:
        if sys.platform != "win32":  # no service control manager to ask
            return ServiceState.NOT_FOUND
        try:
            raw = psutil.win_service_get(name).status()
        except psutil.NoSuchProcess:  # psutil raises this for unknown service names
            return ServiceState.NOT_FOUND
        except (psutil.Error, OSError) as e:  # access denied, SCM unavailable
            log.debug("service %s query failed: %s", name, e)
            return ServiceState.ERROR
        return ServiceState.RUNNING if raw == "running" else ServiceState.STOPPED


def any_running(probe: ServiceProbe, names: Iterable[str]) -> bool:
    """True if at least one of the names reports RUNNING. query failures count as not running."""
    running = False
    for name in names:
        try:
            state = probe.status(name)
        except Exception as e:  # a misbehaving probe is the same as "not running"
            log.debug("service %s probe raised: %s", name, e)
            state = ServiceState.ERROR
        log.debug("service %s -> %s", name, state.value)
        if state is ServiceState.RUNNING:
            running = True  # keep going so every name shows up in the trace
    return running
