# SPDX-License-Identifier: GPL-3.0-or-later
"""
goal: reduce a FactSet to one health verdict.

rules are evaluated in order and the first match wins, so they go from most to least severe:
not installed > service stopped > outdated signatures > realtime disabled > ok.
a host with several problems at once always reports the most severe one.

some deployments only want a coarse "something is off" signal. with warning_bucket on, the two
soft verdicts (outdated signatures, realtime disabled) are reported as WARNING instead. the order
of evaluation does not change.
"""

from __future__ import annotations  # lets us use string annotations before classes are defined

import logging  # for the diagnostic trace
from collections.abc import Callable  # type hint for rule predicates
from enum import Enum  # for the verdict tag

from agent.facts import FactSet

log = logging.getLogger("tmprobe.health")

DEFAULT_THRESHOLD_DAYS = 7.0


class HealthVerdict(Enum):
    OK = "OK"
    WARNING = "WARNING"
    REALTIME_DISABLED = "REALTIME_DISABLED"
    SERVICE_STOPPED = "SERVICE_STOPPED"
    OUTDATED_SIGNATURES = "OUTDATED_SIGNATURES"
    NOT_INSTALLED = "NOT_INSTALLED"
    ERROR = "ERROR"


_SOFT_VERDICTS = {HealthVerdict.OUTDATED_SIGNATURES, HealthVerdict.REALTIME_DISABLED}

Rule = tuple[str, Callable[[FactSet], bool], HealthVerdict]


class HealthClassifier:
    def __init__(
        self, threshold_days: float = DEFAULT_THRESHOLD_DAYS, warning_bucket: bool = False
    ) -> None:
        self.threshold_days = threshold_days  # signatures older than this are outdated
        self.warning_bucket = warning_bucket
        self.rules: list[Rule] = [
            ("not installed", lambda fs: not fs.installed, HealthVerdict.NOT_INSTALLED),
            ("service stopped", lambda fs: not fs.service_running, HealthVerdict.SERVICE_STOPPED),
            ("signatures outdated", self._outdated, HealthVerdict.OUTDATED_SIGNATURES),
            (
                "realtime disabled",
                lambda fs: not fs.realtime_protection_enabled,
                HealthVerdict.REALTIME_DISABLED,
            ),
        ]

    def _outdated(self, fs: FactSet) -> bool:
        # unknown age never counts as outdated
        return fs.signature_age_days is not None and fs.signature_age_days > self.threshold_days

    def classify(self, fs: FactSet) -> HealthVerdict:
        verdict = HealthVerdict.OK  # default if no rule matches
        for name, matches, outcome in self.rules:  # first match wins
            if matches(fs):
                log.debug("rule matched: %s", name)
                verdict = outcome
                break
        if self.warning_bucket and verdict in _SOFT_VERDICTS:
            verdict = HealthVerdict.WARNING
        log.debug("verdict: %s", verdict.value)
        return verdict
