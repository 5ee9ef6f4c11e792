# SPDX-License-Identifier: GPL-3.0-or-later
"""
goal: turn the final facts and verdict into the one-line JSON status record the monitoring platform
ingests. every key is always present; unknown values use "Unknown" / -1 / 0.
"""

from __future__ import annotations  # lets us use string annotations before classes are defined

import json  # for the compact output line
from typing import Any, TextIO  # flexible record values, output stream

from agent.facts import FactSet
from algorithm.health import HealthVerdict


def build_record(
    facts: FactSet, verdict: HealthVerdict, include_product_type: bool = True
) -> dict[str, Any]:
    record: dict[str, Any] = {
        "health_status": verdict.value,
        "version": facts.version,
        "installed": int(facts.installed),
        "service_running": int(facts.service_running),
        "realtime_protection": int(facts.realtime_protection_enabled),
        "signature_age": (
            facts.signature_age_days if facts.signature_age_days is not None else -1
        ),
        "last_update": facts.signature_date.isoformat() if facts.signature_date else "Unknown",
    }
    if include_product_type:  # only the multi-variant build reports which flavor it found
        record["product_type"] = facts.variant.label
    return record


def error_record(message: str, include_product_type: bool = True) -> dict[str, Any]:
    """ERROR record with every fact reset to its default plus the raw failure message."""
    record = build_record(FactSet.not_installed(), HealthVerdict.ERROR, include_product_type)
    record["error"] = message
    return record


def emit(record: dict[str, Any], stream: TextIO) -> None:
    # ASCII only, a Windows pipe encodes stdout with the ANSI code page
    stream.write(json.dumps(record, separators=(",", ":")) + "\n")
    stream.flush()
