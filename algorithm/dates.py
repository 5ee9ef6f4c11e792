# SPDX-License-Identifier: GPL-3.0-or-later
"""
goal: turn the different ways Trend Micro stores a pattern (signature) date into one calendar date plus
an age in days.

encodings we see in the registry
• compact: "YYYYMMDD", exactly 8 ASCII digits (REG_SZ, or a REG_DWORD whose decimal form is 8 digits)
• filetime: Windows FILETIME, 100ns ticks since 1601-01-01 UTC (REG_QWORD, a digit string, or 8 raw bytes)
• epoch: Unix seconds since 1970-01-01 UTC

how the age is computed
compact dates have no time of day, so their age is the number of whole calendar days since the date
(today -> 0.0, ten days ago -> 10.0). filetime and epoch values are real timestamps, converted to local
time, and their age is fractional. everything is rounded half-up to one decimal and clamped at zero.

parse() never raises. a shape mismatch or a conversion error gives None and the caller moves on to
its next fallback.
"""

from __future__ import annotations  # lets us use string annotations before classes are defined

import logging  # for the diagnostic trace
import re  # for the strict 8-digit shape check
from collections.abc import Callable  # type hint for the injectable clock
from datetime import date, datetime  # calendar dates and local timestamps
from decimal import ROUND_HALF_UP, Decimal  # for half-up rounding to one decimal
from enum import Enum  # for the encoding hint
from typing import Any, NamedTuple  # flexible raw registry values, small result tuple

log = logging.getLogger("tmprobe.dates")

_COMPACT_RE = re.compile(r"[0-9]{8}")  # ASCII digits only, no unicode digits
_FILETIME_EPOCH_DELTA = 11_644_473_600  # seconds between 1601-01-01 and 1970-01-01
_FILETIME_TICKS = 10_000_000  # 100ns ticks per second
_SECONDS_PER_DAY = 86_400

Clock = Callable[[], datetime]


class DateEncoding(Enum):
    COMPACT = "compact"
    FILETIME = "filetime"
    EPOCH = "epoch"


class ParsedDate(NamedTuple):
    date: date
    age_days: float


def round_age(days: float) -> float:
    """round half-up to one decimal, never below zero."""
    if days <= 0:
        return 0.0
    return float(Decimal(repr(days)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def _as_int(raw: Any) -> int | None:
    if isinstance(raw, bool):  # bool is an int subclass, but never a timestamp
        return None
    if isinstance(raw, int):
        return raw
    if isinstance(raw, (bytes, bytearray)):
        if len(raw) < 8:
            return None
        return int.from_bytes(bytes(raw[:8]), "little")  # REG_BINARY FILETIME
    if isinstance(raw, str):
        s = raw.strip()
        if s.isascii() and s.isdigit():
            return int(s)
    return None


class DateNormalizer:
    """parses raw registry values into (date, age_days). now is injectable so ages are testable."""

    def __init__(self, now: Clock | None = None) -> None:
        self._now = now or datetime.now  # local wall clock by default

    def parse(self, raw: Any, encoding: DateEncoding) -> ParsedDate | None:
        try:
            if encoding is DateEncoding.COMPACT:
                return self._parse_compact(raw)
            if encoding is DateEncoding.FILETIME:
                ticks = _as_int(raw)
                if ticks is None or ticks <= 0:
                    return None
                seconds = (ticks - _FILETIME_EPOCH_DELTA * _FILETIME_TICKS) / _FILETIME_TICKS
                return self._from_timestamp(seconds)
            if encoding is DateEncoding.EPOCH:
                seconds = _as_int(raw)
                if seconds is None or seconds <= 0:
                    return None
                return self._from_timestamp(seconds)
        except Exception as e:  # overflow, out of range, bad month/day, etc
            log.debug("date parse failed (%s, %r): %s", encoding.value, raw, e)
        return None

    def _parse_compact(self, raw: Any) -> ParsedDate | None:
        if isinstance(raw, bool):
            return None
        text = str(raw).strip() if isinstance(raw, int) else raw
        if not isinstance(text, str) or not _COMPACT_RE.fullmatch(text):
            return None
        parsed = date(int(text[0:4]), int(text[4:6]), int(text[6:8]))  # YYYY MM DD
        today = self._now().date()
        return ParsedDate(parsed, round_age(float((today - parsed).days)))

    def _from_timestamp(self, seconds: float) -> ParsedDate:
        stamp = datetime.fromtimestamp(seconds)  # local calendar time
        elapsed = (self._now() - stamp).total_seconds() / _SECONDS_PER_DAY
        return ParsedDate(stamp.date(), round_age(elapsed))
