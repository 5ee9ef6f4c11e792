# SPDX-License-Identifier: GPL-3.0-or-later
"""
goal: walk a variant's field chains against the registry and build one FactSet.

each fact (version, realtime flag, signature date) has an ordered chain of (subkey, value name) pairs
and every chain is tried under each config root in turn. the first lookup that gives a usable value
wins and nothing later can overwrite it. a lookup that raises or returns nothing is just a miss, and
so is a date that fails to parse. extraction always finishes with whatever it could find.
"""

from __future__ import annotations  # lets us use string annotations before classes are defined

import logging  # for the diagnostic trace
from collections.abc import Callable, Iterable, Sequence  # type hints for lookups and chains
from datetime import date  # type for the signature date
from typing import Any, TypeVar  # flexible registry values, generic lookup results

from agent.facts import FactSet, ProductVariant
from agent.profiles import PROFILES, Deployment, FieldRef, get_deployment, service_names_for
from agent.registry import ConfigSource
from agent.services import ServiceProbe, any_running
from algorithm.dates import DateNormalizer, ParsedDate

log = logging.getLogger("tmprobe.extract")

C = TypeVar("C")
T = TypeVar("T")

_TRUE_WORDS = {"1", "true", "yes", "on", "enabled"}
_FALSE_WORDS = {"0", "false", "no", "off", "disabled"}


def attempt(lookup: Callable[[], T | None], label: str = "lookup") -> T | None:
    """run one lookup; an exception is the same as finding nothing."""
    try:
        return lookup()
    except Exception as e:
        log.debug("%s raised %s: %s", label, type(e).__name__, e)
        return None


def first_result(
    candidates: Iterable[C], lookup: Callable[[C], T | None]
) -> tuple[C, T] | None:
    """try candidates in order, return the first (candidate, value) whose lookup gives a value."""
    for candidate in candidates:
        value = attempt(lambda: lookup(candidate), label=str(candidate))
        if value is not None:
            return candidate, value
    return None


def to_bool(value: Any) -> bool | None:
    # registry flags show up as DWORDs, digit strings, or words. any other present value still
    # fixes the flag through its truthiness, only None is a miss
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value != 0
    if isinstance(value, str):
        word = value.strip().lower()
        if word in _TRUE_WORDS:
            return True
        if word in _FALSE_WORDS:
            return False
        if word.lstrip("-").isdigit():
            return int(word) != 0
    if isinstance(value, (bytes, bytearray)):
        return any(value)  # REG_BINARY, all zero bytes means off
    return bool(value)


def to_version(value: Any) -> str | None:
    if isinstance(value, (list, tuple)):  # REG_MULTI_SZ, the first entry is the version
        value = value[0] if value else None
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (bytes, bytearray)):
        return None
    text = str(value).strip()
    return text or None


class _FactBuilder:
    """collects facts during one extraction. every field is write-once."""

    def __init__(self, variant: ProductVariant) -> None:
        self.variant = variant
        self.version: str | None = None
        self.realtime: bool | None = None
        self.signature: ParsedDate | None = None
        self.service_running = False

    def set_version(self, version: str) -> None:
        if self.version is None:
            self.version = version

    def set_realtime(self, enabled: bool) -> None:
        if self.realtime is None:  # a recorded False sticks too
            self.realtime = enabled

    def set_signature(self, parsed: ParsedDate) -> None:
        if self.signature is None:
            self.signature = parsed

    def build(self) -> FactSet:
        sig_date: date | None = self.signature.date if self.signature else None
        sig_age = self.signature.age_days if self.signature else None
        return FactSet(
            version=self.version or "Unknown",
            realtime_protection_enabled=bool(self.realtime),
            signature_date=sig_date,
            signature_age_days=sig_age,
            installed=True,
            service_running=self.service_running,
            variant=self.variant,
        )


class FactExtractor:
    def __init__(
        self,
        deployment: Deployment | None = None,
        service_names: Sequence[str] = (),
        normalizer: DateNormalizer | None = None,
    ) -> None:
        self.deployment = deployment or get_deployment(None)
        self.service_names = tuple(service_names)  # explicit override, empty = profile default
        self.normalizer = normalizer or DateNormalizer()

    def extract(self, variant: ProductVariant, cfg: ConfigSource, svc: ServiceProbe) -> FactSet:
        profile = PROFILES.get(variant)
        if profile is None:  # nothing installed, nothing to report
            return FactSet.not_installed()

        builder = _FactBuilder(variant)

        def read(root: str, ref: FieldRef) -> Any | None:
            where = ref.location(root)
            value = cfg.read(where, ref.name)
            log.debug(
                "registry %s\\%s -> %s", where, ref.name, "miss" if value is None else repr(value)
            )
            return value

        def chain(refs: Sequence[FieldRef]) -> list[tuple[str, FieldRef]]:
            # roots outer, refs inner: the first root that yields a field wins
            return [(root, ref) for root in profile.roots for ref in refs]

        hit = first_result(
            chain(profile.version_chain), lambda c: to_version(read(*c))
        )
        if hit:
            builder.set_version(hit[1])

        hit = first_result(chain(profile.realtime_chain), lambda c: to_bool(read(*c)))
        if hit:
            builder.set_realtime(hit[1])

        def parse_signature(c: tuple[str, FieldRef]) -> ParsedDate | None:
            raw = read(*c)
            if raw is None or c[1].encoding is None:
                return None
            return self.normalizer.parse(raw, c[1].encoding)

        hit = first_result(chain(profile.signature_chain), parse_signature)
        if hit:
            (root, ref), parsed = hit
            log.debug(
                "signature date %s from %s (%s), age %.1f days",
                parsed.date.isoformat(),
                ref.name,
                ref.encoding.value if ref.encoding else "?",
                parsed.age_days,
            )
            builder.set_signature(parsed)

        names = service_names_for(variant, self.deployment, self.service_names)
        builder.service_running = any_running(svc, names)

        facts = builder.build()
        log.debug("facts: %s", facts)
        return facts
