# SPDX-License-Identifier: GPL-3.0-or-later
"""
goal: declarative per-variant tables. each supported agent flavor lists where it installs, which registry
values hold its version / realtime flag / signature date (in fallback order), and which services it runs.
the extractor walks these tables instead of carrying a separate code path per product.

deployment profiles decide which variants are considered and which service names count as "running".
"""

from __future__ import annotations  # lets us use string annotations before classes are defined

from collections.abc import Sequence  # type hint for service name overrides
from dataclasses import dataclass  # for the immutable table rows

from agent.facts import ProductVariant
from algorithm.dates import DateEncoding

# base registry roots under HKEY_LOCAL_MACHINE, 32-bit compat first, then native
CONFIG_ROOTS: tuple[str, ...] = (
    r"SOFTWARE\WOW6432Node\TrendMicro\PC-cillinNTCorp\CurrentVersion",
    r"SOFTWARE\TrendMicro\PC-cillinNTCorp\CurrentVersion",
)


@dataclass(frozen=True)
class FieldRef:
    """one entry of a field chain: a subkey relative to a config root plus a value name."""

    subkey: str  # "" means the root itself
    name: str
    encoding: DateEncoding | None = None  # only used by signature chains

    def location(self, root: str) -> str:
        return f"{root}\\{self.subkey}" if self.subkey else root


@dataclass(frozen=True)
class VariantProfile:
    variant: ProductVariant
    install_paths: tuple[str, ...]
    version_chain: tuple[FieldRef, ...]
    realtime_chain: tuple[FieldRef, ...]
    signature_chain: tuple[FieldRef, ...]
    canonical_service: str
    roots: tuple[str, ...] = CONFIG_ROOTS


_REALTIME_CHAIN = (
    FieldRef("Real Time Scan Configuration", "Enable"),
    FieldRef("", "RealTimeScanOn"),  # legacy flag
)

_SIGNATURE_CHAIN = (
    FieldRef("Misc.", "PatternDate", DateEncoding.COMPACT),
    FieldRef("", "PatternDate", DateEncoding.COMPACT),
    FieldRef("Misc.", "PatternUpdateTime", DateEncoding.FILETIME),
    FieldRef("Misc.", "LastUpdateTime", DateEncoding.EPOCH),
)

# dict order is detection priority: WFBS wins when both are present
PROFILES: dict[ProductVariant, VariantProfile] = {
    ProductVariant.WFBS: VariantProfile(
        variant=ProductVariant.WFBS,
        install_paths=(
            r"%ProgramFiles(x86)%\Trend Micro\Security Agent",
            r"%ProgramFiles%\Trend Micro\Security Agent",
            r"%ProgramFiles(x86)%\Trend Micro\Client Server Security Agent",
            r"%ProgramFiles%\Trend Micro\Client Server Security Agent",
        ),
        version_chain=(
            FieldRef("Misc.", "TmListen_Ver"),
            FieldRef("", "Application Version"),
            FieldRef("", "Version"),
        ),
        realtime_chain=_REALTIME_CHAIN,
        signature_chain=_SIGNATURE_CHAIN,
        canonical_service="ntrtscan",
    ),
    ProductVariant.CLIENT_SERVER: VariantProfile(
        variant=ProductVariant.CLIENT_SERVER,
        install_paths=(
            r"%ProgramFiles(x86)%\Trend Micro\OfficeScan Client",
            r"%ProgramFiles%\Trend Micro\OfficeScan Client",
        ),
        version_chain=(
            FieldRef("Misc.", "ProgramVer"),
            FieldRef("Misc.", "TmListen_Ver"),
            FieldRef("", "Version"),
        ),
        realtime_chain=_REALTIME_CHAIN,
        signature_chain=_SIGNATURE_CHAIN,
        canonical_service="TmListen",
    ),
}


@dataclass(frozen=True)
class Deployment:
    name: str
    variants: tuple[ProductVariant, ...]
    service_names: tuple[str, ...]  # empty means "the variant's canonical service"
    emit_product_type: bool


DEPLOYMENTS: dict[str, Deployment] = {
    "universal": Deployment(
        name="universal",
        variants=(ProductVariant.WFBS, ProductVariant.CLIENT_SERVER),
        service_names=(),
        emit_product_type=True,
    ),
    "wfbs": Deployment(
        name="wfbs",
        variants=(ProductVariant.WFBS,),
        service_names=("ntrtscan", "TmListen", "TMBMServer", "TmCCSF"),
        emit_product_type=False,
    ),
}


def get_deployment(name: str | None) -> Deployment:
    # unknown names fall back to the multi-variant profile
    return DEPLOYMENTS.get((name or "").strip().lower(), DEPLOYMENTS["universal"])


def path_table(deployment: Deployment) -> dict[ProductVariant, tuple[str, ...]]:
    """install path candidates per variant, in detection priority order."""
    return {v: PROFILES[v].install_paths for v in PROFILES if v in deployment.variants}


def service_names_for(
    variant: ProductVariant, deployment: Deployment, override: Sequence[str] = ()
) -> tuple[str, ...]:
    if override:  # explicit configuration beats every profile
        return tuple(override)
    if deployment.service_names:
        return deployment.service_names
    profile = PROFILES.get(variant)
    return (profile.canonical_service,) if profile else ()
