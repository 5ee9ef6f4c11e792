# SPDX-License-Identifier: GPL-3.0-or-later
"""
goal: data model for one probe run. ProductVariant tags which Trend Micro agent flavor is installed,
FactSet is the normalized, immutable observation record that the health classifier reads.
"""

from __future__ import annotations  # lets us use string annotations before classes are defined

from dataclasses import dataclass  # for the immutable fact record
from datetime import date  # type for the signature build date
from enum import Enum  # for the variant tag


class ProductVariant(Enum):
    WFBS = "WFBS"  # Worry-Free Business Security agent
    CLIENT_SERVER = "Client_Server"  # OfficeScan / Apex One client-server agent
    NONE = "Unknown"  # nothing supported is installed

    @property
    def label(self) -> str:
        # the string that goes into the product_type output field
        return self.value


@dataclass(frozen=True)
class FactSet:
    """normalized facts about the installed agent. built once per run, read-only afterwards."""

    version: str = "Unknown"
    realtime_protection_enabled: bool = False
    signature_date: date | None = None
    signature_age_days: float | None = None  # present iff signature_date is present
    installed: bool = False
    service_running: bool = False
    variant: ProductVariant = ProductVariant.NONE

    def __post_init__(self) -> None:
        if (self.signature_date is None) != (self.signature_age_days is None):
            raise ValueError("signature_date and signature_age_days must be set together")
        if self.signature_age_days is not None and self.signature_age_days < 0:
            raise ValueError("signature_age_days must be non-negative")

    @classmethod
    def not_installed(cls) -> FactSet:
        # no partial facts for a product that is not there
        return cls()
