# SPDX-License-Identifier: GPL-3.0-or-later
"""
goal: figure out which supported agent flavor is installed by checking install folders.
variants are tried in priority order and the first one with any existing folder wins.
"""

from __future__ import annotations  # lets us use string annotations before classes are defined

import logging  # for the diagnostic trace
from collections.abc import Mapping, Sequence  # type hints for the path table

from agent.facts import ProductVariant
from agent.registry import ConfigSource

log = logging.getLogger("tmprobe.detect")


class ProductDetector:
    def __init__(self, source: ConfigSource) -> None:
        self.source = source  # does the actual existence checks

    def _exists(self, path: str) -> bool:
        try:
            return bool(self.source.exists(path))
        except Exception as e:  # a failed check means the path is not there
            log.debug("path check %s failed: %s", path, e)
            return False

    def detect(self, path_table: Mapping[ProductVariant, Sequence[str]]) -> ProductVariant:
        for variant, paths in path_table.items():  # mapping order is priority order
            for path in paths:
                log.debug("checking %s install path %s", variant.label, path)
                if self._exists(path):
                    log.debug("detected %s at %s", variant.label, path)
                    return variant
        log.debug("no supported product detected")
        return ProductVariant.NONE
