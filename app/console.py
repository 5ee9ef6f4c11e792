# SPDX-License-Identifier: GPL-3.0-or-later
"""
goal: command line entry point for the probe. detects the installed Trend Micro agent, extracts its
facts, classifies its health and prints exactly one compact JSON line on stdout. --debug adds a
readable trace of every path, registry value and service that was checked, written to stderr so it
never mixes with the JSON line.

whatever goes wrong, the run still prints a well-formed record (an ERROR one if need be) and exits 0.
"""

from __future__ import annotations  # lets us use string annotations before classes are defined

import argparse  # for parsing command line arguments
import logging  # for the diagnostic trace
import sys  # for stdout/stderr and the exit code
from collections.abc import Sequence  # type hint for argv
from typing import Any, TextIO  # flexible record values, output streams

from colorama import Fore, Style, just_fix_windows_console
from dotenv import load_dotenv

from agent.detector import ProductDetector
from agent.extractor import FactExtractor
from agent.profiles import path_table
from agent.registry import ConfigSource, RegistryConfigSource
from agent.services import PsutilServiceProbe, ServiceProbe
from algorithm.dates import DateNormalizer
from algorithm.health import HealthClassifier
from app.config import Config, load_config
from app.report import build_record, emit, error_record

load_dotenv()  # pick up TMPROBE_* settings from a .env file if there is one

probe_logger = logging.getLogger("tmprobe")
log = logging.getLogger("tmprobe.console")


class DiagnosticFormatter(logging.Formatter):
    """colors lookup hits green, misses dim and the verdict magenta"""

    def __init__(self, *args, use_color: bool = True, **kwargs):
        super().__init__(*args, **kwargs)
        self.use_color = use_color
        if use_color:
            just_fix_windows_console()  # enable ANSI codes on Windows consoles, no-op elsewhere

    def format(self, record):
        msg = super().format(record)
        if not self.use_color:
            return msg

        green = Fore.GREEN
        dim = Style.DIM
        mag = Fore.MAGENTA
        red = Fore.RED
        reset = Style.RESET_ALL

        if record.levelno >= logging.ERROR:
            return f"{red}{msg}{reset}"
        text = record.getMessage()
        if text.startswith("verdict:"):
            return f"{mag}{msg}{reset}"
        if text.endswith(("-> miss", "-> missing", "-> not_found", "-> stopped", "-> error")):
            return f"{dim}{msg}{reset}"
        if text.startswith(("detected", "signature date")):
            return f"{green}{msg}{reset}"
        if text.endswith(("-> found", "-> running")):
            return f"{green}{msg}{reset}"
        return msg


def configure_logging(debug: bool = False, stream: TextIO | None = None) -> logging.Logger:
    # every tmprobe.* logger funnels into one stderr handler
    for old in list(probe_logger.handlers):
        probe_logger.removeHandler(old)
    target = stream or sys.stderr
    handler = logging.StreamHandler(target)
    # only color a real terminal, the monitoring platform may be capturing stderr to a file
    use_color = bool(getattr(target, "isatty", lambda: False)())
    handler.setFormatter(DiagnosticFormatter("[%(name)s] %(message)s", use_color=use_color))
    probe_logger.addHandler(handler)
    probe_logger.setLevel(logging.DEBUG if debug else logging.ERROR)
    probe_logger.propagate = False  # prevent duplicate messages
    return probe_logger


def run_probe(
    config: Config | None = None,
    source: ConfigSource | None = None,
    services: ServiceProbe | None = None,
    normalizer: DateNormalizer | None = None,
) -> dict[str, Any]:
    """detect -> extract -> classify, with the one catch-all that turns any failure into ERROR."""
    include_type = config.deployment.emit_product_type if config else True
    try:
        config = config or load_config()
        include_type = config.deployment.emit_product_type
        source = source or RegistryConfigSource()
        services = services or PsutilServiceProbe()
        log.debug(
            "deployment=%s threshold=%.1f days warning_bucket=%s",
            config.deployment.name,
            config.threshold_days,
            config.warning_bucket,
        )

        variant = ProductDetector(source).detect(path_table(config.deployment))
        extractor = FactExtractor(
            deployment=config.deployment,
            service_names=config.service_names,
            normalizer=normalizer,
        )
        facts = extractor.extract(variant, source, services)
        verdict = HealthClassifier(config.threshold_days, config.warning_bucket).classify(facts)
        return build_record(facts, verdict, include_type)
    except Exception as e:
        log.error("probe failed: %s: %s", type(e).__name__, e)
        return error_record(str(e), include_type)


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="tmprobe", description="Trend Micro agent health probe"
    )
    parser.add_argument(
        "-d",
        "--debug",
        action="store_true",
        help="write a diagnostic trace of every lookup to stderr",
    )
    # the monitoring platform may pass its own arguments, they must not cost us the status line
    args, ignored = parser.parse_known_args(argv)

    configure_logging(args.debug)
    if ignored:
        log.debug("ignoring arguments: %s", " ".join(ignored))
    record = run_probe()
    emit(record, sys.stdout)
    return 0  # the platform only needs to know the probe ran


if __name__ == "__main__":
    sys.exit(main())
