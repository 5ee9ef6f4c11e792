"""
Tests for algorithm.health - HealthClassifier
Tests rule precedence, the staleness threshold, and the optional WARNING bucket.
"""

from __future__ import annotations

from datetime import date

import pytest

from agent.facts import FactSet, ProductVariant
from algorithm.health import HealthClassifier, HealthVerdict


def _facts(
    installed: bool = True,
    running: bool = True,
    realtime: bool = True,
    age: float | None = 1.0,
) -> FactSet:
    return FactSet(
        version="14.0",
        realtime_protection_enabled=realtime,
        signature_date=date(2026, 3, 14) if age is not None else None,
        signature_age_days=age,
        installed=installed,
        service_running=running,
        variant=ProductVariant.WFBS,
    )


class TestPrecedence:
    """Tests for the ordered rule chain"""

    @pytest.fixture
    def classifier(self):
        return HealthClassifier(threshold_days=7)

    def test_healthy_host_is_ok(self, classifier):
        """Test that a running, fresh, protected agent is OK"""
        assert classifier.classify(_facts()) is HealthVerdict.OK

    @pytest.mark.parametrize("running", [True, False])
    @pytest.mark.parametrize("realtime", [True, False])
    @pytest.mark.parametrize("age", [None, 0.0, 30.0])
    def test_not_installed_beats_everything(self, classifier, running, realtime, age):
        """Test that installed=False always gives NOT_INSTALLED"""
        fs = _facts(installed=False, running=running, realtime=realtime, age=age)
        assert classifier.classify(fs) is HealthVerdict.NOT_INSTALLED

    @pytest.mark.parametrize("realtime", [True, False])
    @pytest.mark.parametrize("age", [None, 0.0, 30.0])
    def test_stopped_service_beats_signatures_and_realtime(self, classifier, realtime, age):
        """Test that a stopped service wins even with fresh signatures and realtime on"""
        fs = _facts(running=False, realtime=realtime, age=age)
        assert classifier.classify(fs) is HealthVerdict.SERVICE_STOPPED

    def test_outdated_beats_realtime_disabled(self, classifier):
        """Test that stale signatures are reported before disabled realtime scanning"""
        fs = _facts(realtime=False, age=10.0)
        assert classifier.classify(fs) is HealthVerdict.OUTDATED_SIGNATURES

    def test_realtime_disabled(self, classifier):
        """Test that realtime off with fresh signatures is REALTIME_DISABLED"""
        assert classifier.classify(_facts(realtime=False)) is HealthVerdict.REALTIME_DISABLED

    def test_not_installed_default_factset(self, classifier):
        """Test that the not-installed FactSet classifies as NOT_INSTALLED"""
        assert classifier.classify(FactSet.not_installed()) is HealthVerdict.NOT_INSTALLED


class TestThreshold:
    """Tests for the staleness threshold"""

    def test_age_equal_to_threshold_is_not_outdated(self):
        """Test that the comparison is strictly greater than"""
        classifier = HealthClassifier(threshold_days=7)
        assert classifier.classify(_facts(age=7.0)) is HealthVerdict.OK

    def test_age_above_threshold_is_outdated(self):
        """Test that one tenth over the threshold is outdated"""
        classifier = HealthClassifier(threshold_days=7)
        assert classifier.classify(_facts(age=7.1)) is HealthVerdict.OUTDATED_SIGNATURES

    def test_unknown_age_is_never_outdated(self):
        """Test that a missing signature date does not trip the threshold"""
        classifier = HealthClassifier(threshold_days=0)
        assert classifier.classify(_facts(age=None)) is HealthVerdict.OK

    def test_threshold_is_configurable(self):
        """Test that a 2-day deployment flags what a 7-day one accepts"""
        fs = _facts(age=3.0)
        assert HealthClassifier(threshold_days=2).classify(fs) is HealthVerdict.OUTDATED_SIGNATURES
        assert HealthClassifier(threshold_days=7).classify(fs) is HealthVerdict.OK

    def test_default_threshold_is_seven_days(self):
        """Test the default threshold"""
        assert HealthClassifier().threshold_days == 7


class TestWarningBucket:
    """Tests for the optional WARNING bucket"""

    @pytest.fixture
    def classifier(self):
        return HealthClassifier(threshold_days=7, warning_bucket=True)

    def test_outdated_becomes_warning(self, classifier):
        """Test that outdated signatures collapse into WARNING"""
        assert classifier.classify(_facts(age=10.0)) is HealthVerdict.WARNING

    def test_realtime_disabled_becomes_warning(self, classifier):
        """Test that disabled realtime collapses into WARNING"""
        assert classifier.classify(_facts(realtime=False)) is HealthVerdict.WARNING

    def test_hard_verdicts_unchanged(self, classifier):
        """Test that NOT_INSTALLED, SERVICE_STOPPED and OK are never collapsed"""
        assert classifier.classify(_facts(installed=False)) is HealthVerdict.NOT_INSTALLED
        assert classifier.classify(_facts(running=False)) is HealthVerdict.SERVICE_STOPPED
        assert classifier.classify(_facts()) is HealthVerdict.OK
