"""
Tests for app.report - status record building and emission
"""

from __future__ import annotations

import io
import json
from datetime import date

from agent.facts import FactSet, ProductVariant
from algorithm.health import HealthVerdict
from app.report import build_record, emit, error_record

KEYS = (
    "health_status",
    "version",
    "installed",
    "service_running",
    "realtime_protection",
    "signature_age",
    "last_update",
)


class TestBuildRecord:
    """Tests for build_record"""

    def test_full_record(self):
        """Test that every fact maps to its output field"""
        fs = FactSet(
            version="14.0.1234",
            realtime_protection_enabled=True,
            signature_date=date(2025, 8, 1),
            signature_age_days=3.5,
            installed=True,
            service_running=True,
            variant=ProductVariant.CLIENT_SERVER,
        )
        record = build_record(fs, HealthVerdict.OK)
        assert record == {
            "health_status": "OK",
            "version": "14.0.1234",
            "installed": 1,
            "service_running": 1,
            "realtime_protection": 1,
            "signature_age": 3.5,
            "last_update": "2025-08-01",
            "product_type": "Client_Server",
        }
        assert tuple(record)[: len(KEYS)] == KEYS

    def test_unknown_values(self):
        """Test the sentinels for unknown facts"""
        record = build_record(FactSet.not_installed(), HealthVerdict.NOT_INSTALLED)
        assert record["signature_age"] == -1
        assert record["last_update"] == "Unknown"
        assert record["version"] == "Unknown"
        assert record["product_type"] == "Unknown"
        assert record["installed"] == 0

    def test_without_product_type(self):
        """Test that single-variant builds omit product_type"""
        record = build_record(FactSet.not_installed(), HealthVerdict.NOT_INSTALLED, False)
        assert "product_type" not in record
        assert tuple(record) == KEYS


class TestErrorRecord:
    """Tests for error_record"""

    def test_error_record_has_defaults_and_message(self):
        """Test that an ERROR record is fully formed and carries the message"""
        record = error_record("registry exploded")
        assert record["health_status"] == "ERROR"
        assert record["error"] == "registry exploded"
        assert record["installed"] == 0
        assert record["service_running"] == 0
        assert record["realtime_protection"] == 0
        assert record["signature_age"] == -1
        assert record["last_update"] == "Unknown"
        assert record["version"] == "Unknown"


class TestEmit:
    """Tests for emit"""

    def test_emit_single_compact_line(self):
        """Test that the record is written as one compact JSON line"""
        out = io.StringIO()
        emit({"health_status": "OK", "signature_age": 0.0}, out)
        text = out.getvalue()
        assert text == '{"health_status":"OK","signature_age":0.0}\n'
        assert json.loads(text) == {"health_status": "OK", "signature_age": 0.0}

    def test_emit_to_ansi_code_page(self):
        """Test that non-ASCII text survives a cp1252 stdout as escapes"""
        raw = io.BytesIO()
        out = io.TextIOWrapper(raw, encoding="cp1252")
        record = error_record("拒绝访问")
        emit(record, out)
        text = raw.getvalue().decode("ascii")
        assert text.endswith("\n")
        assert "\\u62d2" in text
        assert json.loads(text)["error"] == "拒绝访问"
