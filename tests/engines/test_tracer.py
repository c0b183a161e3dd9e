"""Tests for the engine invocation tracer."""

from datetime import date
from decimal import Decimal

import pytest

from cashbook_engines.movement import MovementRecord
from cashbook_engines.tracer import (
    _canonicalize,
    compute_input_fingerprint,
    traced_engine,
)


class TestCanonicalize:
    """Fingerprint canonicalization is stable."""

    def test_decimal_normalized(self):
        assert _canonicalize(Decimal("1.0")) == _canonicalize(Decimal("1.00"))
        assert _canonicalize(Decimal("0.00")) == "0"

    def test_wide_decimal_keeps_every_digit(self):
        value = Decimal("12345678901234567890123456789.123456789")
        assert _canonicalize(value) == "12345678901234567890123456789.123456789"

    def test_dict_key_order_irrelevant(self):
        assert _canonicalize({"b": 1, "a": 2}) == _canonicalize({"a": 2, "b": 1})

    def test_date_and_bool(self):
        assert _canonicalize(date(2024, 3, 1)) == "2024-03-01"
        assert _canonicalize(True) == "true"
        assert _canonicalize(None) == "null"

    def test_dataclass_includes_type_and_fields(self):
        record = MovementRecord(date=date(2024, 3, 1), branch_id=7, gross_sales="10")
        text = _canonicalize(record)
        assert text.startswith("MovementRecord{")
        assert "branch_id:7" in text
        assert "date:2024-03-01" in text


class TestFingerprint:
    """Tests for compute_input_fingerprint."""

    def test_deterministic(self):
        kwargs = {"branch_id": 7, "year_month": "2024-03"}
        first = compute_input_fingerprint(("branch_id", "year_month"), kwargs)
        second = compute_input_fingerprint(("branch_id", "year_month"), dict(kwargs))
        assert first == second
        assert len(first) == 16

    def test_sensitive_to_inputs(self):
        a = compute_input_fingerprint(("branch_id",), {"branch_id": 7})
        b = compute_input_fingerprint(("branch_id",), {"branch_id": 8})
        assert a != b

    def test_missing_field_recorded_as_null(self):
        assert compute_input_fingerprint(("x",), {}) == compute_input_fingerprint(("x",), {"x": None})


class TestTracedEngine:
    """Tests for the decorator."""

    def test_returns_result_and_logs(self, captured_logs):
        @traced_engine("sample", "2.1", fingerprint_fields=("value",))
        def double(value):
            return value * 2

        assert double(value=4) == 8

        traces = [r for r in captured_logs() if r["message"] == "CASHBOOK_ENGINE_TRACE"]
        assert len(traces) == 1
        trace = traces[0]
        assert trace["engine_name"] == "sample"
        assert trace["engine_version"] == "2.1"
        assert trace["trace_type"] == "CASHBOOK_ENGINE_TRACE"
        assert trace["input_fingerprint"] == compute_input_fingerprint(("value",), {"value": 4})
        assert trace["duration_ms"] >= 0

    def test_exceptions_propagate_without_trace(self, captured_logs):
        @traced_engine("failing", "1.0")
        def boom():
            raise RuntimeError("nope")

        with pytest.raises(RuntimeError, match="nope"):
            boom()

        assert not [r for r in captured_logs() if r["message"] == "CASHBOOK_ENGINE_TRACE"]

    def test_positional_arguments_fingerprinted(self, captured_logs):
        @traced_engine("sample", "1.0", fingerprint_fields=("value", "scale"))
        def scaled(value, scale=3):
            return value * scale

        scaled(4)
        scaled(value=4)
        scaled(4, scale=3)

        fingerprints = [
            r["input_fingerprint"] for r in captured_logs()
            if r["message"] == "CASHBOOK_ENGINE_TRACE"
        ]
        expected = compute_input_fingerprint(("value", "scale"), {"value": 4, "scale": 3})
        assert fingerprints == [expected, expected, expected]

    def test_bad_call_raises_type_error(self):
        @traced_engine("sample", "1.0", fingerprint_fields=("value",))
        def identity(value):
            return value

        with pytest.raises(TypeError):
            identity(1, 2)

    def test_preserves_metadata(self):
        @traced_engine("meta", "1.0")
        def documented():
            """Docstring kept."""

        assert documented.__name__ == "documented"
        assert documented.__doc__ == "Docstring kept."
