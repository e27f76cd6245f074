"""Tests for the engine invocation tracer."""

from datetime import date
from decimal import Decimal

from paytracker_engines.tracer import compute_input_fingerprint, traced_engine


class TestInputFingerprint:

    def test_deterministic(self):
        kwargs = {"amount": Decimal("120"), "payment_date": date(2024, 2, 1)}
        first = compute_input_fingerprint(("amount", "payment_date"), kwargs)
        second = compute_input_fingerprint(("amount", "payment_date"), dict(kwargs))
        assert first == second
        assert len(first) == 16

    def test_sensitive_to_values(self):
        a = compute_input_fingerprint(("amount",), {"amount": Decimal("120")})
        b = compute_input_fingerprint(("amount",), {"amount": Decimal("121")})
        assert a != b

    def test_missing_field_is_null(self):
        assert compute_input_fingerprint(("x",), {}) == compute_input_fingerprint(
            ("x",), {"x": None}
        )


class TestTracedEngine:

    def test_returns_result_and_logs_trace(self, captured_logs):
        @traced_engine("demo", "2.1", fingerprint_fields=("value",))
        def double(*, value):
            return value * 2

        assert double(value=21) == 42

        trace = next(r for r in captured_logs() if r["message"] == "PAYTRACKER_ENGINE_TRACE")
        assert trace["engine_name"] == "demo"
        assert trace["engine_version"] == "2.1"
        assert trace["input_fingerprint"] == compute_input_fingerprint(("value",), {"value": 21})
        assert "duration_ms" in trace
