"""
Tests for the lead capture gate, payloads and sinks.
"""

import asyncio
import json
import logging
from datetime import datetime, timezone

import httpx
import pytest

from quizflow.config import Settings
from quizflow.runtime import (
    HttpLeadSink,
    LeadCaptureGate,
    LeadSink,
    LoggingLeadSink,
    MemoryLeadSink,
    create_lead_sink,
)
from quizflow.schemas import LeadCollectionConfig, LeadPayload, LeadSubmission, validate_lead_payload


class FailingSink(LeadSink):
    def __init__(self):
        self.calls = 0

    async def submit(self, payload):
        self.calls += 1
        raise RuntimeError("endpoint unavailable")


def gate_for(sink=None, canvas_id="canvas-1", **flags):
    return LeadCaptureGate(LeadCollectionConfig(**flags), sink=sink, canvas_id=canvas_id)


class TestLeadValidation:
    def test_required_field_must_be_present(self):
        gate = gate_for(collect_email=True, collect_phone=True)
        result = gate.validate(LeadSubmission(phone="555"))
        assert not result.ok
        assert result.error_key == "lead_required_email"
        assert result.field == "email"

    def test_email_format(self):
        gate = gate_for(collect_email=True)
        assert gate.validate(LeadSubmission(email="not-an-email")).error_key == "lead_invalid_email"
        assert gate.validate(LeadSubmission(email="a b@x.io")).error_key == "lead_invalid_email"
        assert gate.validate(LeadSubmission(email="ann@example.com")).ok

    def test_optional_email_checked_when_given(self):
        gate = gate_for(collect_name=True, collect_email=True)
        assert gate.validate(LeadSubmission(name="Ann")).ok
        assert gate.validate(LeadSubmission(name="Ann", email="ann@")).error_key == "lead_invalid_email"

    def test_whitespace_only_is_missing(self):
        gate = gate_for(collect_name=True)
        assert gate.validate(LeadSubmission(name="   ")).error_key == "lead_required_name"

    def test_disabled_gate_accepts_anything(self):
        gate = LeadCaptureGate(None)
        assert not gate.enabled
        assert gate.validate(LeadSubmission()).ok

    def test_submit_records_outcome(self):
        gate = gate_for(collect_phone=True)
        assert not gate.submit(LeadSubmission()).ok
        assert gate.last_error == "lead_required_phone"
        assert gate.submit(LeadSubmission(phone=" 555-0100 ")).ok
        assert gate.last_error is None
        assert gate.submission.phone == "555-0100"


class TestLeadPayload:
    def test_wire_format(self):
        payload = LeadPayload.from_submission(
            LeadSubmission(name="Ann", email=""),
            points=6,
            canvas_id="canvas-1",
            created_date=datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc),
        )
        assert payload.to_wire() == {
            "canvasId": "canvas-1",
            "name": "Ann",
            "email": None,
            "phone": None,
            "points": 6,
            "createdDate": "2024-05-01T12:30:00.000Z",
        }

    def test_without_submission(self):
        wire = LeadPayload.from_submission(None, points=0).to_wire()
        assert wire["name"] is None and wire["canvasId"] is None
        assert wire["createdDate"].endswith("Z")
        assert validate_lead_payload(wire)

    def test_schema_rejects_unknown_keys(self):
        wire = LeadPayload.from_submission(None, points=1).to_wire()
        wire["extra"] = True
        with pytest.raises(ValueError):
            validate_lead_payload(wire)

    def test_schema_rejects_negative_points(self):
        wire = LeadPayload.from_submission(None, points=1).to_wire()
        wire["points"] = -1
        with pytest.raises(ValueError):
            validate_lead_payload(wire)


class TestPersistence:
    def test_persists_exactly_once(self, sink):
        gate = gate_for(sink=sink, collect_email=True)
        gate.submit(LeadSubmission(email="ann@example.com"))
        submission = gate.persist(7)
        assert gate.saved
        assert gate.persist(7) is None
        asyncio.run(submission)
        assert len(sink.payloads) == 1
        assert sink.payloads[0]["email"] == "ann@example.com"
        assert sink.payloads[0]["points"] == 7
        assert sink.payloads[0]["canvasId"] == "canvas-1"

    def test_reset_rearms_the_gate(self, sink):
        gate = gate_for(sink=sink, collect_email=True)
        asyncio.run(gate.persist(1))
        gate.reset()
        assert not gate.saved
        asyncio.run(gate.persist(2))
        assert [p["points"] for p in sink.payloads] == [1, 2]

    def test_failure_is_logged_not_raised(self, caplog):
        sink = FailingSink()
        gate = gate_for(sink=sink, collect_email=True)
        with caplog.at_level(logging.ERROR, logger="quizflow.runtime.lead"):
            asyncio.run(gate.persist(3))
        assert sink.calls == 1
        assert gate.saved
        assert gate.persist(3) is None
        assert "Failed to persist lead" in caplog.text

    @pytest.mark.asyncio
    async def test_memory_sink(self):
        sink = MemoryLeadSink()
        await sink.submit({"points": 1})
        assert sink.payloads == [{"points": 1}]


class TestHttpLeadSink:
    @pytest.fixture
    def requests_seen(self):
        return []

    @pytest.fixture
    def mock_http(self, monkeypatch, requests_seen):
        """Route HttpLeadSink traffic through an httpx mock transport"""
        real_client = httpx.AsyncClient

        def install(status_code):
            def handler(request):
                requests_seen.append(request)
                return httpx.Response(status_code, json={"ok": status_code < 400})

            def client_factory(**kwargs):
                return real_client(transport=httpx.MockTransport(handler), **kwargs)

            monkeypatch.setattr(httpx, "AsyncClient", client_factory)

        return install

    @pytest.mark.asyncio
    async def test_posts_json(self, mock_http, requests_seen):
        mock_http(201)
        sink = HttpLeadSink("http://leads.test/api/v1/leads", timeout=2.0)
        await sink.submit({"points": 4})
        assert len(requests_seen) == 1
        assert requests_seen[0].method == "POST"
        assert requests_seen[0].url.path == "/api/v1/leads"
        assert json.loads(requests_seen[0].content) == {"points": 4}

    @pytest.mark.asyncio
    async def test_http_error_is_logged_by_gate(self, mock_http, requests_seen, caplog):
        mock_http(500)
        gate = gate_for(sink=HttpLeadSink("http://leads.test/leads"), collect_email=True)
        with caplog.at_level(logging.ERROR, logger="quizflow.runtime.lead"):
            await gate.persist(2)
        assert len(requests_seen) == 1
        assert "Failed to persist lead" in caplog.text


class TestCreateLeadSink:
    def test_http_sink_when_url_configured(self):
        sink = create_lead_sink(Settings(lead_sink_url="http://leads.test/leads", lead_request_timeout_seconds=3))
        assert isinstance(sink, HttpLeadSink)
        assert sink.timeout == 3

    def test_logging_sink_by_default(self):
        assert isinstance(create_lead_sink(Settings(lead_sink_url=None)), LoggingLeadSink)
