"""
Lead capture gate and lead persistence sinks
"""

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Awaitable, Dict, List, Optional

import httpx

from quizflow.schemas.graph import LeadCollectionConfig
from quizflow.schemas.lead import LeadPayload, LeadSubmission
from quizflow.schemas.validation import validate_lead_payload
from quizflow.utils.logger import get_logger

logger = get_logger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


class LeadSink(ABC):
    """Destination for the single lead payload of a session"""

    @abstractmethod
    async def submit(self, payload: Dict[str, Any]) -> None:
        pass


class HttpLeadSink(LeadSink):
    """POSTs the payload as JSON to the lead endpoint"""

    def __init__(self, url: str, timeout: float = 10.0):
        self.url = url
        self.timeout = timeout

    async def submit(self, payload: Dict[str, Any]) -> None:
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.post(self.url, json=payload)
            response.raise_for_status()
        logger.info(f"[LeadGate] Lead stored at {self.url} (HTTP {response.status_code})")


class MemoryLeadSink(LeadSink):
    """Keeps payloads in memory"""

    def __init__(self):
        self.payloads: List[Dict[str, Any]] = []

    async def submit(self, payload: Dict[str, Any]) -> None:
        self.payloads.append(payload)


class LoggingLeadSink(LeadSink):
    """Used when no lead endpoint is configured"""

    async def submit(self, payload: Dict[str, Any]) -> None:
        logger.info(f"[LeadGate] No lead endpoint configured, payload: {payload}")


def create_lead_sink(settings=None) -> LeadSink:
    """Create a lead sink based on configuration"""
    if settings is None:
        from quizflow.config import settings
    if settings.lead_sink_url:
        return HttpLeadSink(settings.lead_sink_url, timeout=settings.lead_request_timeout_seconds)
    return LoggingLeadSink()


@dataclass(frozen=True)
class LeadValidation:
    ok: bool
    error_key: Optional[str] = None
    field: Optional[str] = None


class LeadCaptureGate:
    """
    Validates the pre-quiz contact form and persists the lead once.

    The ``saved`` flag is raised before the request is attempted, so a
    second completion path (results scene after a timeout, or the other
    way round) never produces a second submission.
    """

    def __init__(
        self,
        config: Optional[LeadCollectionConfig],
        sink: Optional[LeadSink] = None,
        canvas_id: Optional[str] = None,
    ):
        self.config = config
        self.sink = sink or LoggingLeadSink()
        self.canvas_id = canvas_id
        self.submission: Optional[LeadSubmission] = None
        self.saved = False
        self.last_error: Optional[str] = None

    @property
    def enabled(self) -> bool:
        return self.config is not None and self.config.enabled

    def validate(self, submission: LeadSubmission) -> LeadValidation:
        if not self.enabled:
            return LeadValidation(ok=True)
        required = self.config.required_field
        if required and not getattr(submission, required):
            return LeadValidation(ok=False, error_key=f"lead_required_{required}", field=required)
        if self.config.collect_email and submission.email and not EMAIL_PATTERN.match(submission.email):
            return LeadValidation(ok=False, error_key="lead_invalid_email", field="email")
        return LeadValidation(ok=True)

    def submit(self, submission: LeadSubmission) -> LeadValidation:
        """Validate and store the form values locally"""
        result = self.validate(submission)
        if result.ok:
            self.submission = submission
            self.last_error = None
            logger.info("[LeadGate] Lead form accepted")
        else:
            self.last_error = result.error_key
            logger.debug(f"[LeadGate] Lead form rejected: {result.error_key}")
        return result

    def build_payload(self, points: int) -> LeadPayload:
        return LeadPayload.from_submission(self.submission, points=points, canvas_id=self.canvas_id)

    def persist(self, points: int) -> Optional[Awaitable[None]]:
        """Return the one submission coroutine, or None if already attempted"""
        if self.saved:
            logger.debug("[LeadGate] Lead already saved, skipping")
            return None
        self.saved = True
        return self._send(self.build_payload(points))

    async def _send(self, payload: LeadPayload) -> None:
        wire = payload.to_wire()
        try:
            validate_lead_payload(wire)
            await self.sink.submit(wire)
        except Exception as e:
            # Never retried and never surfaced to the quiz state
            logger.error(f"[LeadGate] Failed to persist lead: {e}")

    def reset(self) -> None:
        self.submission = None
        self.saved = False
        self.last_error = None
