"""
pytest configuration and shared fixtures
"""
import pytest
from unittest.mock import AsyncMock, MagicMock

from civicai.config import Settings
from civicai.models.schemas import AnalysisReport, AnalysisSubmission, DetectionResult
from civicai.models.ticket import (
    AIAnalysis,
    AuthorityCategory,
    ComplaintDrafts,
    Coordinates,
    Severity,
    TicketDraft,
)
from civicai.repositories.ticket_store import InMemoryTicketStore
from civicai.services.authorities import AuthorityRegistry
from civicai.services.ticket_service import TicketService

T0 = 1_700_000_000_000
MINUTE_MS = 60 * 1000


class FakeClock:
    """Controllable epoch-ms clock"""

    def __init__(self, now: int = T0):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, minutes: float) -> None:
        self.now += int(minutes * MINUTE_MS)


class SequentialIds:
    """Deterministic id allocator: 0001, 0002, ..."""

    def __init__(self):
        self.counter = 0

    def __call__(self, existing_ids) -> str:
        self.counter += 1
        candidate = str(self.counter).zfill(4)
        assert candidate not in existing_ids
        return candidate


@pytest.fixture
def settings() -> Settings:
    """Settings with the demo escalation threshold"""
    return Settings(
        escalation_threshold_minutes=2.0,
        default_authority_id="auth_muni",
        ticket_store_path="unused.json",
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store() -> InMemoryTicketStore:
    return InMemoryTicketStore()


@pytest.fixture
def registry(settings) -> AuthorityRegistry:
    return AuthorityRegistry(settings=settings)


@pytest.fixture
def service(store, settings, registry, clock) -> TicketService:
    return TicketService(
        store,
        settings=settings,
        registry=registry,
        clock=clock,
        id_allocator=SequentialIds(),
    )


@pytest.fixture
def sample_drafts() -> ComplaintDrafts:
    return ComplaintDrafts(
        email_subject="URGENT: High severity pothole on Main St",
        email_body="Dear Commissioner, please repair the pothole on Main St.",
        whatsapp_message="Pothole on Main St, please fix urgently.",
    )


@pytest.fixture
def sample_draft(sample_drafts) -> TicketDraft:
    """Pipeline draft for a pothole report"""
    return TicketDraft(
        title="Severe Pothole on Main St",
        description="Large pothole in the left lane with exposed rebar.",
        image_url="https://example.org/pothole.jpg",
        severity=Severity.MEDIUM,
        location=Coordinates(lat=12.9716, lng=77.5946),
        address="Main St, Shivajinagar, Bengaluru",
        authority_id="auth_muni",
        ai_analysis=AIAnalysis(
            detected_objects=["pothole", "road"],
            confidence=0.92,
            reasoning="Visible road surface failure.",
            detected_severity=Severity.MEDIUM,
        ),
        drafts=sample_drafts,
    )


@pytest.fixture
def detection_payload() -> dict:
    """Raw detection JSON as returned by Gemini"""
    return {
        "title": "Severe Pothole on Main St",
        "description": "Large pothole in the left lane with exposed rebar.",
        "severity": "High",
        "authorityType": "Corporation",
        "detectedObjects": ["pothole", "road"],
        "confidence": 0.92,
        "reasoning": "Visible road surface failure in a traffic lane.",
    }


@pytest.fixture
def detection(detection_payload) -> DetectionResult:
    return DetectionResult.model_validate(detection_payload)


@pytest.fixture
def drafts_payload() -> dict:
    return {
        "emailSubject": "URGENT: High severity pothole on Main St",
        "emailBody": "Dear Commissioner, please repair the pothole on Main St.",
        "whatsappMessage": "Pothole on Main St, please fix urgently.",
    }


@pytest.fixture
def submission() -> AnalysisSubmission:
    return AnalysisSubmission(
        image=b"\xff\xd8\xff\xe0fake-jpeg",
        user_prompt="Huge pothole near the bus stop",
        location=Coordinates(lat=12.9716, lng=77.5946),
    )


@pytest.fixture
def sample_report(detection, sample_drafts) -> AnalysisReport:
    return AnalysisReport(
        detection=detection,
        drafts=sample_drafts,
        address="Main St, Shivajinagar, Bengaluru",
        location=Coordinates(lat=12.9716, lng=77.5946),
    )


@pytest.fixture
def mock_llm(settings) -> MagicMock:
    """LLMService double with async generate methods"""
    llm = MagicMock()
    llm.settings = settings
    llm.generate_json = AsyncMock()
    llm.generate_text = AsyncMock()
    return llm


@pytest.fixture
def mock_geocoder() -> MagicMock:
    geocoder = MagicMock()
    geocoder.resolve_address = AsyncMock(return_value="Main St, Shivajinagar, Bengaluru")
    geocoder.reverse = AsyncMock(return_value="Main St, Shivajinagar, Bengaluru")
    geocoder.forward = AsyncMock(return_value=Coordinates(lat=12.9716, lng=77.5946))
    return geocoder


@pytest.fixture
def fallback_category(registry) -> AuthorityCategory:
    return registry.default_category
