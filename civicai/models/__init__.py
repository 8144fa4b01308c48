"""
Pydantic models for CivicAI
"""

from civicai.models.ticket import (
    # Enums
    Severity,
    TicketStatus,
    AuthorityCategory,
    SEVERITY_RANK,
    max_severity,

    # Domain Models
    Coordinates,
    TimelineEvent,
    AIAnalysis,
    ComplaintDrafts,
    Authority,
    TicketDraft,
    Ticket,
)
from civicai.models.schemas import (
    # Pipeline Models
    DetectionResult,
    AnalysisSubmission,
    AnalysisReport,

    # API Models
    AnalyzeRequest,
    CreateTicketRequest,
    TimelineEventRequest,
    ErrorResponse,
)

__all__ = [
    # Enums
    "Severity",
    "TicketStatus",
    "AuthorityCategory",
    "SEVERITY_RANK",
    "max_severity",

    # Domain Models
    "Coordinates",
    "TimelineEvent",
    "AIAnalysis",
    "ComplaintDrafts",
    "Authority",
    "TicketDraft",
    "Ticket",

    # Pipeline Models
    "DetectionResult",
    "AnalysisSubmission",
    "AnalysisReport",

    # API Models
    "AnalyzeRequest",
    "CreateTicketRequest",
    "TimelineEventRequest",
    "ErrorResponse",
]
