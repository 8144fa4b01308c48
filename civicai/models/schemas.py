"""
Pydantic schemas for the analysis pipeline and the HTTP API

Includes:
- Detection agent output (validated against the fixed response schema)
- Pipeline submission / report models
- API request and error models
"""
from datetime import datetime
from typing import Optional, List, Dict, Any

from pydantic import BaseModel, Field, ConfigDict, field_validator

from civicai.models.ticket import (
    AuthorityCategory,
    CamelModel,
    ComplaintDrafts,
    Coordinates,
    Severity,
    TimelineEvent,
)


# ============================================================================
# Pipeline Models
# ============================================================================

class DetectionResult(CamelModel):
    """
    Structured facts returned by the detection agent.

    Every field is required; severity and authorityType are closed enums.
    Responses that do not validate are replaced by the fallback stub.

    Attributes:
        title: Short title of the issue
        description: Technical description of the damage
        severity: Recommended severity
        authority_type: Category of the responsible authority
        detected_objects: Objects recognised in the image
        confidence: Detection certainty (0.0-1.0)
        reasoning: Why the issue and severity were chosen
    """
    model_config = ConfigDict(extra="ignore")

    title: str = Field(..., min_length=1, max_length=256)
    description: str = Field(..., min_length=1)
    severity: Severity
    authority_type: AuthorityCategory
    detected_objects: List[str]
    confidence: float = Field(..., ge=0.0, le=1.0)
    reasoning: str

    @classmethod
    def fallback(cls, authority_type: AuthorityCategory) -> "DetectionResult":
        """Deterministic stub used when detection fails"""
        return cls(
            title="Civic Issue Detected",
            description="Unable to analyze details specifically. Please review manually.",
            severity=Severity.MEDIUM,
            authority_type=authority_type,
            detected_objects=["unknown"],
            confidence=0.5,
            reasoning="fallback",
        )


class AnalysisSubmission(BaseModel):
    """Raw citizen submission entering the pipeline"""
    image: bytes = Field(..., min_length=1, description="Image payload")
    mime_type: str = Field("image/jpeg", description="Image MIME type")
    user_prompt: Optional[str] = Field(None, max_length=4096, description="Voice/text context")
    location: Optional[Coordinates] = Field(None, description="Capture location")
    address: Optional[str] = Field(None, max_length=512, description="Known address")


class AnalysisReport(CamelModel):
    """
    Output of a successful pipeline run.

    Carries the detection facts, the outreach drafts and the address used
    for drafting, ready to be turned into a TicketDraft.
    """
    detection: DetectionResult
    drafts: ComplaintDrafts
    address: str
    location: Coordinates = Field(default_factory=Coordinates)
    used_fallback: bool = False


# ============================================================================
# API Request/Response Models
# ============================================================================

class AnalyzeRequest(CamelModel):
    """Request model for report analysis"""
    image_base64: str = Field(..., min_length=1, description="Base64 image (data URL accepted)")
    mime_type: str = "image/jpeg"
    user_prompt: Optional[str] = Field(None, max_length=4096)
    location: Optional[Coordinates] = None
    address: Optional[str] = Field(None, max_length=512)


class CreateTicketRequest(CamelModel):
    """Request model for committing an analysed report as a ticket"""
    report: AnalysisReport
    image_url: Optional[str] = None
    severity_override: Optional[Severity] = None


class TimelineEventRequest(CamelModel):
    """Request model for appending a timeline event"""
    title: str = Field(..., min_length=1, max_length=256)
    description: str = Field("", max_length=2048)
    icon: str = "fa-circle-info"
    timestamp: Optional[int] = None

    def to_event(self, now: int) -> TimelineEvent:
        return TimelineEvent(
            timestamp=self.timestamp if self.timestamp is not None else now,
            title=self.title,
            description=self.description,
            icon=self.icon,
        )


class ErrorResponse(BaseModel):
    """Standard error response"""
    model_config = ConfigDict(from_attributes=True)

    error: str = Field(..., description="Error type")
    message: str = Field(..., description="Error message")
    detail: Optional[Dict[str, Any]] = Field(None, description="Additional error details")
    timestamp: datetime = Field(default_factory=datetime.utcnow, description="Error timestamp")

    @field_validator("message")
    @classmethod
    def validate_message(cls, v: str) -> str:
        """Keep error messages short enough for the UI"""
        return v[:1024]
