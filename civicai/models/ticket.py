"""
Ticket data models

Serialized field names are camelCase (imageUrl, createdAt, authorityId, ...)
and enum values are their display strings, matching the persisted format of
the ticket store. Python code uses the snake_case attribute names.
"""
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from civicai.utils.validators import validate_phone


# ============================================================================
# Enums
# ============================================================================

class Severity(str, Enum):
    """Issue severity, ordered by SEVERITY_RANK"""
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    EMERGENCY = "Emergency"


SEVERITY_RANK = {
    Severity.LOW: 0,
    Severity.MEDIUM: 1,
    Severity.HIGH: 2,
    Severity.EMERGENCY: 3,
}


def max_severity(a: Severity, b: Severity) -> Severity:
    """Return the higher of two severities"""
    return a if SEVERITY_RANK[a] >= SEVERITY_RANK[b] else b


class TicketStatus(str, Enum):
    """Ticket lifecycle status"""
    OPEN = "Open"
    SUBMITTED = "Submitted"
    IN_PROGRESS = "In Progress"
    RESOLVED = "Resolved"
    ESCALATED = "Escalated"


class AuthorityCategory(str, Enum):
    """Authority categories the detection agent may route to"""
    CORPORATION = "Corporation"
    WATER_BOARD = "Water Board"
    ELECTRICITY_BOARD = "Electricity Board"
    TRAFFIC_POLICE = "Traffic Police"


# ============================================================================
# Value types
# ============================================================================

class CamelModel(BaseModel):
    """Base model serializing to camelCase field names"""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=False,
    )


class Coordinates(CamelModel):
    """Geographic point; (0, 0) means unknown"""
    lat: float = 0.0
    lng: float = 0.0

    @property
    def is_unknown(self) -> bool:
        return self.lat == 0.0 and self.lng == 0.0


class TimelineEvent(CamelModel):
    """
    Single entry in a ticket timeline.

    Attributes:
        timestamp: Event time (epoch milliseconds)
        title: Short event title
        description: Human-readable detail
        icon: Icon tag (FontAwesome class)
    """
    timestamp: int
    title: str = Field(..., min_length=1)
    description: str = ""
    icon: str = "fa-circle-info"


class AIAnalysis(CamelModel):
    """Detection facts kept on the ticket for audit"""
    detected_objects: List[str] = Field(default_factory=list)
    confidence: float = Field(..., ge=0.0, le=1.0)
    reasoning: str = ""
    detected_severity: Optional[Severity] = None


class ComplaintDrafts(CamelModel):
    """Outreach text produced by the drafting agent"""
    email_subject: str
    email_body: str
    whatsapp_message: str


class Authority(CamelModel):
    """Static authority reference data"""
    id: str
    name: str
    category: AuthorityCategory
    email: str
    whatsapp: str

    @field_validator("whatsapp")
    @classmethod
    def validate_whatsapp(cls, v: str) -> str:
        """WhatsApp numbers are digits with country code"""
        if not validate_phone(v):
            raise ValueError(f"Invalid WhatsApp number: {v}")
        return v


# ============================================================================
# Ticket
# ============================================================================

class TicketDraft(CamelModel):
    """
    Ticket content produced by the analysis pipeline, before commit.

    The lifecycle service adds id, status, timestamps, votes and timeline.
    """
    title: str = Field(..., min_length=1)
    description: str = ""
    image_url: Optional[str] = None
    severity: Severity
    location: Coordinates = Field(default_factory=Coordinates)
    address: str = ""
    authority_id: str = Field(..., min_length=1)
    ai_analysis: Optional[AIAnalysis] = None
    drafts: Optional[ComplaintDrafts] = None


class Ticket(TicketDraft):
    """
    A reported civic issue with lifecycle state.

    Attributes:
        id: Short display identifier, unique within the store
        status: Lifecycle status
        created_at: Creation time (epoch ms), immutable
        updated_at: Last mutation time (epoch ms)
        votes: Community votes, never decreases
        timeline: Events, newest first
        commissioner_response: Official response text, write-once
    """
    id: str = Field(..., min_length=1)
    status: TicketStatus = TicketStatus.OPEN
    created_at: int
    updated_at: int
    votes: int = Field(0, ge=0)
    timeline: List[TimelineEvent] = Field(..., min_length=1)
    commissioner_response: Optional[str] = None

    @field_validator("timeline")
    @classmethod
    def validate_timeline(cls, v: List[TimelineEvent]) -> List[TimelineEvent]:
        """Timeline must keep the creation event"""
        if not any(event.title == "Ticket Created" for event in v):
            raise ValueError("Timeline must contain the 'Ticket Created' event")
        return v

    def to_draft(self) -> TicketDraft:
        """Return the pipeline-owned part of this ticket"""
        return TicketDraft.model_validate(
            self.model_dump(include=set(TicketDraft.model_fields))
        )

    def to_record(self) -> dict:
        """Serialize for persistence (camelCase keys, enum values)"""
        return self.model_dump(mode="json", by_alias=True)
