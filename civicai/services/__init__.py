"""
Business Logic Services
"""
from .authorities import AuthorityRegistry, AUTHORITIES
from .escalation import EscalationEngine
from .ticket_service import TicketService, allocate_ticket_id
from .commissioner_service import CommissionerService
from .geocoding import GeocodingClient
from .llm_service import LLMService
from .report_builder import build_ticket_draft

__all__ = [
    "AuthorityRegistry",
    "AUTHORITIES",
    "EscalationEngine",
    "TicketService",
    "allocate_ticket_id",
    "CommissionerService",
    "GeocodingClient",
    "LLMService",
    "build_ticket_draft",
]
