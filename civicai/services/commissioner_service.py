"""
Commissioner Service - deferred persona follow-up for committed tickets

Runs at most once per ticket: tickets that already carry a commissioner
response are never re-queried, and concurrent requests for the same ticket
are collapsed while one is in flight.
"""
from typing import Optional, Set

from civicai.agents.commissioner import commissioner_response
from civicai.exceptions import CivicAIError
from civicai.models.ticket import Ticket, TimelineEvent
from civicai.services.llm_service import LLMService
from civicai.services.ticket_service import TicketService
from civicai.utils.logger import get_logger

logger = get_logger(__name__)


class CommissionerService:
    """
    Persona stage runner

    Args:
        tickets: Ticket lifecycle service
        llm: Gemini service
    """

    def __init__(self, tickets: TicketService, llm: LLMService):
        self.tickets = tickets
        self.llm = llm
        self._in_flight: Set[str] = set()

    def needs_response(self, ticket: Ticket) -> bool:
        return not ticket.commissioner_response and ticket.id not in self._in_flight

    async def respond(self, ticket_id: str) -> Optional[Ticket]:
        """
        Generate and attach the commissioner response

        Returns:
            Updated ticket; the unchanged ticket when a response already
            exists or is in flight; None if the ticket does not exist

        Raises:
            PipelineStageError: When the persona call fails
            TicketStoreError: When the response cannot be persisted
        """
        ticket = self.tickets.get_ticket(ticket_id)
        if ticket is None:
            return None
        if not self.needs_response(ticket):
            logger.debug(f"Ticket {ticket_id} already answered or in flight")
            return ticket

        self._in_flight.add(ticket_id)
        try:
            settings = self.tickets.settings
            text = await commissioner_response(
                self.llm,
                ticket,
                settings.resolution_windows,
                max_output_tokens=settings.persona_max_output_tokens,
            )
            event = TimelineEvent(
                timestamp=self.tickets.clock(),
                title="Official Response",
                description="Virtual Commissioner has acknowledged the ticket.",
                icon="fa-user-tie",
            )
            updated = self.tickets.set_commissioner_response(ticket_id, text, event)
        finally:
            self._in_flight.discard(ticket_id)

        logger.info(f"Commissioner response attached to ticket {ticket_id}")
        return updated

    async def respond_in_background(self, ticket_id: str) -> None:
        """Fire-and-forget wrapper; failures are logged for manual retry"""
        try:
            await self.respond(ticket_id)
        except CivicAIError as e:
            logger.warning(f"Background commissioner response failed for {ticket_id}: {e}")
