"""
Ticket Lifecycle Service

Public surface over the ticket store:
- list_tickets / get_ticket / search (always through the escalation engine)
- create_ticket (id allocation + seeded timeline)
- vote / append_timeline_event / set_commissioner_response

Every mutation is an explicit read-modify-write: load the corrected list,
build a new ticket value with model_copy, persist the full collection and
return the new value. Unknown ids return None and never write.
"""
import random
from typing import Callable, Collection, List, Optional

from civicai.config import get_settings, Settings
from civicai.models.ticket import (
    Ticket,
    TicketDraft,
    TicketStatus,
    TimelineEvent,
)
from civicai.repositories.ticket_store import TicketStore
from civicai.services.authorities import AuthorityRegistry
from civicai.services.escalation import EscalationEngine
from civicai.utils.clock import Clock, now_ms
from civicai.utils.logger import get_logger

logger = get_logger(__name__)

TICKET_ID_DIGITS = 4
MAX_RANDOM_ATTEMPTS = 64


def allocate_ticket_id(existing_ids: Collection[str], rng: Optional[random.Random] = None) -> str:
    """
    Allocate a short zero-padded numeric id not present in existing_ids

    Random ids are tried first; if they keep colliding the free ids of the
    current width are enumerated, and the width grows when all are taken.

    Args:
        existing_ids: Ids already in use
        rng: Random source (injectable for tests)

    Returns:
        New unique ticket id
    """
    rng = rng or random.Random()
    taken = set(existing_ids)
    width = TICKET_ID_DIGITS

    while True:
        space = 10 ** width
        used = sum(1 for i in taken if len(i) == width and i.isdigit())
        if used < space:
            for _ in range(MAX_RANDOM_ATTEMPTS):
                candidate = str(rng.randrange(space)).zfill(width)
                if candidate not in taken:
                    return candidate
            free = [str(n).zfill(width) for n in range(space) if str(n).zfill(width) not in taken]
            if free:
                return rng.choice(free)
        width += 1


class TicketService:
    """
    Ticket lifecycle operations

    Args:
        store: Ticket store backend
        settings: Application settings
        registry: Authority registry (for the routing timeline event)
        clock: Epoch-ms clock
        id_allocator: Callable returning a fresh id given the ids in use
    """

    def __init__(
        self,
        store: TicketStore,
        settings: Optional[Settings] = None,
        registry: Optional[AuthorityRegistry] = None,
        clock: Clock = now_ms,
        id_allocator: Callable[[Collection[str]], str] = allocate_ticket_id
    ):
        self.settings = settings or get_settings()
        self.store = store
        self.registry = registry or AuthorityRegistry(settings=self.settings)
        self.clock = clock
        self.id_allocator = id_allocator
        self.escalation = EscalationEngine(store, self.settings, clock)
        logger.info("TicketService initialized")

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def list_tickets(self) -> List[Ticket]:
        """Time-corrected tickets, newest first"""
        return self.escalation.load_current()

    def get_ticket(self, ticket_id: str) -> Optional[Ticket]:
        """
        Get ticket by ID

        Returns:
            Ticket if found, None otherwise
        """
        for ticket in self.list_tickets():
            if ticket.id == ticket_id:
                return ticket
        return None

    def search(self, query: Optional[str]) -> List[Ticket]:
        """
        Case-insensitive substring search over id, title and description

        Args:
            query: Search text (blank returns every ticket)
        """
        tickets = self.list_tickets()
        needle = (query or "").strip().lower()
        if not needle:
            return tickets

        return [
            t for t in tickets
            if needle in t.id.lower()
            or needle in t.title.lower()
            or needle in t.description.lower()
        ]

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def create_ticket(self, draft: TicketDraft) -> Ticket:
        """
        Commit a pipeline draft as a new Open ticket

        Raises:
            TicketStoreError: If the store cannot persist the ticket
        """
        tickets = self.list_tickets()
        now = self.clock()
        ticket_id = self.id_allocator([t.id for t in tickets])

        authority = self.registry.get(draft.authority_id)
        authority_name = authority.name if authority else draft.authority_id

        timeline = [
            TimelineEvent(
                timestamp=now + 1000,
                title="AI Analysis Complete",
                description=f"Severity rated as {draft.severity.value}. Routed to {authority_name}.",
                icon="fa-robot",
            ),
            TimelineEvent(
                timestamp=now,
                title="Ticket Created",
                description="Issue reported by citizen.",
                icon="fa-plus-circle",
            ),
        ]

        ticket = Ticket(
            **draft.model_dump(),
            id=ticket_id,
            status=TicketStatus.OPEN,
            created_at=now,
            updated_at=now,
            votes=0,
            timeline=timeline,
        )

        # Store order is insertion order (tie-break for equal createdAt)
        stored = self.store.load_all()
        self.store.save_all([*stored, ticket])

        logger.info(f"Created ticket {ticket.id}: {ticket.title} ({ticket.severity.value} → {ticket.authority_id})")
        return ticket

    def vote(self, ticket_id: str) -> Optional[Ticket]:
        """
        Add one vote

        Returns:
            Updated ticket, or None if the id does not exist
        """
        return self._update(ticket_id, lambda t: {"votes": t.votes + 1})

    def append_timeline_event(self, ticket_id: str, event: TimelineEvent) -> Optional[Ticket]:
        """
        Prepend a timeline event and bump updatedAt

        Returns:
            Updated ticket, or None if the id does not exist
        """
        return self._update(ticket_id, lambda t: {
            "timeline": [event, *t.timeline],
            "updated_at": self.clock(),
        })

    def set_commissioner_response(
        self,
        ticket_id: str,
        response: str,
        event: Optional[TimelineEvent] = None
    ) -> Optional[Ticket]:
        """
        Attach the official response (write-once)

        An existing response is never replaced; the ticket is returned as is.

        Returns:
            Updated ticket, or None if the id does not exist
        """
        def apply(ticket: Ticket) -> Optional[dict]:
            if ticket.commissioner_response:
                logger.info(f"Ticket {ticket.id} already has a commissioner response, keeping it")
                return None
            update = {"commissioner_response": response, "updated_at": self.clock()}
            if event is not None:
                update["timeline"] = [event, *ticket.timeline]
            return update

        return self._update(ticket_id, apply)

    def _update(self, ticket_id: str, build_update: Callable[[Ticket], Optional[dict]]) -> Optional[Ticket]:
        """Read-modify-write of a single ticket"""
        tickets = self.store.load_all()
        tickets, _ = self.escalation.apply(tickets, self.clock())

        for index, ticket in enumerate(tickets):
            if ticket.id != ticket_id:
                continue

            update = build_update(ticket)
            if update is None:
                return ticket

            updated = ticket.model_copy(update=update)
            tickets[index] = updated
            self.store.save_all(tickets)
            return updated

        logger.info(f"Ticket {ticket_id} not found")
        return None
