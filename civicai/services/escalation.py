"""
Escalation Engine - time-based status transitions, applied lazily on read

Rule (Open → Escalated):
    status == Open AND severity != Emergency AND age > threshold

Effects:
    - status becomes Escalated
    - severity is raised to High (never lowered)
    - "Auto-Escalated" event is prepended to the timeline
    - updatedAt = now

Every other status is terminal for this rule, so re-evaluation is idempotent.
"""
from typing import List, Optional, Sequence, Tuple

from civicai.config import get_settings, Settings
from civicai.models.ticket import (
    Severity,
    Ticket,
    TicketStatus,
    TimelineEvent,
    max_severity,
)
from civicai.repositories.ticket_store import TicketStore
from civicai.utils.clock import Clock, now_ms
from civicai.utils.logger import get_logger

logger = get_logger(__name__)

ESCALATION_EVENT_TITLE = "Auto-Escalated"


def _is_escalation_candidate(ticket: Ticket) -> bool:
    """Exhaustive status check for the automatic rule"""
    status = ticket.status
    if status == TicketStatus.OPEN:
        return ticket.severity != Severity.EMERGENCY
    if status in (
        TicketStatus.SUBMITTED,
        TicketStatus.IN_PROGRESS,
        TicketStatus.RESOLVED,
        TicketStatus.ESCALATED,
    ):
        return False
    raise ValueError(f"Unhandled ticket status: {status}")


def escalate_ticket(ticket: Ticket, now: int, threshold_ms: int, threshold_minutes: float) -> Optional[Ticket]:
    """
    Apply the escalation rule to a single ticket

    Args:
        ticket: Ticket to evaluate
        now: Current time (epoch ms)
        threshold_ms: Age after which an open ticket escalates
        threshold_minutes: Same threshold, for the event text

    Returns:
        Escalated copy of the ticket, or None if the rule does not fire
    """
    if not _is_escalation_candidate(ticket):
        return None
    if now - ticket.created_at <= threshold_ms:
        return None

    event = TimelineEvent(
        timestamp=now,
        title=ESCALATION_EVENT_TITLE,
        description=f"Ticket escalated due to inactivity for {threshold_minutes:g} minutes.",
        icon="fa-arrow-up",
    )
    return ticket.model_copy(update={
        "status": TicketStatus.ESCALATED,
        "severity": max_severity(ticket.severity, Severity.HIGH),
        "timeline": [event, *ticket.timeline],
        "updated_at": now,
    })


def sort_newest_first(tickets: Sequence[Ticket]) -> List[Ticket]:
    """Sort by createdAt descending; equal timestamps keep store order"""
    return sorted(tickets, key=lambda t: t.created_at, reverse=True)


class EscalationEngine:
    """
    Reads the ticket table, escalates stale open tickets and returns the
    corrected list sorted newest first.
    """

    def __init__(
        self,
        store: TicketStore,
        settings: Optional[Settings] = None,
        clock: Clock = now_ms
    ):
        settings = settings or get_settings()
        self.store = store
        self.clock = clock
        self.threshold_minutes = settings.escalation_threshold_minutes
        self.threshold_ms = settings.escalation_threshold_ms

    def apply(self, tickets: Sequence[Ticket], now: int) -> Tuple[List[Ticket], bool]:
        """
        Evaluate the rule against every ticket

        Returns:
            (tickets in original order, whether any ticket changed)
        """
        updated: List[Ticket] = []
        changed = False

        for ticket in tickets:
            escalated = escalate_ticket(ticket, now, self.threshold_ms, self.threshold_minutes)
            if escalated is None:
                updated.append(ticket)
            else:
                logger.info(f"Auto-escalated ticket {ticket.id} ({ticket.severity.value} → {escalated.severity.value})")
                updated.append(escalated)
                changed = True

        return updated, changed

    def load_current(self) -> List[Ticket]:
        """
        Load, escalate and persist (once, if anything changed)

        Returns:
            Time-corrected tickets sorted by createdAt descending
        """
        tickets = self.store.load_all()
        updated, changed = self.apply(tickets, self.clock())

        if changed:
            self.store.save_all(updated)

        return sort_newest_first(updated)
