"""
Unit tests for the Escalation Engine

Tests:
- Open → Escalated transition after the threshold
- Severity raised to High, never lowered
- Emergency / non-Open tickets untouched
- Idempotence (no duplicate events, no extra saves)
- Newest-first ordering with stable tie-break
"""
import pytest

from civicai.models.ticket import Severity, Ticket, TicketStatus, TimelineEvent
from civicai.repositories.ticket_store import InMemoryTicketStore
from civicai.services.escalation import (
    ESCALATION_EVENT_TITLE,
    EscalationEngine,
    escalate_ticket,
    sort_newest_first,
)

THRESHOLD_MS = 2 * 60 * 1000


def make_ticket(ticket_id: str, created_at: int, severity=Severity.MEDIUM, status=TicketStatus.OPEN) -> Ticket:
    return Ticket(
        id=ticket_id,
        title=f"Issue {ticket_id}",
        severity=severity,
        status=status,
        authority_id="auth_muni",
        created_at=created_at,
        updated_at=created_at,
        timeline=[TimelineEvent(timestamp=created_at, title="Ticket Created", icon="fa-plus-circle")],
    )


def escalation_events(ticket: Ticket):
    return [e for e in ticket.timeline if e.title == ESCALATION_EVENT_TITLE]


@pytest.fixture
def engine_for(settings, clock):
    """Build an engine over the given tickets"""
    def _build(*tickets):
        store = InMemoryTicketStore(list(tickets))
        return EscalationEngine(store, settings, clock), store
    return _build


class TestEscalateTicket:
    """Single-ticket rule"""

    def test_fires_after_threshold(self, clock):
        ticket = make_ticket("0001", clock.now)
        result = escalate_ticket(ticket, clock.now + THRESHOLD_MS + 1, THRESHOLD_MS, 2)

        assert result is not None
        assert result.status == TicketStatus.ESCALATED
        assert result.severity == Severity.HIGH
        assert result.updated_at == clock.now + THRESHOLD_MS + 1
        assert result.timeline[0].title == ESCALATION_EVENT_TITLE
        assert result.timeline[0].icon == "fa-arrow-up"
        assert "2 minutes" in result.timeline[0].description

    def test_not_at_exact_threshold(self, clock):
        ticket = make_ticket("0001", clock.now)
        assert escalate_ticket(ticket, clock.now + THRESHOLD_MS, THRESHOLD_MS, 2) is None

    @pytest.mark.parametrize("severity", [Severity.LOW, Severity.MEDIUM, Severity.HIGH])
    def test_severity_never_lowered(self, clock, severity):
        ticket = make_ticket("0001", clock.now, severity=severity)
        result = escalate_ticket(ticket, clock.now + THRESHOLD_MS * 5, THRESHOLD_MS, 2)

        assert result.severity == Severity.HIGH

    def test_emergency_never_escalated(self, clock):
        ticket = make_ticket("0001", clock.now, severity=Severity.EMERGENCY)
        assert escalate_ticket(ticket, clock.now + THRESHOLD_MS * 100, THRESHOLD_MS, 2) is None

    @pytest.mark.parametrize("status", [
        TicketStatus.SUBMITTED,
        TicketStatus.IN_PROGRESS,
        TicketStatus.RESOLVED,
        TicketStatus.ESCALATED,
    ])
    def test_non_open_statuses_are_terminal(self, clock, status):
        ticket = make_ticket("0001", clock.now, status=status)
        assert escalate_ticket(ticket, clock.now + THRESHOLD_MS * 100, THRESHOLD_MS, 2) is None

    def test_original_ticket_not_mutated(self, clock):
        ticket = make_ticket("0001", clock.now)
        escalate_ticket(ticket, clock.now + THRESHOLD_MS * 2, THRESHOLD_MS, 2)

        assert ticket.status == TicketStatus.OPEN
        assert len(ticket.timeline) == 1


class TestEscalationEngine:
    """Lazy escalation on read"""

    def test_fresh_tickets_unchanged_and_not_saved(self, engine_for, clock):
        engine, store = engine_for(make_ticket("0001", clock.now))
        clock.advance(1)

        tickets = engine.load_current()

        assert tickets[0].status == TicketStatus.OPEN
        assert store.save_count == 0

    def test_scenario_t0_plus_3_then_10_minutes(self, engine_for, clock):
        """Escalates once at T0+3min; T0+10min yields the same single event"""
        t0 = clock.now
        engine, store = engine_for(make_ticket("0001", t0))

        clock.advance(3)
        first = engine.load_current()[0]
        assert first.status == TicketStatus.ESCALATED
        assert first.severity == Severity.HIGH
        assert len(escalation_events(first)) == 1
        assert store.save_count == 1

        clock.advance(7)
        second = engine.load_current()[0]
        assert second == first
        assert len(escalation_events(second)) == 1
        assert store.save_count == 1

    def test_escalation_persisted(self, engine_for, clock):
        engine, store = engine_for(make_ticket("0001", clock.now))
        clock.advance(5)
        engine.load_current()

        assert store.load_all()[0].status == TicketStatus.ESCALATED

    def test_batch_saved_once(self, engine_for, clock):
        engine, store = engine_for(
            make_ticket("0001", clock.now),
            make_ticket("0002", clock.now + 1),
            make_ticket("0003", clock.now + 2),
        )
        clock.advance(10)
        tickets = engine.load_current()

        assert all(t.status == TicketStatus.ESCALATED for t in tickets)
        assert store.save_count == 1

    def test_emergency_and_resolved_stable_across_reads(self, engine_for, clock):
        engine, store = engine_for(
            make_ticket("0001", clock.now, severity=Severity.EMERGENCY),
            make_ticket("0002", clock.now, status=TicketStatus.RESOLVED, severity=Severity.LOW),
        )
        for _ in range(3):
            clock.advance(30)
            tickets = {t.id: t for t in engine.load_current()}
            assert tickets["0001"].status == TicketStatus.OPEN
            assert tickets["0001"].severity == Severity.EMERGENCY
            assert tickets["0002"].status == TicketStatus.RESOLVED
            assert tickets["0002"].severity == Severity.LOW

        assert store.save_count == 0

    def test_threshold_from_settings(self, settings, clock):
        settings.escalation_threshold_minutes = 10
        store = InMemoryTicketStore([make_ticket("0001", clock.now)])
        engine = EscalationEngine(store, settings, clock)

        clock.advance(5)
        assert engine.load_current()[0].status == TicketStatus.OPEN
        clock.advance(6)
        assert engine.load_current()[0].status == TicketStatus.ESCALATED


class TestOrdering:
    """Newest-first contract"""

    def test_sorted_descending(self, engine_for, clock):
        engine, _ = engine_for(
            make_ticket("0001", clock.now + 10),
            make_ticket("0002", clock.now + 30),
            make_ticket("0003", clock.now + 20),
        )
        created = [t.created_at for t in engine.load_current()]
        assert created == sorted(created, reverse=True)

    def test_ties_keep_insertion_order(self, engine_for, clock):
        engine, _ = engine_for(
            make_ticket("0001", clock.now),
            make_ticket("0002", clock.now),
            make_ticket("0003", clock.now - 5),
        )
        first = [t.id for t in engine.load_current()]
        second = [t.id for t in engine.load_current()]

        assert first == ["0001", "0002", "0003"]
        assert second == first

    def test_sort_helper(self, clock):
        tickets = [make_ticket("a", 1), make_ticket("b", 3), make_ticket("c", 2)]
        assert [t.id for t in sort_newest_first(tickets)] == ["b", "c", "a"]
