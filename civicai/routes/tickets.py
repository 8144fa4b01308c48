"""
Ticket lifecycle API routes
"""
from typing import List, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, status

from civicai.dependencies import (
    get_commissioner_service,
    get_registry,
    get_ticket_service,
)
from civicai.models.schemas import CreateTicketRequest, TimelineEventRequest
from civicai.models.ticket import Ticket
from civicai.services.authorities import AuthorityRegistry
from civicai.services.commissioner_service import CommissionerService
from civicai.services.report_builder import build_ticket_draft
from civicai.services.ticket_service import TicketService
from civicai.utils.logger import get_logger
from civicai.utils.validators import validate_ticket_id

logger = get_logger(__name__)

# Handlers stay async and call the synchronous store on the event loop.
# Each read-modify-write then runs to completion without interleaving;
# plain `def` handlers would move them to the threadpool and lose that.
# The cost is that a store write (fsync) briefly blocks the loop.
router = APIRouter(prefix="/api/tickets", tags=["tickets"])


def _not_found(ticket_id: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Ticket {ticket_id} not found"
    )


def _require(ticket: Optional[Ticket], ticket_id: str) -> Ticket:
    if ticket is None:
        raise _not_found(ticket_id)
    return ticket


@router.get("", response_model=List[Ticket], response_model_by_alias=True)
async def list_tickets(
    q: Optional[str] = Query(None, description="Search ticket id, title or description"),
    service: TicketService = Depends(get_ticket_service)
):
    """
    List tickets newest first (escalation applied), optionally filtered
    """
    return service.search(q) if q else service.list_tickets()


@router.post(
    "",
    response_model=Ticket,
    response_model_by_alias=True,
    status_code=status.HTTP_201_CREATED
)
async def create_ticket(
    request: CreateTicketRequest,
    service: TicketService = Depends(get_ticket_service),
    registry: AuthorityRegistry = Depends(get_registry)
):
    """
    Commit an analysed report as a new ticket
    """
    draft = build_ticket_draft(
        request.report,
        registry,
        image_url=request.image_url,
        severity_override=request.severity_override,
    )
    return service.create_ticket(draft)


@router.get("/{ticket_id}", response_model=Ticket, response_model_by_alias=True)
async def get_ticket(
    ticket_id: str,
    background_tasks: BackgroundTasks,
    service: TicketService = Depends(get_ticket_service),
    commissioner: CommissionerService = Depends(get_commissioner_service)
):
    """
    Get ticket details

    Schedules the Virtual Commissioner response when the ticket has none.
    """
    if not validate_ticket_id(ticket_id):
        raise _not_found(ticket_id)

    ticket = _require(service.get_ticket(ticket_id), ticket_id)
    if commissioner.needs_response(ticket):
        background_tasks.add_task(commissioner.respond_in_background, ticket.id)
    return ticket


@router.post("/{ticket_id}/vote", response_model=Ticket, response_model_by_alias=True)
async def vote_ticket(
    ticket_id: str,
    service: TicketService = Depends(get_ticket_service)
):
    """
    Add one vote to a ticket
    """
    return _require(service.vote(ticket_id), ticket_id)


@router.post("/{ticket_id}/timeline", response_model=Ticket, response_model_by_alias=True)
async def append_timeline_event(
    ticket_id: str,
    request: TimelineEventRequest,
    service: TicketService = Depends(get_ticket_service)
):
    """
    Prepend an event to the ticket timeline
    """
    event = request.to_event(service.clock())
    return _require(service.append_timeline_event(ticket_id, event), ticket_id)


@router.post("/{ticket_id}/commissioner-response", response_model=Ticket, response_model_by_alias=True)
async def request_commissioner_response(
    ticket_id: str,
    commissioner: CommissionerService = Depends(get_commissioner_service)
):
    """
    Request the Virtual Commissioner response now (manual retry)

    Returns the existing response untouched if one is already attached.
    """
    return _require(await commissioner.respond(ticket_id), ticket_id)
