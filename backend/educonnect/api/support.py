from typing import List, Literal, Optional
from datetime import datetime, timezone
from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field

from educonnect.auth.dependencies import get_current_profile, require_role
from educonnect.models.user import BaseProfile
from educonnect.services.firestore_service import (
    add_document,
    get_db,
    get_document,
    stream_query,
    update_document,
)

router = APIRouter(
    prefix="/support",
    tags=["support"],
)

TicketStatus = Literal["open", "resolved"]


class SupportTicket(BaseModel):
    """Response model for a support ticket."""
    id: str
    userId: str
    userName: Optional[str] = None
    userRole: Optional[str] = None
    message: str
    status: TicketStatus = "open"
    createdAt: Optional[datetime] = None
    resolvedAt: Optional[datetime] = None


class CreateTicketRequest(BaseModel):
    """Request model for contacting support."""
    message: str = Field(..., min_length=1, max_length=2000, description="Describe the problem")


class TicketListResponse(BaseModel):
    tickets: List[SupportTicket]


@router.post(
    "/tickets",
    response_model=SupportTicket,
    status_code=status.HTTP_201_CREATED,
    summary="Contact support",
    description="Stores a support ticket from the current user.",
)
def create_ticket(
    request: CreateTicketRequest,
    profile: BaseProfile = Depends(get_current_profile),
    db=Depends(get_db),
) -> SupportTicket:
    created = add_document(db, "supportTickets", {
        "userId": profile.id,
        "userName": profile.name,
        "userRole": profile.role,
        "message": request.message.strip(),
        "status": "open",
        "createdAt": datetime.now(timezone.utc),
    })
    print(f"[SUPPORT] Ticket {created['id']} opened by {profile.id}")
    return SupportTicket(**created)


@router.get(
    "/tickets",
    response_model=TicketListResponse,
    summary="List support tickets",
    description="Admin-only. Returns support tickets, optionally filtered by status, newest first.",
)
def list_tickets(
    status_filter: Optional[TicketStatus] = Query(None, alias="status"),
    admin: BaseProfile = Depends(require_role("admin")),
    db=Depends(get_db),
) -> TicketListResponse:
    query = db.collection("supportTickets")
    if status_filter:
        query = query.where("status", "==", status_filter)
    tickets = stream_query(query, "supportTickets")
    tickets.sort(key=lambda t: t.get("createdAt") or datetime.min.replace(tzinfo=timezone.utc), reverse=True)
    return TicketListResponse(tickets=[SupportTicket(**t) for t in tickets])


@router.patch(
    "/tickets/{ticket_id}/resolve",
    response_model=SupportTicket,
    summary="Resolve support ticket",
    description="Admin-only. Marks a ticket as resolved.",
    responses={
        404: {"description": "Ticket not found"},
    },
)
def resolve_ticket(
    ticket_id: str,
    admin: BaseProfile = Depends(require_role("admin")),
    db=Depends(get_db),
) -> SupportTicket:
    ticket = get_document(db, "supportTickets", ticket_id, label="Ticket")
    resolved_at = datetime.now(timezone.utc)
    update_document(db, "supportTickets", ticket_id, {"status": "resolved", "resolvedAt": resolved_at})
    ticket.update({"status": "resolved", "resolvedAt": resolved_at})
    print(f"[SUPPORT] Ticket {ticket_id} resolved by {admin.id}")
    return SupportTicket(**ticket)
