"""Edits to the collaborator-owned parts of a plan.

Chat, payments, tickets and weekly notes are recorded in history like any
other edit but never touch costs.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional
from uuid import uuid4

from buildplan.engine.mutation import PlanDraft
from buildplan.models.project_plan import (
    ChatMessage,
    MessageSender,
    MilestoneStatus,
    PaymentStatus,
    SupportTicket,
    TicketActivity,
    TicketCategory,
    TicketStatus,
)

ADVISOR_ACKNOWLEDGEMENT = (
    "Thank you for your message. Let me review your request and I will get back "
    "to you shortly with a revised proposal based on our discussion."
)
TICKET_ASSIGNEE = "Project Manager"
TICKET_RESOLUTION_DAYS = 3


def _now(now: Optional[datetime]) -> datetime:
    return now or datetime.now(timezone.utc)


def send_message(draft: PlanDraft, text: str, now: Optional[datetime] = None) -> None:
    """Append a user message and the advisor's acknowledgement one second later."""
    sent_at = _now(now)
    draft.chat_history.append(
        ChatMessage(sender=MessageSender.USER, text=text, timestamp=sent_at.isoformat())
    )
    draft.chat_history.append(
        ChatMessage(
            sender=MessageSender.ADVISOR,
            text=ADVISOR_ACKNOWLEDGEMENT,
            timestamp=(sent_at + timedelta(seconds=1)).isoformat(),
        )
    )


def add_advisor_message(draft: PlanDraft, text: str, now: Optional[datetime] = None) -> None:
    draft.chat_history.append(
        ChatMessage(sender=MessageSender.ADVISOR, text=text, timestamp=_now(now).isoformat())
    )


def _advance_next_pending(draft: PlanDraft) -> None:
    for milestone in draft.payment_schedule:
        if milestone.status == MilestoneStatus.PENDING:
            milestone.status = MilestoneStatus.DUE.value
            return


def record_booking_payment(draft: PlanDraft) -> None:
    """Mark the booking amount paid and make the next milestone due."""
    draft.payment_status = PaymentStatus.BOOKING_PAID.value
    for milestone in draft.payment_schedule:
        if milestone.status == MilestoneStatus.DUE:
            milestone.status = MilestoneStatus.COMPLETED.value
            break
    _advance_next_pending(draft)


def mark_milestone_paid(draft: PlanDraft, milestone_name: str) -> None:
    """Complete a due milestone and make the next pending one due.

    Milestones that are not currently due are left alone.
    """
    for milestone in draft.payment_schedule:
        if milestone.milestone == milestone_name:
            if milestone.status == MilestoneStatus.DUE:
                milestone.status = MilestoneStatus.COMPLETED.value
                _advance_next_pending(draft)
            return


def raise_ticket(
    draft: PlanDraft,
    subject: str,
    category: TicketCategory,
    description: str,
    now: Optional[datetime] = None
) -> SupportTicket:
    """Open a support ticket at the top of the ticket list."""
    opened_at = _now(now)
    ticket = SupportTicket(
        id=f"TKT-{uuid4().hex[:9].upper()}",
        subject=subject,
        category=category,
        status=TicketStatus.OPEN,
        assigned_to=TICKET_ASSIGNEE,
        expected_resolution=(opened_at + timedelta(days=TICKET_RESOLUTION_DAYS)).date().isoformat(),
        activity=[
            TicketActivity(
                update=f'Ticket created. User reported: "{description}"',
                timestamp=opened_at.isoformat(),
            )
        ],
    )
    draft.support_tickets.insert(0, ticket)
    return ticket


def add_user_note(draft: PlanDraft, update_date: str, note: str) -> None:
    """Attach the user's note to the weekly update of the given date."""
    for update in draft.weekly_updates:
        if update.date == update_date:
            update.user_notes = note
            return
