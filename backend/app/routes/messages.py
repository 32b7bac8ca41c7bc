"""Message routes: job threads between customers and contractors."""

from fastapi import APIRouter, Query, Request, status

from ..auth import CurrentUser
from ..database import MarketplaceDep
from ..logging_config import get_logger
from ..models import (
    MarkAllReadResponse,
    MessageCreate,
    MessageResponse,
    UnreadCountResponse,
    to_message_response,
)
from ..rate_limit import READ_LIMIT, WRITE_LIMIT, limiter

logger = get_logger("tradeline.messages")
router = APIRouter(tags=["messages"])


@router.post(
    "/jobs/{job_id}/messages", response_model=MessageResponse, status_code=status.HTTP_201_CREATED
)
@limiter.limit(WRITE_LIMIT)
def send_message(
    request: Request,
    job_id: str,
    message: MessageCreate,
    auth: CurrentUser,
    market: MarketplaceDep,
):
    logger.info(f"POST /jobs/{job_id}/messages | sender={auth.user_id}")
    sent = market.messages.send_message(job_id, auth.user_id, message.receiver_id, message.content)
    return to_message_response(sent)


@router.get("/jobs/{job_id}/messages", response_model=list[MessageResponse])
@limiter.limit(READ_LIMIT)
def list_messages(
    request: Request,
    job_id: str,
    auth: CurrentUser,
    market: MarketplaceDep,
    with_user: str | None = Query(None, alias="with", description="Other party's user id"),
):
    """
    Messages on a job, oldest first.

    With ``with`` set, only the conversation between you and that user;
    otherwise every message on the job that you sent or received.
    """
    logger.info(f"GET /jobs/{job_id}/messages | user={auth.user_id} | with={with_user}")
    if with_user:
        messages = market.messages.get_conversation(job_id, auth.user_id, with_user)
    else:
        messages = [
            m
            for m in market.messages.list_messages_for_job(job_id)
            if auth.user_id in (m.sender_id, m.receiver_id)
        ]
    return [to_message_response(m) for m in messages]


@router.post("/jobs/{job_id}/messages/read", response_model=MarkAllReadResponse)
@limiter.limit(WRITE_LIMIT)
def mark_all_read(
    request: Request,
    job_id: str,
    auth: CurrentUser,
    market: MarketplaceDep,
):
    """Mark every message sent to you on this job as read."""
    logger.info(f"POST /jobs/{job_id}/messages/read | user={auth.user_id}")
    return MarkAllReadResponse(marked=market.messages.mark_all_read(job_id, auth.user_id))


@router.post("/messages/{message_id}/read", response_model=MessageResponse)
@limiter.limit(WRITE_LIMIT)
def mark_read(
    request: Request,
    message_id: str,
    auth: CurrentUser,
    market: MarketplaceDep,
):
    logger.info(f"POST /messages/{message_id}/read | user={auth.user_id}")
    return to_message_response(market.messages.mark_read(message_id, auth.user_id))


@router.get("/messages/unread-count", response_model=UnreadCountResponse)
@limiter.limit(READ_LIMIT)
def unread_count(
    request: Request,
    auth: CurrentUser,
    market: MarketplaceDep,
):
    return UnreadCountResponse(unread=market.messages.unread_count(auth.user_id))
