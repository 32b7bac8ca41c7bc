"""Quote routes: contractors quote on open jobs, customers accept or decline."""

from fastapi import APIRouter, Request, status

from ..auth import CurrentUser
from ..database import MarketplaceDep
from ..logging_config import get_logger
from ..models import (
    AcceptQuoteResponse,
    QuoteCreate,
    QuoteResponse,
    to_job_response,
    to_quote_response,
)
from ..rate_limit import READ_LIMIT, WRITE_LIMIT, limiter

logger = get_logger("tradeline.quotes")
router = APIRouter(tags=["quotes"])


@router.post(
    "/jobs/{job_id}/quotes", response_model=QuoteResponse, status_code=status.HTTP_201_CREATED
)
@limiter.limit(WRITE_LIMIT)
def create_quote(
    request: Request,
    job_id: str,
    quote: QuoteCreate,
    auth: CurrentUser,
    market: MarketplaceDep,
):
    """Submit a quote on an open job as the authenticated contractor."""
    logger.info(f"POST /jobs/{job_id}/quotes | contractor={auth.user_id} | amount={quote.amount}")
    created = market.quotes.create_quote(
        job_id,
        auth.user_id,
        quote.amount,
        currency=quote.currency,
        description=quote.description,
        estimated_duration=quote.estimated_duration,
        start_date=quote.start_date,
        valid_until=quote.valid_until,
    )
    return to_quote_response(created)


@router.get("/jobs/{job_id}/quotes", response_model=list[QuoteResponse])
@limiter.limit(READ_LIMIT)
def list_job_quotes(
    request: Request,
    job_id: str,
    auth: CurrentUser,
    market: MarketplaceDep,
):
    """
    Quotes on a job, cheapest first.

    The job's customer sees every quote; a contractor sees only their own.
    """
    logger.info(f"GET /jobs/{job_id}/quotes | user={auth.user_id}")
    job = market.jobs.get_job(job_id)
    quotes = market.quotes.list_quotes_for_job(job_id)
    if job.customer_id != auth.user_id:
        quotes = [q for q in quotes if q.contractor_id == auth.user_id]
    return [to_quote_response(q) for q in quotes]


@router.get("/quotes/mine", response_model=list[QuoteResponse])
@limiter.limit(READ_LIMIT)
def list_my_quotes(
    request: Request,
    auth: CurrentUser,
    market: MarketplaceDep,
):
    """Quotes you have submitted, newest first."""
    logger.info(f"GET /quotes/mine | contractor={auth.user_id}")
    return [to_quote_response(q) for q in market.quotes.list_quotes_for_contractor(auth.user_id)]


@router.post("/quotes/{quote_id}/accept", response_model=AcceptQuoteResponse)
@limiter.limit(WRITE_LIMIT)
def accept_quote(
    request: Request,
    quote_id: str,
    auth: CurrentUser,
    market: MarketplaceDep,
):
    """Accept a quote: the job goes to its contractor and other quotes are declined."""
    logger.info(f"POST /quotes/{quote_id}/accept | customer={auth.user_id}")
    job, quote = market.quotes.accept_quote(quote_id, auth.user_id)
    return AcceptQuoteResponse(job=to_job_response(job), quote=to_quote_response(quote))


@router.post("/quotes/{quote_id}/decline", response_model=QuoteResponse)
@limiter.limit(WRITE_LIMIT)
def decline_quote(
    request: Request,
    quote_id: str,
    auth: CurrentUser,
    market: MarketplaceDep,
):
    """Decline a pending quote on your job."""
    logger.info(f"POST /quotes/{quote_id}/decline | customer={auth.user_id}")
    return to_quote_response(market.quotes.decline_quote(quote_id, auth.user_id))
