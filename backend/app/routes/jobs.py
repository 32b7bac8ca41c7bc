"""Job routes: posting, browsing, matching and the job lifecycle."""

from fastapi import APIRouter, HTTPException, Query, Request, Response, status

from ..auth import CurrentUser
from ..database import MarketplaceDep
from ..logging_config import get_logger
from ..models import (
    AcceptJobRequest,
    AcceptJobResponse,
    CancelJobRequest,
    JobCreate,
    JobListResponse,
    JobResponse,
    TransitionResponse,
    to_job_response,
    to_transition_response,
)
from ..rate_limit import READ_LIMIT, WRITE_LIMIT, limiter

logger = get_logger("tradeline.jobs")
router = APIRouter(prefix="/jobs", tags=["jobs"])


@router.post("", response_model=JobResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(WRITE_LIMIT)
def create_job_listing(
    request: Request,
    job: JobCreate,
    auth: CurrentUser,
    market: MarketplaceDep,
):
    """
    Create a job.

    The authenticated user becomes the customer. With ``from_text`` the
    text is classified first and the job is built from the result; explicit
    ``location`` and ``budget`` still take precedence.
    """
    logger.info(f"POST /jobs | customer={auth.user_id} | from_text={bool(job.from_text)}")

    if job.from_text:
        created, _ = market.jobs.create_job_from_text(
            auth.user_id, job.from_text, location=job.location, budget=job.budget
        )
    else:
        created = market.jobs.create_job(
            customer_id=auth.user_id,
            title=job.title,
            description=job.description,
            suggested_trades=job.suggested_trades,
            primary_trade=job.primary_trade,
            budget=job.budget,
            location=job.location,
            urgency=job.urgency,
        )
    return to_job_response(created)


@router.get("", response_model=JobListResponse)
@limiter.limit(READ_LIMIT)
def list_jobs_endpoint(
    request: Request,
    auth: CurrentUser,
    market: MarketplaceDep,
    status_filter: list[str] | None = Query(None, alias="status"),
    trades: list[str] | None = Query(None),
    mine: bool = Query(False, description="Only jobs I posted or am assigned to"),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
):
    """
    List jobs, newest first.

    Filters:
    - status: one or more statuses ("open" is accepted for pending_quotes)
    - trades: jobs sharing ANY of these trade tags
    - mine: jobs where you are the customer or the assigned contractor
    """
    logger.info(f"GET /jobs | user={auth.user_id} | status={status_filter} | mine={mine}")

    if mine:
        as_customer = market.jobs.list_jobs(
            statuses=status_filter, customer_id=auth.user_id, trades=trades, limit=offset + limit
        )
        as_contractor = market.jobs.list_jobs(
            statuses=status_filter, contractor_id=auth.user_id, trades=trades, limit=offset + limit
        )
        # Merge and dedupe, keeping newest first
        seen = set()
        jobs = []
        for job in sorted(
            as_customer + as_contractor, key=lambda j: j.created_at, reverse=True
        ):
            if job.id not in seen:
                seen.add(job.id)
                jobs.append(job)
        jobs = jobs[offset : offset + limit]
    else:
        jobs = market.jobs.list_jobs(
            statuses=status_filter, trades=trades, limit=limit, offset=offset
        )

    return JobListResponse(
        jobs=[to_job_response(j) for j in jobs],
        total=len(jobs),
        limit=limit,
        offset=offset,
    )


@router.get("/matches", response_model=list[JobResponse])
@limiter.limit(READ_LIMIT)
def match_jobs(
    request: Request,
    auth: CurrentUser,
    market: MarketplaceDep,
    trades: list[str] | None = Query(
        None, description="Your trades; empty means your saved profile, or all open jobs"
    ),
    primary_trade: str | None = Query(None),
    limit: int | None = Query(None, ge=1, le=200),
):
    """Open jobs matching a contractor's trades (contractor dashboard)."""
    logger.info(f"GET /jobs/matches | contractor={auth.user_id} | trades={trades}")
    jobs = market.profiles.find_matches(
        auth.user_id, trades=trades, primary_trade=primary_trade, limit=limit
    )
    return [to_job_response(j) for j in jobs]


@router.post("/accept", response_model=AcceptJobResponse)
@limiter.limit(WRITE_LIMIT)
def accept_job(
    request: Request,
    accept_request: AcceptJobRequest,
    auth: CurrentUser,
    market: MarketplaceDep,
):
    """
    Claim an open job directly (no quote).

    Exactly one of several concurrent claims succeeds; the rest get 409.
    """
    contractor_id = accept_request.contractor_id or auth.user_id
    logger.info(f"POST /jobs/accept | job={accept_request.job_id} | contractor={contractor_id}")

    if contractor_id != auth.user_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You can only accept jobs for yourself",
        )

    job = market.jobs.accept_job(accept_request.job_id, contractor_id)
    return AcceptJobResponse(job=to_job_response(job))


@router.get("/{job_id}", response_model=JobResponse)
@limiter.limit(READ_LIMIT)
def get_job_details(
    request: Request,
    job_id: str,
    auth: CurrentUser,
    market: MarketplaceDep,
):
    """Get details of a specific job."""
    logger.info(f"GET /jobs/{job_id} | user={auth.user_id}")
    return to_job_response(market.jobs.get_job(job_id))


@router.get("/{job_id}/history", response_model=list[TransitionResponse])
@limiter.limit(READ_LIMIT)
def get_job_history(
    request: Request,
    job_id: str,
    auth: CurrentUser,
    market: MarketplaceDep,
):
    """Status history of a job, oldest first. Visible to its parties only."""
    logger.info(f"GET /jobs/{job_id}/history | user={auth.user_id}")
    job = market.jobs.get_job(job_id)
    if not job.is_party(auth.user_id):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only the job's customer or contractor can view its history",
        )
    return [to_transition_response(t) for t in market.jobs.get_job_history(job_id)]


@router.delete("/{job_id}", status_code=status.HTTP_204_NO_CONTENT)
@limiter.limit(WRITE_LIMIT)
def delete_job(
    request: Request,
    job_id: str,
    auth: CurrentUser,
    market: MarketplaceDep,
):
    """Delete a job you posted."""
    logger.info(f"DELETE /jobs/{job_id} | user={auth.user_id}")
    market.jobs.delete_job(job_id, auth.user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{job_id}/start", response_model=JobResponse)
@limiter.limit(WRITE_LIMIT)
def start_job(
    request: Request,
    job_id: str,
    auth: CurrentUser,
    market: MarketplaceDep,
):
    """Assigned contractor starts work."""
    logger.info(f"POST /jobs/{job_id}/start | user={auth.user_id}")
    return to_job_response(market.jobs.start_job(job_id, auth.user_id))


@router.post("/{job_id}/complete", response_model=JobResponse)
@limiter.limit(WRITE_LIMIT)
def complete_job(
    request: Request,
    job_id: str,
    auth: CurrentUser,
    market: MarketplaceDep,
):
    """Customer confirms the work is done."""
    logger.info(f"POST /jobs/{job_id}/complete | user={auth.user_id}")
    return to_job_response(market.jobs.complete_job(job_id, auth.user_id))


@router.post("/{job_id}/cancel", response_model=JobResponse)
@limiter.limit(WRITE_LIMIT)
def cancel_job(
    request: Request,
    job_id: str,
    auth: CurrentUser,
    market: MarketplaceDep,
    cancel_request: CancelJobRequest | None = None,
):
    """Customer cancels a job that has not finished."""
    reason = cancel_request.reason if cancel_request else None
    logger.info(f"POST /jobs/{job_id}/cancel | user={auth.user_id}")
    return to_job_response(market.jobs.cancel_job(job_id, auth.user_id, reason))
