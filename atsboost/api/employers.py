import logging

from fastapi import APIRouter, Depends, Query, status

from atsboost.api.deps import get_current_user
from atsboost.libs.database import get_database
from atsboost.libs.exceptions import AuthorizationException, NotFoundException
from atsboost.schemas import Employer, EmployerCreate, JobPosting, JobPostingCreate, User

logger = logging.getLogger(__name__)

router = APIRouter(tags=["employers"])


@router.post("/employers", status_code=status.HTTP_201_CREATED)
def create_employer(request: EmployerCreate, user: User = Depends(get_current_user)) -> Employer:
    db = get_database()
    employer = db.create_employer(user.id, **request.model_dump())
    if user.role == "user":
        db.update_user(user.id, role="employer")
    logger.info("Employer profile %s created for user %s", employer.id, user.id)
    return employer


@router.get("/employers/me")
def my_employer(user: User = Depends(get_current_user)) -> Employer:
    employer = get_database().get_employer_by_user(user.id)
    if employer is None:
        raise NotFoundException("No employer profile for this user", error="Employer not found")
    return employer


@router.get("/employers")
def list_employers(
    industry: str | None = None,
    location: str | None = None,
    is_verified: bool | None = None,
    limit: int = Query(50, ge=1, le=100),
) -> list[Employer]:
    return get_database().list_employers(
        industry=industry, location=location, is_verified=is_verified, limit=limit
    )


@router.post("/job-postings", status_code=status.HTTP_201_CREATED)
def create_job_posting(request: JobPostingCreate, user: User = Depends(get_current_user)) -> JobPosting:
    db = get_database()
    employer = db.get_employer_by_user(user.id)
    if employer is None:
        raise AuthorizationException("Create an employer profile before posting jobs")
    data = request.model_dump()
    return db.create_job_posting(employer.id, data.pop("title"), data.pop("description"), **data)


@router.get("/job-postings")
def list_job_postings(
    employer_id: int | None = None,
    location: str | None = None,
    is_active: bool | None = True,
    limit: int = Query(50, ge=1, le=100),
) -> list[JobPosting]:
    return get_database().list_job_postings(
        employer_id=employer_id, location=location, is_active=is_active, limit=limit
    )


@router.get("/job-postings/{posting_id}")
def get_job_posting(posting_id: int) -> JobPosting:
    posting = get_database().get_job_posting(posting_id)
    if posting is None:
        raise NotFoundException(f"Job posting {posting_id} not found", error="Job posting not found")
    return posting
