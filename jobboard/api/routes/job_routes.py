"""
Job Routes

GET /jobs - List jobs (filters, pagination, application counters)
GET /jobs/{job_id} - Get job details
POST /jobs - Post a job (category upserted from categoryTitle)
PUT /jobs/{job_id} - Update job
DELETE /jobs/{job_id} - Delete job and its applications
POST /jobs/{job_id}/apply - Apply to job
"""

from fastapi import APIRouter, Depends, Request
from pymongo.database import Database

from jobboard.core.auth import get_current_applicant_id
from jobboard.core.config import get_settings
from jobboard.db.mongodb import get_mongo_db
from jobboard.services.application_service import ApplicationService
from jobboard.services.filters import parse_query_params
from jobboard.services.job_service import JobService
from jobboard.services.notification_service import Notifier, get_notifier
from jobboard.services.pagination import get_page
from jobboard.schemas.schemas import (
    JobCreate, JobUpdate, JobListResponse, JobDetailResponse, JobPostResponse,
    ApplicationCreate, MessageResponse
)

router = APIRouter(prefix="/jobs", tags=["Jobs"])


def get_job_service(db: Database = Depends(get_mongo_db)) -> JobService:
    return JobService(db)


@router.get("", response_model=JobListResponse)
async def list_jobs(request: Request, service: JobService = Depends(get_job_service)):
    """
    List jobs newest first, 4 per page.

    Any job field can be used as a filter, with bracketed comparison
    operators (`salary[gte]=50000`); `jobTitle` matches as a
    case-insensitive substring.
    """
    params = parse_query_params(request.query_params.multi_items())
    per_page = get_settings().jobs_per_page
    jobs, jobs_count = service.list_jobs(params, get_page(params.get("page")), per_page)
    return JobListResponse(jobs=jobs, jobs_count=jobs_count, result_per_page=per_page)


@router.get("/{job_id}", response_model=JobDetailResponse)
async def get_job(job_id: str, service: JobService = Depends(get_job_service)):
    """Get details of a specific job."""
    return JobDetailResponse(job=service.get_job(job_id))


@router.post("", response_model=JobPostResponse, status_code=201)
async def post_job(job: JobCreate, service: JobService = Depends(get_job_service)):
    """Post a job. The category is created or re-titled from categoryTitle."""
    return JobPostResponse(job=service.create_job(job), message="Job is posted")


@router.put("/{job_id}", response_model=MessageResponse)
async def update_job(job_id: str, update: JobUpdate, service: JobService = Depends(get_job_service)):
    service.update_job(job_id, update)
    return MessageResponse(message="Job updated")


@router.delete("/{job_id}", response_model=MessageResponse)
async def delete_job(job_id: str, service: JobService = Depends(get_job_service)):
    """Delete a job posting. Cascades to applications."""
    service.delete_job(job_id)
    return MessageResponse(message="Job is deleted")


@router.post("/{job_id}/apply", response_model=MessageResponse)
async def apply_to_job(
    job_id: str,
    application: ApplicationCreate,
    applicant_id: str = Depends(get_current_applicant_id),
    db: Database = Depends(get_mongo_db),
    notifier: Notifier = Depends(get_notifier),
):
    """Apply to a job. Cannot apply twice to same job."""
    service = ApplicationService(db, notifier)
    service.apply(applicant_id, job_id, application.model_dump(by_alias=True, exclude_none=True))
    return MessageResponse(message="Your application is registered")
