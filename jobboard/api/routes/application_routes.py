"""
Application Routes

GET /applications - List applications (admin; filters, pagination)
GET /applications/me - Get my applications
PUT /applications/{application_id}/schedule - Schedule interview
PUT /applications/{application_id}/status - Change status
PUT /applications/{application_id} - Update status and salary offered
DELETE /applications/{application_id} - Withdraw (soft delete)
"""

from fastapi import APIRouter, Depends, Request
from pymongo.database import Database

from jobboard.core.auth import get_current_applicant_id
from jobboard.core.config import get_settings
from jobboard.db.mongodb import get_mongo_db
from jobboard.services.application_service import ApplicationService
from jobboard.services.filters import parse_query_params
from jobboard.services.notification_service import Notifier, get_notifier
from jobboard.services.pagination import get_page
from jobboard.schemas.schemas import (
    ApplicationListResponse, MyApplicationsResponse, InterviewSchedule,
    ApplicationStatusUpdate, ApplicationUpdate, MessageResponse
)

router = APIRouter(prefix="/applications", tags=["Applications"])


def get_application_service(
    db: Database = Depends(get_mongo_db),
    notifier: Notifier = Depends(get_notifier),
) -> ApplicationService:
    return ApplicationService(db, notifier)


@router.get("", response_model=ApplicationListResponse)
async def list_applications(request: Request, service: ApplicationService = Depends(get_application_service)):
    """All non-withdrawn applications, newest first, with job and applicant."""
    params = parse_query_params(request.query_params.multi_items())
    per_page = get_settings().applications_per_page
    applications, count = service.list_applications(params, get_page(params.get("page")), per_page)
    return ApplicationListResponse(
        applications=applications, result_per_page=per_page, application_count=count
    )


@router.get("/me", response_model=MyApplicationsResponse)
async def my_applications(
    applicant_id: str = Depends(get_current_applicant_id),
    service: ApplicationService = Depends(get_application_service),
):
    return MyApplicationsResponse(applications=service.list_my_applications(applicant_id))


@router.put("/{application_id}/schedule", response_model=MessageResponse)
async def schedule_interview(
    application_id: str,
    schedule: InterviewSchedule,
    service: ApplicationService = Depends(get_application_service),
):
    """Schedule an interview; applicant and interviewer are notified."""
    service.schedule_interview(application_id, schedule.interviewer_name, schedule.interview_time)
    return MessageResponse(message="Interview scheduled")


@router.put("/{application_id}/status", response_model=MessageResponse)
async def change_status(
    application_id: str,
    update: ApplicationStatusUpdate,
    service: ApplicationService = Depends(get_application_service),
):
    service.update_status(application_id, update.status)
    return MessageResponse(message="Status changed")


@router.put("/{application_id}", response_model=MessageResponse)
async def update_application(
    application_id: str,
    update: ApplicationUpdate,
    service: ApplicationService = Depends(get_application_service),
):
    """Update status and salary offered."""
    service.update_application(application_id, update.status, update.salary)
    return MessageResponse(message="Application updated")


@router.delete("/{application_id}", response_model=MessageResponse)
async def withdraw_application(
    application_id: str,
    service: ApplicationService = Depends(get_application_service),
):
    service.withdraw(application_id)
    return MessageResponse(message="Application withdrawn")
