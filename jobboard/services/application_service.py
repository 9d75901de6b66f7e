"""
Application Service - applying to jobs and moving applications along.

Collections touched:
1. applications - one document per (applicant, job)
2. applicants   - `myJobs` records which jobs an applicant applied to
3. jobs         - read for existence and category
"""

from datetime import datetime, timezone
from typing import List, Optional, Tuple

from pymongo.database import Database
from pymongo.errors import PyMongoError

from jobboard.core.errors import ConflictError, InvalidRequestError, NotFoundError
from jobboard.core.logging import get_logger
from jobboard.db.mongodb import get_collection, COLLECTIONS
from jobboard.schemas.schemas import ApplicationStatus
from jobboard.services.filters import build_filter
from jobboard.services.notification_service import Notifier, get_notifier, notify_interview_scheduled
from jobboard.services.pagination import paginate
from jobboard.services.serializers import populate, serialize_doc, serialize_docs, to_object_id

logger = get_logger(__name__)

# Set by the service; submitted form data never overrides these
RESERVED_FIELDS = frozenset({
    "_id", "applicant", "job", "category", "status", "isScheduled",
    "assignedTo", "time", "salaryOffered", "isDeleted", "createdAt",
})

APPLICATION_ID_FIELDS = ("job", "applicant", "category")

APPLICATION_DATE_FIELDS = ("createdAt",)


def to_epoch_millis(moment: datetime) -> int:
    """Instant as milliseconds since the epoch; naive datetimes are UTC."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return int(moment.timestamp() * 1000)


class ApplicationService:
    """
    Application lifecycle: apply, schedule, status changes, listings.
    """

    def __init__(self, db: Database = None, notifier: Optional[Notifier] = None):
        self.applications = get_collection(COLLECTIONS["applications"], db)
        self.applicants = get_collection(COLLECTIONS["applicants"], db)
        self.jobs = get_collection(COLLECTIONS["jobs"], db)
        self.notifier = notifier or get_notifier()

    def _get_application(self, application_id: str) -> dict:
        application = self.applications.find_one({"_id": to_object_id(application_id, "application id")})
        if not application:
            raise NotFoundError("Application not found")
        return application

    def apply(self, applicant_id: str, job_id: str, fields: Optional[dict] = None) -> dict:
        """
        Register an application of `applicant_id` to `job_id`.

        The job is pushed to the applicant's myJobs only if it is not there
        yet, so two concurrent applies cannot both succeed. If storing the
        application then fails, the push is undone.
        """
        job_oid = to_object_id(job_id, "job id")
        applicant_oid = to_object_id(applicant_id, "applicant id")
        fields = fields or {}
        for key in fields:
            if not key or key.startswith("$") or "." in key:
                raise InvalidRequestError(f"Invalid application field '{key}'")

        job = self.jobs.find_one({"_id": job_oid}, {"category": 1})
        if not job:
            raise NotFoundError("Job not found")

        applicant = self.applicants.find_one({"_id": applicant_oid}, {"myJobs": 1})
        if not applicant:
            raise NotFoundError("Applicant not found")
        if job_oid in applicant.get("myJobs", []):
            raise ConflictError("Already applied for this job")

        pushed = self.applicants.update_one(
            {"_id": applicant_oid, "myJobs": {"$ne": job_oid}},
            {"$push": {"myJobs": job_oid}},
        )
        if pushed.matched_count == 0:
            raise ConflictError("Already applied for this job")

        doc = {key: value for key, value in fields.items() if key not in RESERVED_FIELDS}
        doc.update({
            "applicant": applicant_oid,
            "job": job_oid,
            "category": job.get("category"),
            "status": ApplicationStatus.pending.value,
            "isScheduled": False,
            "isDeleted": False,
            "createdAt": datetime.utcnow(),
        })

        try:
            result = self.applications.insert_one(doc)
        except PyMongoError:
            self.applicants.update_one({"_id": applicant_oid}, {"$pull": {"myJobs": job_oid}})
            logger.warning("Undid myJobs entry of %s after failed application insert", applicant_id)
            raise

        doc["_id"] = result.inserted_id
        logger.info("Applicant %s applied to job %s (application %s)", applicant_id, job_id, result.inserted_id)
        return serialize_doc(doc)

    def schedule_interview(self, application_id: str, interviewer_name: str, interview_time: datetime) -> dict:
        """Assign an interviewer and a time, then notify both parties."""
        application = self._get_application(application_id)
        update = {
            "isScheduled": True,
            "assignedTo": interviewer_name,
            "time": to_epoch_millis(interview_time),
            "status": ApplicationStatus.scheduled.value,
        }
        self.applications.update_one({"_id": application["_id"]}, {"$set": update})
        application.update(update)
        logger.info("Interview for application %s scheduled with %s", application_id, interviewer_name)

        applicant = self.applicants.find_one({"_id": application["applicant"]}) or {"_id": application["applicant"]}
        job = self.jobs.find_one({"_id": application.get("job")}, {"jobTitle": 1}) or {}
        notify_interview_scheduled(
            self.notifier,
            applicant,
            interviewer_name,
            interview_time.isoformat(),
            job_title=job.get("jobTitle"),
        )
        return serialize_doc(application)

    def update_status(self, application_id: str, status: ApplicationStatus) -> None:
        application = self._get_application(application_id)
        self.applications.update_one(
            {"_id": application["_id"]},
            {"$set": {"status": ApplicationStatus(status).value}},
        )
        logger.info("Application %s status -> %s", application_id, ApplicationStatus(status).value)

    def update_application(self, application_id: str, status: ApplicationStatus, salary: Optional[float]) -> None:
        """Set the status and the salary offered."""
        oid = to_object_id(application_id, "application id")
        result = self.applications.update_one(
            {"_id": oid},
            {"$set": {"status": ApplicationStatus(status).value, "salaryOffered": salary}},
        )
        if result.matched_count == 0:
            raise NotFoundError("Application not found")
        logger.info("Application %s updated (status=%s, salary=%s)", application_id, ApplicationStatus(status).value, salary)

    def withdraw(self, application_id: str) -> None:
        """Soft-delete: hidden from the admin listing, kept for the record."""
        oid = to_object_id(application_id, "application id")
        result = self.applications.update_one({"_id": oid}, {"$set": {"isDeleted": True}})
        if result.matched_count == 0:
            raise NotFoundError("Application not found")
        logger.info("Application %s withdrawn", application_id)

    def list_applications(self, params: dict, page: int, per_page: int) -> Tuple[List[dict], int]:
        """
        Admin listing: non-deleted applications matching the filter,
        newest first, with job and applicant populated.

        Returns (applications, number of applications matching the filter).
        """
        filters = build_filter(
            params, search_fields=(), id_fields=APPLICATION_ID_FIELDS, date_fields=APPLICATION_DATE_FIELDS
        )
        filters["isDeleted"] = False
        skip, limit = paginate(page, per_page)

        cursor = self.applications.find(filters).sort("createdAt", -1).skip(skip).limit(limit)
        applications = list(cursor)
        populate(applications, "job", self.jobs)
        populate(applications, "applicant", self.applicants)
        return serialize_docs(applications), self.applications.count_documents(filters)

    def list_my_applications(self, applicant_id: str) -> List[dict]:
        cursor = self.applications.find(
            {"applicant": to_object_id(applicant_id, "applicant id")}
        ).sort("createdAt", -1)
        return serialize_docs(cursor)
