"""
Job Service - job postings, their categories and the listing pipeline.

Collections touched:
1. jobs          - job postings (hard-deleted)
2. categories    - upserted by slug whenever a job is posted
3. applications  - joined for the listing counters, cascade-deleted with their job
"""

from datetime import datetime
from typing import List, Tuple

from pymongo.database import Database
from pymongo.errors import PyMongoError
from slugify import slugify

from jobboard.core.errors import InvalidRequestError, NotFoundError
from jobboard.core.logging import get_logger
from jobboard.db.mongodb import get_collection, COLLECTIONS
from jobboard.schemas.schemas import JobCreate, JobUpdate
from jobboard.services.filters import build_filter
from jobboard.services.pagination import paginate
from jobboard.services.serializers import populate, serialize_doc, serialize_docs, to_object_id

logger = get_logger(__name__)

# Fields an update may overwrite
MUTABLE_JOB_FIELDS = (
    "jobTitle", "jd", "aboutCompany", "experience", "jobType", "jobLocation",
    "salary", "skills", "startingDate", "lastApply", "perks",
)

# Filter keys that reference other documents
JOB_ID_FIELDS = ("category",)

JOB_DATE_FIELDS = ("lastApply", "createdAt")


def category_slug(title: str) -> str:
    """URL-safe natural key of a category title."""
    return slugify(title, separator="_")


def _count_where(condition: dict) -> dict:
    return {
        "$size": {
            "$filter": {
                "input": "$applications",
                "as": "application",
                "cond": condition,
            }
        }
    }


def build_job_listing_pipeline(filters: dict, skip: int, limit: int) -> List[dict]:
    """
    Aggregation for the job listing.

    Each job is joined with its applications and gets four counters:
    total_Applications, total_Scheduled, total_Rejected, total_Selected.
    The joined array is dropped before the result leaves the database.
    """
    return [
        {"$match": filters},
        {
            "$lookup": {
                "from": COLLECTIONS["applications"],
                "localField": "_id",
                "foreignField": "job",
                "as": "applications",
            }
        },
        {
            "$addFields": {
                "total_Applications": {"$size": "$applications"},
                "total_Scheduled": _count_where({"$eq": ["$$application.isScheduled", True]}),
                "total_Rejected": _count_where({"$eq": ["$$application.status", "rejected"]}),
                "total_Selected": _count_where({"$eq": ["$$application.status", "selected"]}),
            }
        },
        {"$sort": {"createdAt": -1}},
        {"$skip": skip},
        {"$limit": limit},
        {"$project": {"applications": 0}},
    ]


class JobService:
    """
    Job lifecycle: post, read, list, update, delete.
    """

    def __init__(self, db: Database = None):
        self.jobs = get_collection(COLLECTIONS["jobs"], db)
        self.categories = get_collection(COLLECTIONS["categories"], db)
        self.applications = get_collection(COLLECTIONS["applications"], db)

    # ------------------------------------------------------------
    # Categories
    # ------------------------------------------------------------

    def upsert_category(self, title: str) -> Tuple[dict, bool]:
        """
        Create the category for `title`, or re-title the existing one.

        Returns (category document, created).
        """
        slug = category_slug(title)
        if not slug:
            raise InvalidRequestError("Category title must contain letters or digits")

        result = self.categories.update_one(
            {"slug": slug},
            {
                "$set": {"title": title},
                "$setOnInsert": {"createdAt": datetime.utcnow()},
            },
            upsert=True,
        )
        category = self.categories.find_one({"slug": slug})
        return category, result.upserted_id is not None

    # ------------------------------------------------------------
    # Jobs
    # ------------------------------------------------------------

    def create_job(self, data: JobCreate) -> dict:
        """
        Post a job under the category named by data.category_title.

        If the insert fails, a category created by this call is removed again.
        """
        category, created = self.upsert_category(data.category_title)

        doc = data.model_dump(by_alias=True, exclude={"category_title"})
        doc["category"] = category["_id"]
        doc["createdAt"] = datetime.utcnow()

        try:
            result = self.jobs.insert_one(doc)
        except PyMongoError:
            if created:
                self.categories.delete_one({"_id": category["_id"]})
                logger.warning("Rolled back category '%s' after failed job insert", category["slug"])
            raise

        doc["_id"] = result.inserted_id
        doc["category"] = category
        logger.info("Job %s posted under category '%s'", result.inserted_id, category["slug"])
        return serialize_doc(doc)

    def get_job(self, job_id: str) -> dict:
        """Fetch a job by id with its category populated."""
        job = self.jobs.find_one({"_id": to_object_id(job_id, "job id")})
        if not job:
            raise NotFoundError("Job not found")
        populate([job], "category", self.categories)
        return serialize_doc(job)

    def list_jobs(self, params: dict, page: int, per_page: int) -> Tuple[List[dict], int]:
        """
        Filtered, newest-first page of jobs with application counters.

        Returns (jobs, number of jobs matching the filter).
        """
        filters = build_filter(
            params, search_fields=("jobTitle",), id_fields=JOB_ID_FIELDS, date_fields=JOB_DATE_FIELDS
        )
        skip, limit = paginate(page, per_page)

        jobs = list(self.jobs.aggregate(build_job_listing_pipeline(filters, skip, limit)))
        populate(jobs, "category", self.categories)
        jobs_count = self.jobs.count_documents(filters)
        return serialize_docs(jobs), jobs_count

    def update_job(self, job_id: str, data: JobUpdate) -> dict:
        """Overwrite the provided mutable fields of a job."""
        oid = to_object_id(job_id, "job id")
        changes = data.model_dump(by_alias=True, exclude_unset=True)
        updates = {key: value for key, value in changes.items() if key in MUTABLE_JOB_FIELDS}
        if not updates:
            raise InvalidRequestError("No fields to update")

        result = self.jobs.update_one({"_id": oid}, {"$set": updates})
        if result.matched_count == 0:
            raise NotFoundError("Job not found")

        logger.info("Job %s updated: %s", job_id, ", ".join(sorted(updates)))
        return serialize_doc(self.jobs.find_one({"_id": oid}))

    def delete_job(self, job_id: str) -> int:
        """
        Delete a job and every application to it.

        Returns the number of applications removed.
        """
        oid = to_object_id(job_id, "job id")
        result = self.jobs.delete_one({"_id": oid})
        if result.deleted_count == 0:
            raise NotFoundError("Job not found")

        removed = self.applications.delete_many({"job": oid}).deleted_count
        logger.info("Job %s deleted with %d application(s)", job_id, removed)
        return removed

