from datetime import datetime

import pytest
from bson import ObjectId
from pymongo.errors import PyMongoError

from jobboard.core.errors import InvalidRequestError, NotFoundError
from jobboard.schemas.schemas import JobCreate, JobUpdate
from jobboard.services.job_service import build_job_listing_pipeline, category_slug


def test_category_slug():
    assert category_slug("Software Engineering") == "software_engineering"
    assert category_slug("  Data Science ") == "data_science"


def test_create_job_upserts_category(job_service, db):
    job = job_service.create_job(JobCreate(
        jobTitle="Backend Engineer",
        salary=50000,
        lastApply="2030-01-31T00:00:00",
        categoryTitle="Software Engineering",
    ))

    assert job["jobTitle"] == "Backend Engineer"
    assert job["category"]["slug"] == "software_engineering"
    stored = db.jobs.find_one({"_id": ObjectId(job["_id"])})
    assert stored["category"] == ObjectId(job["category"]["_id"])
    assert stored["lastApply"] == datetime(2030, 1, 31)
    assert isinstance(stored["createdAt"], datetime)


def test_same_category_title_shares_one_category(make_job, db):
    first = make_job(categoryTitle="Software Engineering")
    second = make_job(jobTitle="Frontend Engineer", categoryTitle="software engineering")

    assert db.categories.count_documents({}) == 1
    category = db.categories.find_one({})
    assert category["title"] == "software engineering"
    assert first["category"]["_id"] == second["category"]["_id"] == str(category["_id"])
    assert db.jobs.count_documents({"category": category["_id"]}) == 2


def test_failed_job_insert_removes_new_category(job_service, db, monkeypatch):
    def broken_insert(doc):
        raise PyMongoError("disk full")

    monkeypatch.setattr(job_service.jobs, "insert_one", broken_insert)

    with pytest.raises(PyMongoError):
        job_service.create_job(JobCreate(jobTitle="Ops", categoryTitle="Operations"))

    assert db.categories.count_documents({}) == 0


def test_failed_job_insert_keeps_existing_category(job_service, make_job, db, monkeypatch):
    make_job(categoryTitle="Operations")

    def broken_insert(doc):
        raise PyMongoError("disk full")

    monkeypatch.setattr(job_service.jobs, "insert_one", broken_insert)

    with pytest.raises(PyMongoError):
        job_service.create_job(JobCreate(jobTitle="Ops", categoryTitle="Operations"))

    assert db.categories.count_documents({"slug": "operations"}) == 1


def test_category_title_without_letters_is_rejected(job_service):
    with pytest.raises(InvalidRequestError):
        job_service.create_job(JobCreate(jobTitle="Ops", categoryTitle="!!!"))


def test_get_job(job_service, make_job):
    job = make_job()

    fetched = job_service.get_job(job["_id"])

    assert fetched["jobTitle"] == "Backend Engineer"
    assert fetched["category"]["title"] == "Software Engineering"


def test_get_job_missing_or_malformed(job_service):
    with pytest.raises(NotFoundError):
        job_service.get_job(str(ObjectId()))
    with pytest.raises(InvalidRequestError):
        job_service.get_job("nope")


def test_update_job_sets_only_given_fields(job_service, make_job, db):
    job = make_job()

    job_service.update_job(job["_id"], JobUpdate(salary=75000, jobLocation="Pune"))

    stored = db.jobs.find_one({"_id": ObjectId(job["_id"])})
    assert stored["salary"] == 75000
    assert stored["jobLocation"] == "Pune"
    assert stored["jobTitle"] == "Backend Engineer"
    assert stored["skills"] == ["python", "mongodb"]


def test_update_job_errors(job_service, make_job):
    job = make_job()

    with pytest.raises(InvalidRequestError):
        job_service.update_job(job["_id"], JobUpdate())
    with pytest.raises(NotFoundError):
        job_service.update_job(str(ObjectId()), JobUpdate(salary=1))


def test_delete_job_cascades_to_its_applications(job_service, make_job, make_application, db):
    job = make_job()
    other = make_job(jobTitle="Other")
    for _ in range(3):
        make_application(ObjectId(job["_id"]))
    make_application(ObjectId(other["_id"]))

    removed = job_service.delete_job(job["_id"])

    assert removed == 3
    assert db.jobs.count_documents({"_id": ObjectId(job["_id"])}) == 0
    assert db.applications.count_documents({"job": ObjectId(job["_id"])}) == 0
    assert db.applications.count_documents({"job": ObjectId(other["_id"])}) == 1


def test_delete_missing_job(job_service):
    with pytest.raises(NotFoundError):
        job_service.delete_job(str(ObjectId()))


def test_listing_pipeline_shape():
    pipeline = build_job_listing_pipeline({"salary": {"$gte": 1}}, skip=4, limit=4)

    assert [next(iter(stage)) for stage in pipeline] == [
        "$match", "$lookup", "$addFields", "$sort", "$skip", "$limit", "$project",
    ]
    assert pipeline[0] == {"$match": {"salary": {"$gte": 1}}}
    assert set(pipeline[2]["$addFields"]) == {
        "total_Applications", "total_Scheduled", "total_Rejected", "total_Selected",
    }
    assert pipeline[4] == {"$skip": 4}
    assert pipeline[5] == {"$limit": 4}


def test_list_jobs_counts_applications_per_status(job_service, make_job, make_application):
    job = make_job()
    job_id = ObjectId(job["_id"])
    make_application(job_id, status="Scheduled", is_scheduled=True)
    make_application(job_id, status="rejected")
    make_application(job_id, status="selected")
    make_application(job_id, status="selected")
    make_application(job_id)

    jobs, count = job_service.list_jobs({}, page=1, per_page=4)

    assert count == 1
    [summary] = jobs
    assert summary["total_Applications"] == 5
    assert summary["total_Scheduled"] == 1
    assert summary["total_Rejected"] == 1
    assert summary["total_Selected"] == 2
    assert "applications" not in summary
    assert summary["category"]["slug"] == "software_engineering"


def test_list_jobs_filters_sorts_and_paginates(job_service, make_job, db):
    for n in range(7):
        job = make_job(jobTitle=f"Job {n}", salary=10000 * n)
        db.jobs.update_one({"_id": ObjectId(job["_id"])}, {"$set": {"createdAt": datetime(2024, 1, n + 1)}})

    params = {"page": "2", "salary": {"gte": "20000"}}
    page_one, count = job_service.list_jobs(params, page=1, per_page=4)
    page_two, _ = job_service.list_jobs(params, page=2, per_page=4)

    assert count == 5
    assert [job["jobTitle"] for job in page_one] == ["Job 6", "Job 5", "Job 4", "Job 3"]
    assert [job["jobTitle"] for job in page_two] == ["Job 2"]
    assert page_one[0]["total_Applications"] == 0


def test_list_jobs_filters_by_last_apply_date(job_service, make_job):
    make_job(jobTitle="Closing soon", lastApply=datetime(2030, 1, 10))
    make_job(jobTitle="Open longer", lastApply=datetime(2030, 3, 1))

    jobs, count = job_service.list_jobs({"lastApply": {"gte": "2030-02-01"}}, page=1, per_page=4)

    assert count == 1
    assert [job["jobTitle"] for job in jobs] == ["Open longer"]
