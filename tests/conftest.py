"""
Shared fixtures.

MongoDB is replaced by mongomock; routes run through FastAPI's TestClient
with the database, notifier and caller identity overridden.
"""

from datetime import datetime

import mongomock
import pytest
from fastapi.testclient import TestClient

from jobboard.core.auth import get_current_applicant_id
from jobboard.db.mongodb import get_mongo_db
from jobboard.main import app
from jobboard.schemas.schemas import JobCreate
from jobboard.services.application_service import ApplicationService
from jobboard.services.job_service import JobService
from jobboard.services.notification_service import Notifier, get_notifier


class RecordingNotifier(Notifier):
    def __init__(self):
        self.sent = []

    def send(self, to, subject, body):
        self.sent.append((to, subject, body))
        return True


@pytest.fixture
def db():
    return mongomock.MongoClient()["job_board_test"]


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def job_service(db):
    return JobService(db)


@pytest.fixture
def application_service(db, notifier):
    return ApplicationService(db, notifier)


@pytest.fixture
def applicant_id(db):
    result = db.applicants.insert_one({"name": "Asha Rao", "email": "asha@example.com", "myJobs": []})
    return str(result.inserted_id)


@pytest.fixture
def make_job(job_service):
    def _make_job(**overrides):
        data = {
            "jobTitle": "Backend Engineer",
            "jd": "Build APIs",
            "aboutCompany": "Acme",
            "experience": 2,
            "jobType": "full-time",
            "jobLocation": "Remote",
            "salary": 60000,
            "skills": ["python", "mongodb"],
            "lastApply": datetime(2030, 1, 31),
            "categoryTitle": "Software Engineering",
        }
        data.update(overrides)
        return job_service.create_job(JobCreate(**data))
    return _make_job


@pytest.fixture
def make_application(db):
    """Insert an application document directly (bypassing apply)."""
    def _make_application(job_id, status="pending", is_scheduled=False, created_at=None, **extra):
        applicant = db.applicants.insert_one({"name": "Someone", "myJobs": []}).inserted_id
        job = db.jobs.find_one({"_id": job_id})
        doc = {
            "applicant": applicant,
            "job": job_id,
            "category": job["category"] if job else None,
            "status": status,
            "isScheduled": is_scheduled,
            "isDeleted": False,
            "createdAt": created_at or datetime.utcnow(),
        }
        doc.update(extra)
        return db.applications.insert_one(doc).inserted_id
    return _make_application


@pytest.fixture
def client(db, notifier, applicant_id):
    app.dependency_overrides[get_mongo_db] = lambda: db
    app.dependency_overrides[get_notifier] = lambda: notifier
    app.dependency_overrides[get_current_applicant_id] = lambda: applicant_id
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()

