#!/usr/bin/env python3
"""
Seed Script

Loads a few sample jobs, one applicant and some applications, then prints
the first page of the job listing with its counters.
Run: python scripts/seed_data.py
"""
import sys
sys.path.insert(0, '.')

from datetime import datetime, timedelta

from jobboard.core.config import get_settings
from jobboard.db.mongodb import get_mongo_db, init_mongo_indexes, COLLECTIONS
from jobboard.schemas.schemas import ApplicationStatus, JobCreate
from jobboard.services.application_service import ApplicationService
from jobboard.services.job_service import JobService

SAMPLE_JOBS = [
    {
        "jobTitle": "Backend Engineer",
        "jd": "Build REST APIs with Python and MongoDB.",
        "aboutCompany": "Acme Corp",
        "experience": 2,
        "jobType": "full-time",
        "jobLocation": "Bengaluru",
        "salary": 1200000,
        "skills": ["Python", "MongoDB", "FastAPI"],
        "perks": ["Health insurance"],
        "startingDate": "Immediately",
        "categoryTitle": "Software Engineering",
    },
    {
        "jobTitle": "Frontend Engineer",
        "jd": "React and TypeScript.",
        "aboutCompany": "Acme Corp",
        "experience": 1,
        "jobType": "full-time",
        "jobLocation": "Remote",
        "salary": 900000,
        "skills": ["React", "TypeScript"],
        "categoryTitle": "Software Engineering",
    },
    {
        "jobTitle": "Data Analyst Intern",
        "jd": "SQL, dashboards, curiosity.",
        "aboutCompany": "Globex",
        "experience": 0,
        "jobType": "internship",
        "jobLocation": "Pune",
        "salary": 30000,
        "skills": ["SQL", "Excel"],
        "categoryTitle": "Data Science",
    },
]


def main():
    db = get_mongo_db()
    init_mongo_indexes(db)
    jobs = JobService(db)
    applications = ApplicationService(db)

    print("\n[1] Posting jobs...")
    posted = []
    for data in SAMPLE_JOBS:
        data = dict(data, lastApply=datetime.utcnow() + timedelta(days=30))
        job = jobs.create_job(JobCreate(**data))
        posted.append(job)
        print(f"    ✅ {job['jobTitle']} -> category {job['category']['slug']}")

    print("\n[2] Creating applicant...")
    applicant_id = db[COLLECTIONS["applicants"]].insert_one(
        {"name": "John Doe", "email": "john.doe@example.com", "myJobs": []}
    ).inserted_id
    print(f"    ✅ Applicant: {applicant_id}")

    print("\n[3] Applying...")
    first = applications.apply(str(applicant_id), posted[0]["_id"], {"coverLetter": "Hello!"})
    second = applications.apply(str(applicant_id), posted[2]["_id"])
    applications.schedule_interview(first["_id"], "Jane Smith", datetime.utcnow() + timedelta(days=3))
    applications.update_status(second["_id"], ApplicationStatus.rejected)
    print("    ✅ 2 applications, 1 interview scheduled, 1 rejected")

    print("\n[4] Job listing (page 1)...")
    listing, count = jobs.list_jobs({}, page=1, per_page=get_settings().jobs_per_page)
    for job in listing:
        print(
            f"    {job['jobTitle']:<22} total={job['total_Applications']} "
            f"scheduled={job['total_Scheduled']} rejected={job['total_Rejected']} "
            f"selected={job['total_Selected']}"
        )
    print(f"    jobsCount={count}")


if __name__ == "__main__":
    main()
