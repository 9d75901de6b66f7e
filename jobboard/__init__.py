"""
Job Board
A job-board backend over MongoDB.

- Jobs, grouped into categories (upserted by slug)
- Applications: one per applicant and job, interview scheduling, status
- Listing pipeline with per-job application counters
"""

__version__ = "1.0.0"
