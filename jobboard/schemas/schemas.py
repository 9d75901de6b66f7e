"""
Pydantic Schemas - Request/Response Validation

All API request and response schemas in one file for simplicity.
Attributes are snake_case; the wire format (and the stored documents)
use camelCase aliases.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from typing import Optional, List, Union
from datetime import datetime
from enum import Enum


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ============================================================
# ENUMS
# ============================================================

class ApplicationStatus(str, Enum):
    pending = "pending"
    scheduled = "Scheduled"
    rejected = "rejected"
    selected = "selected"
    withdrawn = "withdrawn"


# ============================================================
# CATEGORY / APPLICANT SCHEMAS
# ============================================================

class CategoryResponse(CamelModel):
    id: str = Field(..., alias="_id")
    title: str
    slug: str


class ApplicantResponse(CamelModel):
    model_config = ConfigDict(extra="allow")

    id: str = Field(..., alias="_id")
    name: Optional[str] = None
    email: Optional[str] = None
    my_jobs: List[str] = []


# ============================================================
# JOB SCHEMAS
# ============================================================

class JobFields(CamelModel):
    job_title: str = Field(..., min_length=1, max_length=200)
    jd: Optional[str] = None
    about_company: Optional[str] = None
    experience: Optional[float] = Field(None, ge=0)
    job_type: Optional[str] = None
    job_location: Optional[str] = None
    salary: Optional[float] = Field(None, ge=0)
    skills: List[str] = []
    perks: List[str] = []
    starting_date: Optional[str] = None
    last_apply: Optional[datetime] = None


class JobCreate(JobFields):
    category_title: str = Field(..., min_length=1, max_length=100)


class JobUpdate(CamelModel):
    job_title: Optional[str] = Field(None, min_length=1, max_length=200)
    jd: Optional[str] = None
    about_company: Optional[str] = None
    experience: Optional[float] = Field(None, ge=0)
    job_type: Optional[str] = None
    job_location: Optional[str] = None
    salary: Optional[float] = Field(None, ge=0)
    skills: Optional[List[str]] = None
    perks: Optional[List[str]] = None
    starting_date: Optional[str] = None
    last_apply: Optional[datetime] = None

    @field_validator("job_title", "skills", "perks")
    @classmethod
    def not_null(cls, value):
        # may be omitted, but a stored job always has these
        if value is None:
            raise ValueError("may not be null")
        return value


class JobResponse(JobFields):
    id: str = Field(..., alias="_id")
    category: Optional[Union[CategoryResponse, str]] = None
    created_at: Optional[datetime] = None


class JobSummaryResponse(JobResponse):
    total_applications: int = Field(0, alias="total_Applications")
    total_scheduled: int = Field(0, alias="total_Scheduled")
    total_rejected: int = Field(0, alias="total_Rejected")
    total_selected: int = Field(0, alias="total_Selected")


class JobListResponse(CamelModel):
    success: bool = True
    jobs: List[JobSummaryResponse]
    jobs_count: int
    result_per_page: int


class JobDetailResponse(CamelModel):
    success: bool = True
    job: JobResponse


class JobPostResponse(CamelModel):
    success: bool = True
    job: JobResponse
    message: str


# ============================================================
# APPLICATION SCHEMAS
# ============================================================

class ApplicationCreate(CamelModel):
    """Application form; category-specific extra fields are kept as sent."""
    model_config = ConfigDict(extra="allow")

    cover_letter: Optional[str] = None
    resume_link: Optional[str] = None


class InterviewSchedule(CamelModel):
    interviewer_name: str = Field(..., min_length=1)
    interview_time: datetime


class ApplicationStatusUpdate(CamelModel):
    status: ApplicationStatus


class ApplicationUpdate(CamelModel):
    status: ApplicationStatus
    salary: Optional[float] = Field(None, ge=0)


class ApplicationResponse(CamelModel):
    model_config = ConfigDict(extra="allow")

    id: str = Field(..., alias="_id")
    applicant: Union[ApplicantResponse, str]
    job: Optional[Union[JobResponse, str]] = None
    category: Optional[str] = None
    status: str = ApplicationStatus.pending.value
    is_scheduled: bool = False
    assigned_to: Optional[str] = None
    time: Optional[int] = None
    salary_offered: Optional[float] = None
    is_deleted: bool = False
    created_at: Optional[datetime] = None


class ApplicationListResponse(CamelModel):
    success: bool = True
    applications: List[ApplicationResponse]
    result_per_page: int
    application_count: int


class MyApplicationsResponse(CamelModel):
    success: bool = True
    applications: List[ApplicationResponse]


# ============================================================
# GENERIC SCHEMAS
# ============================================================

class MessageResponse(BaseModel):
    success: bool = True
    message: str
