"""
Job Board - Main Application

FastAPI backend with:
- MongoDB for jobs, categories, applicants and applications
- Aggregation pipeline for per-job application counters
- {success, message} error envelope

Run: uvicorn jobboard.main:app --reload
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from jobboard.api.routes import api_router
from jobboard.core.config import get_settings
from jobboard.core.errors import register_exception_handlers
from jobboard.core.logging import get_logger, setup_logging
from jobboard.db.mongodb import init_mongo_indexes, test_mongo_connection

settings = get_settings()
setup_logging(settings.log_level)
logger = get_logger(__name__)

# Create FastAPI app
app = FastAPI(
    title="Job Board",
    description="""
    Job board backend.

    ## Features
    - **Jobs**: post, filter (`salary[gte]=50000`, `jobTitle=engineer`), update, delete
    - **Applications**: apply once per job, schedule interviews, change status
    - **Counters**: total / scheduled / rejected / selected applications per job
    """,
    version="1.0.0",
    debug=settings.debug,
    docs_url="/docs",
    redoc_url="/redoc"
)

# CORS middleware (allow all for development)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Include API routes
app.include_router(api_router, prefix="/api")


# Startup event
@app.on_event("startup")
async def startup_event():
    """Initialize MongoDB indexes on startup."""
    try:
        init_mongo_indexes()
        logger.info("MongoDB indexes initialized")
    except Exception as e:
        logger.warning("MongoDB index initialization failed: %s", e)


@app.get("/health", tags=["Health"])
async def health_check():
    """Detailed health check."""
    return {
        "status": "healthy",
        "mongodb": "connected" if test_mongo_connection() else "disconnected"
    }
