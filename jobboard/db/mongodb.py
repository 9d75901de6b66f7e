"""
MongoDB Connection Utility

MongoDB stores:
- jobs: job postings
- categories: job categories, keyed by slug
- applicants: applicant records (created by the identity system)
- applications: one document per applicant/job pair
"""
from pymongo import ASCENDING, DESCENDING, MongoClient
from pymongo.database import Database
from pymongo.collection import Collection

from jobboard.core.config import get_settings
from jobboard.core.logging import get_logger

logger = get_logger(__name__)

# Global client (connection pooling handled internally by pymongo)
_client: MongoClient = None
_db: Database = None


def get_mongo_client() -> MongoClient:
    """Get or create MongoDB client (singleton pattern)"""
    global _client
    if _client is None:
        settings = get_settings()
        _client = MongoClient(
            settings.mongodb_uri,
            serverSelectionTimeoutMS=settings.mongodb_timeout_ms,
        )
    return _client


def get_mongo_db() -> Database:
    """Get the job board database. Also used as a FastAPI dependency."""
    global _db
    if _db is None:
        client = get_mongo_client()
        _db = client[get_settings().mongodb_db]
    return _db


def get_collection(name: str, db: Database = None) -> Collection:
    """Get a specific collection (see COLLECTIONS)."""
    db = db if db is not None else get_mongo_db()
    return db[name]


def test_mongo_connection() -> bool:
    """
    Test if MongoDB is reachable.
    Returns True if connection successful, False otherwise.
    """
    try:
        client = get_mongo_client()
        # ping command checks connection
        client.admin.command('ping')
        return True
    except Exception as e:
        logger.error("MongoDB connection failed: %s", e)
        return False


# Collection name constants (avoid typos)
COLLECTIONS = {
    "jobs": "jobs",
    "categories": "categories",
    "applicants": "applicants",
    "applications": "applications",
}


def init_mongo_indexes(db: Database = None):
    """
    Create indexes for better query performance.
    Call this once during app startup.
    """
    db = db if db is not None else get_mongo_db()

    # Slug is the natural key of a category
    db[COLLECTIONS["categories"]].create_index("slug", unique=True)

    # Newest-first listing
    db[COLLECTIONS["jobs"]].create_index([("createdAt", DESCENDING)])

    # $lookup and cascade delete go through applications.job
    db[COLLECTIONS["applications"]].create_index("job")
    db[COLLECTIONS["applications"]].create_index([
        ("applicant", ASCENDING),
        ("createdAt", DESCENDING)
    ])
    db[COLLECTIONS["applications"]].create_index([
        ("isDeleted", ASCENDING),
        ("createdAt", DESCENDING)
    ])

    logger.info("MongoDB indexes created successfully")
