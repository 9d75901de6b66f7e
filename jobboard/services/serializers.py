"""
Document helpers shared by the services.

- ObjectId <-> str conversion for JSON serialization
- populate(): replace reference ids with the referenced documents
"""

from typing import Any, Iterable, List, Optional
from bson import ObjectId
from pymongo.collection import Collection

from jobboard.core.errors import InvalidRequestError


def to_object_id(value: Any, label: str = "id") -> ObjectId:
    """Parse a path/body id, raising InvalidRequestError when malformed."""
    if isinstance(value, ObjectId):
        return value
    if isinstance(value, str) and ObjectId.is_valid(value):
        return ObjectId(value)
    raise InvalidRequestError(f"Invalid {label}: {value!r}")


def serialize_value(value: Any) -> Any:
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, dict):
        return {key: serialize_value(item) for key, item in value.items()}
    if isinstance(value, list):
        return [serialize_value(item) for item in value]
    return value


def serialize_doc(doc: Optional[dict]) -> Optional[dict]:
    """Convert MongoDB document to JSON-serializable dict."""
    if doc is None:
        return None
    return serialize_value(doc)


def serialize_docs(docs: Iterable[dict]) -> List[dict]:
    """Convert list of MongoDB documents to JSON-serializable list."""
    return [serialize_doc(doc) for doc in docs]


def populate(docs: List[dict], field: str, collection: Collection) -> List[dict]:
    """
    Replace docs[i][field] (an ObjectId) with the referenced document.

    One $in query for the whole batch. References that no longer resolve
    are left as they are.
    """
    ids = {doc[field] for doc in docs if isinstance(doc.get(field), ObjectId)}
    if not ids:
        return docs

    found = {ref["_id"]: ref for ref in collection.find({"_id": {"$in": list(ids)}})}
    for doc in docs:
        ref = doc.get(field)
        if isinstance(ref, ObjectId) and ref in found:
            doc[field] = found[ref]
    return docs
