"""
Database helpers

Thin wrappers around a pymongo database. Collection names are the lowercase
schema names from schemas.py ("user", "profile", "drive").
"""

from datetime import datetime, timezone
from functools import lru_cache
from typing import Any, Dict, List, Optional

from bson import ObjectId
from pymongo import MongoClient
from pymongo.database import Database

from config import get_settings


@lru_cache
def get_client() -> MongoClient:
    settings = get_settings()
    return MongoClient(settings.database_url, tz_aware=False)


def get_db() -> Database:
    """FastAPI dependency returning the application database."""
    return get_client()[get_settings().database_name]


def to_object_id(value: Any) -> Optional[ObjectId]:
    """Return an ObjectId for `value`, or None when it is not a well-formed id."""
    if isinstance(value, ObjectId):
        return value
    if isinstance(value, str) and ObjectId.is_valid(value):
        return ObjectId(value)
    return None


def create_document(db: Database, collection_name: str, data: Dict[str, Any]) -> str:
    now = datetime.now(timezone.utc)
    doc = dict(data)
    doc.setdefault("created_at", now)
    doc["updated_at"] = now
    result = db[collection_name].insert_one(doc)
    return str(result.inserted_id)


def get_documents(db: Database, collection_name: str, filter_dict: Optional[Dict[str, Any]] = None,
                  sort: Optional[List[tuple]] = None) -> List[Dict[str, Any]]:
    cursor = db[collection_name].find(filter_dict or {})
    if sort:
        cursor = cursor.sort(sort)
    return list(cursor)


def serialize(value: Any) -> Any:
    """Make a stored document JSON friendly: ObjectId -> str, datetime -> ISO, `_id` -> `id`."""
    if isinstance(value, dict):
        out = {}
        for k, v in value.items():
            out["id" if k == "_id" else k] = serialize(v)
        return out
    if isinstance(value, list):
        return [serialize(i) for i in value]
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    return value
