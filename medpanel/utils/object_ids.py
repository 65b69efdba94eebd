from typing import Any, Dict, Iterable, List, Optional

from bson import ObjectId
from bson.errors import InvalidId


def to_object_id(value: Any) -> Optional[ObjectId]:
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(str(value))
    except (InvalidId, TypeError):
        return None


def to_object_ids(values: Iterable[Any]) -> List[ObjectId]:
    oids = (to_object_id(v) for v in values)
    return [oid for oid in oids if oid is not None]


def normalize_id(doc: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Stringify _id in place for the API layer."""
    if doc is not None and "_id" in doc and isinstance(doc["_id"], ObjectId):
        doc["_id"] = str(doc["_id"])
    return doc
