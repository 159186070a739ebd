import math
from datetime import datetime
from typing import Any, Optional

from bson import ObjectId
from fastapi.responses import JSONResponse


def serialize_mongo_doc(doc):
    """
    Recursively convert ObjectIds and datetimes in a MongoDB document.

    The top-level ``_id`` is exposed as ``id`` and password hashes are
    never serialized.
    """
    if not doc:
        return doc

    if isinstance(doc, list):
        return [serialize_mongo_doc(d) for d in doc]

    if isinstance(doc, dict):
        clean = {}
        for k, v in doc.items():
            if k == "password_hash":
                continue
            key = "id" if k == "_id" else k
            if isinstance(v, ObjectId):
                clean[key] = str(v)
            elif isinstance(v, datetime):
                clean[key] = v.isoformat()
            elif isinstance(v, (dict, list)):
                clean[key] = serialize_mongo_doc(v)
            else:
                clean[key] = v
        return clean

    if isinstance(doc, ObjectId):
        return str(doc)

    return doc


def parse_object_id(id_str: str) -> ObjectId:
    """Safely convert a string to ObjectId."""
    if isinstance(id_str, ObjectId):
        return id_str
    if not ObjectId.is_valid(id_str):
        raise ValueError(f"Invalid ObjectId: {id_str}")
    return ObjectId(id_str)


def pagination_meta(page: int, limit: int, total: int) -> dict:
    return {
        "page": page,
        "limit": limit,
        "total": total,
        "pages": math.ceil(total / limit) if limit else 0,
    }


def success_response(
    data: Optional[dict] = None,
    message: Optional[str] = None,
    code: int = 200,
) -> JSONResponse:
    """
    Standard success JSON response.

    ``data`` keys are merged into the top-level body, e.g.
    ``{"success": true, "role": {...}}``.
    """
    content: dict[str, Any] = {"success": True}
    if message is not None:
        content["message"] = message
    if data:
        content.update(data)
    return JSONResponse(status_code=code, content=content)


def error_response(
    message: str,
    code: int = 400,
    errors: Optional[Any] = None,
    headers: Optional[dict] = None,
) -> JSONResponse:
    """Standard error JSON response: ``{"success": false, "message": ...}``."""
    content: dict[str, Any] = {"success": False, "message": message}
    if errors is not None:
        content["errors"] = errors
    return JSONResponse(status_code=code, content=content, headers=headers)
