"""Response envelopes shared by every endpoint."""
from typing import Any, Dict, Optional, Sized


def ok(data: Any, count: Optional[int] = None) -> Dict[str, Any]:
    """Success envelope: {"success": true, "count"?: n, "data": ...}."""
    body: Dict[str, Any] = {"success": True}
    if count is not None:
        body["count"] = count
    body["data"] = data
    return body


def listing(items: Sized) -> Dict[str, Any]:
    return ok(items, count=len(items))


def failure(message: str, code: str, details: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Error envelope: {"success": false, "message": ..., "error": {...}}."""
    return {
        "success": False,
        "message": message,
        "error": {
            "code": code,
            "details": details or {}
        }
    }
