"""Response envelope helpers

Every endpoint answers with ``{"success": bool, "message"?: str, "data"?: ...}``.
"""

from typing import Any, Dict, Optional


def api_response(message: Optional[str] = None, data: Any = None) -> Dict[str, Any]:
    """Success envelope"""
    body: Dict[str, Any] = {"success": True}
    if message is not None:
        body["message"] = message
    if data is not None:
        body["data"] = data
    return body


def error_response(message: str, details: Any = None) -> Dict[str, Any]:
    """Failure envelope"""
    body: Dict[str, Any] = {"success": False, "message": message}
    if details:
        body["details"] = details
    return body
