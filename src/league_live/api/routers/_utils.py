"""
Shared utilities for API routers.
"""

from typing import Any, Optional


def envelope(data: Any = None, message: Optional[str] = None) -> dict[str, Any]:
    """Success envelope: {"success": true, "data"?, "message"?}."""
    content: dict[str, Any] = {"success": True}
    if data is not None:
        content["data"] = data
    if message:
        content["message"] = message
    return content
