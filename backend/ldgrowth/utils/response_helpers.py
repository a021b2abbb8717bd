# backend/ldgrowth/utils/response_helpers.py
"""
JSON envelopes returned by the routers.

Success bodies look like ``{"success": true, "message": ..., "data": ...}``.
Error envelopes are placed in ``HTTPException.detail`` by ``handle_exceptions``
so clients can branch on ``error_code`` (for example
``scheduling_in_progress``).
"""

from typing import Any, Dict, List, Optional, Union


class ResponseFormatter:
    @staticmethod
    def success(
        message: str, data: Optional[Union[Dict[str, Any], List]] = None, **kwargs
    ) -> Dict[str, Any]:
        response: Dict[str, Any] = {"success": True, "message": message}
        if data is not None:
            response["data"] = data
        response.update(kwargs)
        return response

    @staticmethod
    def error(
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        **kwargs,
    ) -> Dict[str, Any]:
        """Error envelope; ``details`` is omitted when empty."""
        response: Dict[str, Any] = {"success": False, "message": message}
        if error_code:
            response["error_code"] = error_code
        if details:
            response["details"] = details
        response.update(kwargs)
        return response
