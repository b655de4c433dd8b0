#!/usr/bin/env python3
"""
Schema Definitions for CLI Module

This module provides the response envelopes printed by the CLI in --json mode
and the helpers that turn capture results into plain dictionaries.

This module is part of the Presentation Layer and should only depend on
Core Layer components, not on Integration Layer.

Third-party package documentation:
- Pydantic: https://docs.pydantic.dev/

Sample input:
- format_cli_response(True, data={"file": "screenshots/device.png"})
- format_cli_response(False, error="Failed to take screenshot")

Expected output:
  ```python
  {"success": True, "data": {"file": "screenshots/device.png"}}
  # or
  {"success": False, "error": "Failed to take screenshot"}
  ```
"""

from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel

from device_tools.screenshot.core.types import CaptureStep, EncodedImage


# Response structure models
class ErrorResponse(BaseModel):
    """Error response model"""
    success: bool = False
    error: str
    details: Optional[Dict[str, Any]] = None


class SuccessResponse(BaseModel):
    """Success response model"""
    success: bool = True
    data: Dict[str, Any]


def format_cli_response(
    success: bool,
    data: Optional[Dict[str, Any]] = None,
    error: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None
) -> Dict[str, Any]:
    """
    Format a standardized CLI response.

    Args:
        success: Whether the operation was successful
        data: Response data (for successful operations)
        error: Error message (for failed operations)
        details: Extra diagnostic context for failed operations

    Returns:
        Dict[str, Any]: Formatted response
    """
    if success and data is not None:
        return SuccessResponse(data=data).model_dump()
    elif not success and error is not None:
        response = ErrorResponse(error=error, details=details).model_dump()
        if response.get('details') is None:
            del response['details']
        return response
    else:
        return {"success": success}


def capture_result(image: EncodedImage, path: str, size: Tuple[int, int], udid: str) -> Dict[str, Any]:
    """Describe a saved capture without its (large) image payload"""
    return {
        "file": path,
        "udid": udid,
        "source": image.source.value if image.source else None,
        "mimeType": image.mime_type,
        "width": size[0],
        "height": size[1],
        "bytes": len(image.data),
    }


def plan_to_dicts(plan: List[CaptureStep]) -> List[Dict[str, Any]]:
    return [step.model_dump(mode="json") for step in plan]
