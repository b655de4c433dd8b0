"""
Exceptions for the screenshot acquisition core.

Every error raised by a capture source or image transform derives from
ScreenshotError so callers can catch the whole family at once.
"""

from typing import Any, Optional, Tuple


class ScreenshotError(Exception):
    """Base exception for screenshot acquisition errors."""

    pass


class ToolNotFoundError(ScreenshotError):
    """Raised when the native capture utility cannot be located."""

    def __init__(self, tool: str, remediation: str):
        self.tool = tool
        self.remediation = remediation
        super().__init__(
            f"No '{tool}' program found. To use, install using '{remediation}'"
        )


class CaptureToolError(ScreenshotError):
    """Raised when the native capture utility fails for a device."""

    def __init__(self, udid: str, original: str, tool: str = "idevicescreenshot"):
        self.udid = udid
        self.original = original
        self.tool = tool
        super().__init__(
            f"Cannot take a screenshot from the device '{udid}' using {tool}. "
            f"Original error: {original}"
        )


class UnexpectedResponseError(ScreenshotError):
    """Raised when the agent returns something other than an encoded image."""

    def __init__(self, message: str, payload: Any = None):
        self.payload = payload
        super().__init__(message)


class InvalidRegionError(ScreenshotError):
    """Raised when a crop rectangle lies outside the image bounds."""

    def __init__(self, rect: Any, image_size: Optional[Tuple[int, int]] = None):
        self.rect = rect
        self.image_size = image_size
        super().__init__(
            f"Region {rect} does not fit inside image of size {image_size}"
        )


class ImageProcessingError(ScreenshotError):
    """Raised when an image buffer cannot be decoded or re-encoded."""

    pass


class AgentProxyError(ScreenshotError):
    """Raised when the request to the on-device agent itself fails."""

    def __init__(self, path: str, message: str):
        self.path = path
        super().__init__(f"Agent request to '{path}' failed: {message}")


class ConfigurationError(ScreenshotError, ValueError):
    """Raised when a configuration value is not recognized."""

    pass
