#!/usr/bin/env python3
"""
Data Types for Device Screenshot Module

This module defines the value objects exchanged between capture sources,
the orchestrator and the image transforms, together with the narrow
interfaces the core expects from its collaborators (agent transport,
device manager, live stream, device metrics).

This module is part of the Core Layer and should have no dependencies on
Presentation or Integration layers.

Third-party package documentation:
- Pydantic: https://docs.pydantic.dev/

Sample input:
- DeviceContext(udid="00008030-001A", device_class="physical", orientation="LANDSCAPE")
- EncodedImage.from_base64("iVBORw0KGgo...")

Expected output:
- Immutable models, e.g. DeviceContext(udid='00008030-001A',
  device_class=<DeviceClass.PHYSICAL: 'physical'>, orientation=<Orientation.LANDSCAPE: 'LANDSCAPE'>,
  preferred_source=None)
"""

import base64
import binascii
from enum import Enum
from typing import Any, Optional, Protocol

from pydantic import BaseModel, ConfigDict

from device_tools.screenshot.core.constants import CAPTURE_SETTINGS
from device_tools.screenshot.core.errors import ImageProcessingError


class CaptureSource(str, Enum):
    """Mechanisms able to produce a screenshot"""
    LIVE_STREAM = "live_stream"
    EXTERNAL_TOOL = "external_tool"
    AGENT_PROXY = "agent_proxy"
    SIMULATOR_API = "simulator_api"


class DeviceClass(str, Enum):
    SIMULATOR = "simulator"
    PHYSICAL = "physical"


class Orientation(str, Enum):
    """Screen orientation as reported by the agent"""
    PORTRAIT = "PORTRAIT"
    LANDSCAPE = "LANDSCAPE"

    @classmethod
    def parse(cls, value: Any) -> "Orientation":
        """
        Normalize an agent orientation value.

        The agent may report variants such as
        UIA_DEVICE_ORIENTATION_LANDSCAPERIGHT; anything mentioning
        LANDSCAPE is treated as landscape, everything else as portrait.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str) and "LANDSCAPE" in value.upper():
            return cls.LANDSCAPE
        return cls.PORTRAIT


class ExecutionContext(str, Enum):
    NATIVE_APP = "NATIVE_APP"
    WEBVIEW = "WEBVIEW"


class DeviceContext(BaseModel):
    """Per-call description of the device being captured"""
    model_config = ConfigDict(frozen=True)

    udid: str
    device_class: DeviceClass
    orientation: Optional[Orientation] = None
    preferred_source: Optional[CaptureSource] = None

    @property
    def is_simulator(self) -> bool:
        return self.device_class == DeviceClass.SIMULATOR


class EncodedImage(BaseModel):
    """An encoded image buffer, the unit exchanged between components"""
    model_config = ConfigDict(frozen=True)

    data: bytes
    encoding: str = CAPTURE_SETTINGS["IMAGE_ENCODING"]
    source: Optional[CaptureSource] = None

    @property
    def mime_type(self) -> str:
        return f"image/{self.encoding}"

    def to_base64(self) -> str:
        return base64.b64encode(self.data).decode("utf-8")

    @classmethod
    def from_base64(
        cls,
        payload: str,
        encoding: str = CAPTURE_SETTINGS["IMAGE_ENCODING"],
        source: Optional[CaptureSource] = None
    ) -> "EncodedImage":
        """
        Decode a base64 payload into an EncodedImage.

        Raises:
            ImageProcessingError: If the payload is not valid base64 or is empty
        """
        try:
            data = base64.b64decode("".join(payload.split()), validate=True)
        except (binascii.Error, ValueError) as e:
            raise ImageProcessingError(f"Payload is not valid base64: {str(e)}") from e
        if not data:
            raise ImageProcessingError("Payload decoded to an empty buffer")
        return cls(data=data, encoding=encoding, source=source)


class Rectangle(BaseModel):
    """Region in pixel units of the source image"""
    model_config = ConfigDict(frozen=True)

    left: int
    top: int
    width: int
    height: int

    def as_box(self):
        """Return the (left, upper, right, lower) box PIL expects"""
        return (self.left, self.top, self.left + self.width, self.top + self.height)


class WindowSize(BaseModel):
    model_config = ConfigDict(frozen=True)

    width: float
    height: float


class ViewportMetrics(BaseModel):
    """Device metrics needed to cut the status bar off a screenshot"""
    model_config = ConfigDict(frozen=True)

    status_bar_height: float  # unscaled points
    device_pixel_ratio: float
    window_width: float
    window_height: float


class CaptureStep(BaseModel):
    """One entry of the capture plan evaluated by the orchestrator"""
    model_config = ConfigDict(frozen=True)

    source: CaptureSource
    fatal: bool
    attempts: int = 1
    interval: float = 0.0


# Collaborator interfaces

class AgentTransport(Protocol):
    def proxy(self, path: str, method: str = "GET") -> Any:
        ...


class DeviceManager(Protocol):
    def simulator_screenshot(self, udid: str) -> str:
        ...

    def is_simulator(self, udid: str) -> bool:
        ...


class LiveStream(Protocol):
    def last_chunk_base64(self) -> Optional[str]:
        ...

    def is_active(self) -> bool:
        ...


class DeviceMetrics(Protocol):
    def status_bar_height(self) -> float:
        ...

    def device_pixel_ratio(self) -> float:
        ...

    def window_size(self) -> WindowSize:
        ...
