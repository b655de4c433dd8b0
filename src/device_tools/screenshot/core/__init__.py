"""
Core Layer for Device Screenshot Module

This package contains the core business logic for acquiring device
screenshots: the capture sources, the fallback policy that chooses between
them, and the image transforms applied to their output.

The core layer is designed to be:
1. Independent of UI or integration concerns
2. Fully testable in isolation (every collaborator is injected)
3. Focused on business logic only

Usage:
    from device_tools.screenshot.core import build_acquisition, load_capture_config, DeviceClass
    config = load_capture_config()
    acquisition = build_acquisition(config)
    image = acquisition.capture(config.device_context("00008030-001A", DeviceClass.PHYSICAL))
"""

from typing import Optional

# Types and errors
from device_tools.screenshot.core.types import (
    AgentTransport,
    LiveStream,
    CaptureSource,
    CaptureStep,
    DeviceClass,
    DeviceContext,
    EncodedImage,
    ExecutionContext,
    Orientation,
    Rectangle,
    ViewportMetrics,
    WindowSize,
)
from device_tools.screenshot.core.errors import (
    AgentProxyError,
    CaptureToolError,
    ConfigurationError,
    ImageProcessingError,
    InvalidRegionError,
    ScreenshotError,
    ToolNotFoundError,
    UnexpectedResponseError,
)

# Configuration
from device_tools.screenshot.core.config import (
    CaptureConfig,
    load_capture_config,
    parse_capture_source,
)

# Image transforms
from device_tools.screenshot.core.image_processing import crop, image_size, rotate90

# Capture sources
from device_tools.screenshot.core.agent_proxy import (
    AgentHttpTransport,
    AgentMetrics,
    AgentProxyCapture,
)
from device_tools.screenshot.core.external_tool import ExternalCaptureTool
from device_tools.screenshot.core.simulator import SimctlDeviceManager, SimulatorCapture
from device_tools.screenshot.core.stream import StreamCapture

# Orchestration
from device_tools.screenshot.core.acquisition import ScreenshotAcquisition
from device_tools.screenshot.core.viewport import ViewportCropper, compute_viewport_rect


def build_acquisition(
    config: CaptureConfig,
    transport: Optional[AgentTransport] = None,
    stream: Optional[LiveStream] = None,
) -> ScreenshotAcquisition:
    """
    Wire the default collaborators into a ScreenshotAcquisition.

    Args:
        config: Acquisition settings
        transport: Agent transport (an AgentHttpTransport on config.agent_url by default)
        stream: Optional live stream collaborator

    Returns:
        ScreenshotAcquisition
    """
    if transport is None:
        transport = AgentHttpTransport(config.agent_url, timeout=config.agent_timeout)
    return ScreenshotAcquisition(
        agent=AgentProxyCapture(transport),
        external_tool=ExternalCaptureTool(config.external_tool),
        simulator=SimulatorCapture(SimctlDeviceManager()),
        stream=StreamCapture(stream),
        config=config,
    )


__all__ = [
    # Types
    'CaptureSource',
    'CaptureStep',
    'DeviceClass',
    'DeviceContext',
    'EncodedImage',
    'ExecutionContext',
    'Orientation',
    'Rectangle',
    'ViewportMetrics',
    'WindowSize',

    # Errors
    'AgentProxyError',
    'CaptureToolError',
    'ConfigurationError',
    'ImageProcessingError',
    'InvalidRegionError',
    'ScreenshotError',
    'ToolNotFoundError',
    'UnexpectedResponseError',

    # Configuration
    'CaptureConfig',
    'load_capture_config',
    'parse_capture_source',

    # Image transforms
    'crop',
    'image_size',
    'rotate90',

    # Capture sources
    'AgentHttpTransport',
    'AgentMetrics',
    'AgentProxyCapture',
    'ExternalCaptureTool',
    'SimctlDeviceManager',
    'SimulatorCapture',
    'StreamCapture',

    # Orchestration
    'ScreenshotAcquisition',
    'ViewportCropper',
    'compute_viewport_rect',
    'build_acquisition',
]
