"""
Device Screenshot Tool

Multi-source screenshot acquisition for mobile devices, with a two-layer
architecture:

1. Core Layer: capture sources, fallback policy and image transforms
2. Presentation Layer: CLI interface with rich formatting

Usage:
    # Direct API usage (Core Layer)
    from device_tools.screenshot.core import build_acquisition, load_capture_config, DeviceClass
    config = load_capture_config()
    image = build_acquisition(config).capture(
        config.device_context("00008030-001A", DeviceClass.PHYSICAL))

    # CLI usage (Presentation Layer)
    # device-screenshot screenshot --udid 00008030-001A --physical
"""

from device_tools.screenshot.core import (
    ScreenshotAcquisition,
    ViewportCropper,
    build_acquisition,
    load_capture_config,
)

__version__ = "1.0.0"

__all__ = [
    'ScreenshotAcquisition',
    'ViewportCropper',
    'build_acquisition',
    'load_capture_config',
    '__version__',
]
