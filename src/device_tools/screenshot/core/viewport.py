#!/usr/bin/env python3
"""
Viewport Screenshot Module

This module returns the part of a screenshot below the status bar. The
status bar height comes in unscaled points, so it is multiplied by the
device pixel ratio before being used as a pixel offset.

This module is part of the Core Layer and should have no dependencies on
Presentation or Integration layers.

Sample input:
- ViewportMetrics(status_bar_height=20, device_pixel_ratio=2, window_width=400, window_height=800)

Expected output:
- Rectangle(left=0, top=40, width=800, height=1560)
"""

from loguru import logger

from device_tools.screenshot.core.acquisition import ScreenshotAcquisition
from device_tools.screenshot.core.image_processing import crop
from device_tools.screenshot.core.types import (
    DeviceContext,
    DeviceMetrics,
    EncodedImage,
    Rectangle,
    ViewportMetrics,
)


def compute_viewport_rect(metrics: ViewportMetrics) -> Rectangle:
    """
    Compute the pixel rectangle of the viewport.

    Args:
        metrics: Status bar height, pixel ratio and window size

    Returns:
        Rectangle: Region below the status bar in screenshot pixels
    """
    scale = metrics.device_pixel_ratio
    status_bar = round(metrics.status_bar_height * scale)
    return Rectangle(
        left=0,
        top=status_bar,
        width=round(metrics.window_width * scale),
        height=round(metrics.window_height * scale) - status_bar,
    )


class ViewportCropper:
    """Screenshots with the status bar cut off"""

    def __init__(self, acquisition: ScreenshotAcquisition, metrics: DeviceMetrics):
        self._acquisition = acquisition
        self._metrics = metrics

    def capture_viewport(self, context: DeviceContext) -> EncodedImage:
        status_bar_height = self._metrics.status_bar_height()
        screenshot = self._acquisition.capture(context)

        # nothing to crop
        if status_bar_height == 0:
            return screenshot

        scale = self._metrics.device_pixel_ratio()
        window = self._metrics.window_size()
        metrics = ViewportMetrics(
            status_bar_height=status_bar_height,
            device_pixel_ratio=scale,
            window_width=window.width,
            window_height=window.height,
        )
        rect = compute_viewport_rect(metrics)
        logger.debug(f"Cropping viewport of '{context.udid}' to {rect}")
        return crop(screenshot, rect)
