#!/usr/bin/env python3
"""
Simulator Capture Module

This module captures simulator screens through the device-management layer.
SimctlDeviceManager is the default layer, driving `xcrun simctl`.

This module is part of the Core Layer and should have no dependencies on
Presentation or Integration layers.

Sample input:
- SimulatorCapture(SimctlDeviceManager()).capture("5B1C1D2E-...")

Expected output:
- EncodedImage of the simulator screen
- Errors from the device manager propagate unchanged
"""

import base64
import json
import subprocess
from typing import Callable, List, Optional

from loguru import logger

from device_tools.screenshot.core.constants import EXTERNAL_TOOL
from device_tools.screenshot.core.types import CaptureSource, DeviceManager, EncodedImage
from device_tools.screenshot.core.utils import read_bytes, run_command, scoped_temp_path

Runner = Callable[[str, List[str]], subprocess.CompletedProcess]


class SimctlDeviceManager:
    """Device-management layer backed by `xcrun simctl`"""

    def __init__(self, runner: Runner = run_command, temp_dir: Optional[str] = None):
        self._runner = runner
        self._temp_dir = temp_dir

    def simulator_screenshot(self, udid: str) -> str:
        """
        Take a simulator screenshot with `simctl io screenshot`.

        Returns:
            str: Base64 encoded PNG
        """
        prefix = f"{EXTERNAL_TOOL['TEMP_PREFIX']}-{udid}"
        with scoped_temp_path(prefix, ".png", self._temp_dir) as path:
            self._runner("xcrun", ["simctl", "io", udid, "screenshot", path])
            data = read_bytes(path)
        return base64.b64encode(data).decode("utf-8")

    def is_simulator(self, udid: str) -> bool:
        """Check whether udid names a known simulator"""
        try:
            result = self._runner("xcrun", ["simctl", "list", "devices", "-j"])
        except (subprocess.CalledProcessError, OSError) as e:
            logger.debug(f"Cannot list simulators: {str(e)}")
            return False

        output = result.stdout
        if isinstance(output, bytes):
            output = output.decode("utf-8", errors="replace")
        try:
            devices = json.loads(output or "{}").get("devices", {})
        except ValueError:
            return False
        return any(
            device.get("udid") == udid
            for runtime_devices in devices.values()
            for device in runtime_devices
        )


class SimulatorCapture:
    """Screenshots from the simulator screenshot API; no retries at this layer"""

    def __init__(self, device_manager: DeviceManager):
        self._device_manager = device_manager

    def capture(self, udid: str) -> EncodedImage:
        logger.info("Falling back to 'simctl io screenshot' API")
        data = self._device_manager.simulator_screenshot(udid)
        return EncodedImage.from_base64(data, source=CaptureSource.SIMULATOR_API)
