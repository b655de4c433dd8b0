#!/usr/bin/env python3
"""
External Capture Tool Module

This module wraps the native command-line capture utility used for physical
devices (idevicescreenshot by default). The utility writes a PNG to a path we
hand it; the file lives only for the duration of one capture.

This module is part of the Core Layer and should have no dependencies on
Presentation or Integration layers.

Sample input:
- ExternalCaptureTool().capture("00008030-001A")

Expected output:
- EncodedImage with the raw PNG bytes written by the tool
- On failure: CaptureToolError naming the device and the original error
"""

import os
import subprocess
from typing import Callable, List, Optional

from loguru import logger

from device_tools.screenshot.core.constants import EXTERNAL_TOOL
from device_tools.screenshot.core.errors import CaptureToolError, ToolNotFoundError
from device_tools.screenshot.core.types import CaptureSource, EncodedImage
from device_tools.screenshot.core.utils import (
    describe_process_error,
    read_bytes,
    run_command,
    scoped_temp_path,
    which,
)

Runner = Callable[[str, List[str]], subprocess.CompletedProcess]


class ExternalCaptureTool:
    """Screenshots through a native capture utility invoked as `<tool> -u <udid> <path>`"""

    def __init__(
        self,
        tool: str = EXTERNAL_TOOL["NAME"],
        runner: Runner = run_command,
        locator: Callable[[str], Optional[str]] = which,
        temp_dir: Optional[str] = None,
    ):
        self.tool = tool
        self._runner = runner
        self._locator = locator
        self._temp_dir = temp_dir

    def is_available(self) -> None:
        """
        Verify the capture utility can be found on PATH.

        Raises:
            ToolNotFoundError: With install guidance if the tool is missing
        """
        if not self._locator(self.tool):
            raise ToolNotFoundError(self.tool, EXTERNAL_TOOL["INSTALL_HINT"])

    def capture(self, udid: str) -> EncodedImage:
        """
        Capture the screen of a device through the external tool.

        The temporary output file is removed before this returns or raises.

        Args:
            udid: Device identifier

        Returns:
            EncodedImage: Raw tool output, not rotated

        Raises:
            CaptureToolError: If the tool fails or produces no output
        """
        logger.debug(f"Taking screenshot with '{self.tool}'")
        prefix = f"{EXTERNAL_TOOL['TEMP_PREFIX']}-{udid}"
        with scoped_temp_path(prefix, EXTERNAL_TOOL["TEMP_SUFFIX"], self._temp_dir) as path:
            try:
                self._runner(self.tool, ["-u", udid, path])
            except (subprocess.CalledProcessError, OSError) as e:
                raise CaptureToolError(udid, describe_process_error(e), self.tool) from e

            if not os.path.exists(path):
                raise CaptureToolError(udid, f"{self.tool} did not write {path}", self.tool)
            try:
                data = read_bytes(path)
            except OSError as e:
                raise CaptureToolError(udid, str(e), self.tool) from e

        if not data:
            raise CaptureToolError(udid, f"{self.tool} produced an empty file", self.tool)
        return EncodedImage(data=data, source=CaptureSource.EXTERNAL_TOOL)
