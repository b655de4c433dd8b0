#!/usr/bin/env python3
"""
Constants for Device Screenshot Module

This module defines constants used throughout the screenshot acquisition
functionality, ensuring consistent configuration across the application.

This module is part of the Core Layer and should have no dependencies on
Presentation or Integration layers.

Sample input:
- None (module contains only constants)

Expected output:
- None (module contains only constants)
"""

from typing import Dict, Any

# Retry policy for the final agent attempt
CAPTURE_SETTINGS: Dict[str, Any] = {
    "RETRY_ATTEMPTS": 2,  # Agent attempts made by the final retry step
    "RETRY_INTERVAL": 1.0,  # Seconds between final retry attempts
    "IMAGE_ENCODING": "png",  # Encoding of every image crossing the boundary
}

# Native capture utility for physical devices
EXTERNAL_TOOL: Dict[str, str] = {
    "NAME": "idevicescreenshot",
    "INSTALL_HINT": "brew install --HEAD libimobiledevice",
    "TEMP_PREFIX": "screenshot",
    "TEMP_SUFFIX": ".png",
}

# On-device automation agent
AGENT_SETTINGS: Dict[str, Any] = {
    "DEFAULT_URL": "http://127.0.0.1:8100",
    "DEFAULT_TIMEOUT": 60.0,
}

AGENT_ENDPOINTS: Dict[str, str] = {
    "SCREENSHOT": "/screenshot",
    "ELEMENT_SCREENSHOT": "/element/{element_id}/screenshot",
    "ORIENTATION": "/orientation",
    "SCREEN_INFO": "/wda/screen",
    "WINDOW_SIZE": "/window/size",
}

# Keys a WebDriver element reference may be wrapped in
ELEMENT_KEYS = ("element-6066-11e4-a52e-4f735466cecf", "ELEMENT")

# Atom used for element screenshots inside a web view
ELEMENT_SCREENSHOT_ATOM = "getElementScreenshot"

# Values of PREFERRED_PHYSICAL_DEVICE_SCREENSHOTTER naming the external tool
EXTERNAL_TOOL_ALIASES = ("idevicescreenshot", "external_tool")

# Logging settings
LOG_MAX_STR_LEN: int = 100  # Maximum string length for truncated logging


if __name__ == "__main__":
    """Validate module constants"""
    import sys

    all_validation_failures = []
    total_tests = 0

    # Test 1: Retry policy is bounded
    total_tests += 1
    if not isinstance(CAPTURE_SETTINGS["RETRY_ATTEMPTS"], int) or CAPTURE_SETTINGS["RETRY_ATTEMPTS"] < 1:
        all_validation_failures.append("RETRY_ATTEMPTS should be a positive integer")

    # Test 2: Endpoints are absolute paths
    total_tests += 1
    for key, path in AGENT_ENDPOINTS.items():
        if not path.startswith("/"):
            all_validation_failures.append(f"AGENT_ENDPOINTS[{key}] should start with '/', got {path}")

    # Test 3: Tool name is one of its own aliases
    total_tests += 1
    if EXTERNAL_TOOL["NAME"] not in EXTERNAL_TOOL_ALIASES:
        all_validation_failures.append(f"EXTERNAL_TOOL_ALIASES should contain {EXTERNAL_TOOL['NAME']}")

    if all_validation_failures:
        print(f"❌ VALIDATION FAILED - {len(all_validation_failures)} of {total_tests} tests failed:")
        for failure in all_validation_failures:
            print(f"  - {failure}")
        sys.exit(1)
    else:
        print(f"✅ VALIDATION PASSED - All {total_tests} tests produced expected results")
        print("Constants are valid and ready for use")
        sys.exit(0)
