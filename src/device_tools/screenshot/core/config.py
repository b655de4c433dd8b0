"""
Configuration for screenshot acquisition.

Settings are read once from environment variables (optionally loaded from a
.env file) and frozen into a CaptureConfig. The preferred screenshotter is
parsed into a CaptureSource here, so an unknown value fails at load time
rather than silently on every capture.

Environment variables:
    PREFERRED_PHYSICAL_DEVICE_SCREENSHOTTER="idevicescreenshot"
    SCREENSHOT_RETRY_ATTEMPTS=2
    SCREENSHOT_RETRY_INTERVAL=1.0
    EXTERNAL_SCREENSHOT_TOOL="idevicescreenshot"
    AGENT_URL="http://127.0.0.1:8100"
    AGENT_TIMEOUT=60
"""

import os
from typing import Mapping, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from device_tools.screenshot.core.constants import (
    AGENT_SETTINGS,
    CAPTURE_SETTINGS,
    EXTERNAL_TOOL,
    EXTERNAL_TOOL_ALIASES,
)
from device_tools.screenshot.core.errors import ConfigurationError
from device_tools.screenshot.core.types import (
    CaptureSource,
    DeviceClass,
    DeviceContext,
    Orientation,
)

load_dotenv()


def parse_capture_source(value: Optional[str]) -> Optional[CaptureSource]:
    """
    Parse a configured screenshotter name.

    Matching is case-insensitive. Only the external tool can be selected
    explicitly; every other source is chosen by the fallback policy.

    Raises:
        ConfigurationError: If the value names no selectable source
    """
    if value is None or not value.strip():
        return None
    if value.strip().lower() in EXTERNAL_TOOL_ALIASES:
        return CaptureSource.EXTERNAL_TOOL
    raise ConfigurationError(
        f"Unrecognized screenshotter '{value}'. Expected one of: {', '.join(EXTERNAL_TOOL_ALIASES)}"
    )


class CaptureConfig(BaseModel):
    """Immutable acquisition settings"""
    model_config = ConfigDict(frozen=True)

    preferred_source: Optional[CaptureSource] = None
    retry_attempts: int = Field(default=CAPTURE_SETTINGS["RETRY_ATTEMPTS"], ge=1)
    retry_interval: float = Field(default=CAPTURE_SETTINGS["RETRY_INTERVAL"], ge=0)
    external_tool: str = EXTERNAL_TOOL["NAME"]
    agent_url: str = AGENT_SETTINGS["DEFAULT_URL"]
    agent_timeout: float = Field(default=AGENT_SETTINGS["DEFAULT_TIMEOUT"], gt=0)

    def device_context(
        self,
        udid: str,
        device_class: DeviceClass,
        orientation: Optional[Orientation] = None,
    ) -> DeviceContext:
        """Build the per-call context carrying the configured preference"""
        return DeviceContext(
            udid=udid,
            device_class=device_class,
            orientation=orientation,
            preferred_source=self.preferred_source,
        )


def _number(env: Mapping[str, str], key: str, default, cast):
    raw = env.get(key)
    if raw is None or raw == "":
        return default
    try:
        return cast(raw)
    except ValueError:
        raise ConfigurationError(f"{key} must be a number, got '{raw}'") from None


def load_capture_config(env: Optional[Mapping[str, str]] = None) -> CaptureConfig:
    """
    Load CaptureConfig from the environment.

    Args:
        env: Mapping to read instead of os.environ

    Returns:
        CaptureConfig

    Raises:
        ConfigurationError: If a value is unparseable or out of range
    """
    env = os.environ if env is None else env
    try:
        return CaptureConfig(
            preferred_source=parse_capture_source(env.get("PREFERRED_PHYSICAL_DEVICE_SCREENSHOTTER")),
            retry_attempts=_number(env, "SCREENSHOT_RETRY_ATTEMPTS", CAPTURE_SETTINGS["RETRY_ATTEMPTS"], int),
            retry_interval=_number(env, "SCREENSHOT_RETRY_INTERVAL", CAPTURE_SETTINGS["RETRY_INTERVAL"], float),
            external_tool=env.get("EXTERNAL_SCREENSHOT_TOOL") or EXTERNAL_TOOL["NAME"],
            agent_url=env.get("AGENT_URL") or AGENT_SETTINGS["DEFAULT_URL"],
            agent_timeout=_number(env, "AGENT_TIMEOUT", AGENT_SETTINGS["DEFAULT_TIMEOUT"], float),
        )
    except ValidationError as e:
        raise ConfigurationError(f"Invalid capture configuration: {str(e)}") from e
