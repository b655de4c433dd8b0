#!/usr/bin/env python3
"""
Command Line Interface for Device Screenshot Module

This module provides a CLI for the screenshot acquisition functionality using
Typer and Rich, allowing users to capture full-screen, element and viewport
screenshots of a device and to inspect the capture plan.

This module is part of the Presentation Layer and should only depend on
Core Layer components, not on Integration Layer.

Sample input:
- device-screenshot screenshot --udid 00008030-001A --physical --orientation landscape
- device-screenshot --json tools plan --udid 00008030-001A --simulator

Expected output:
- Formatted console output of operation results
- PNG files saved to disk
- Structured JSON output for machine consumption
"""

import os
import sys
import time
from typing import Any, Dict, Optional

import typer
from loguru import logger

from device_tools.screenshot.core import build_acquisition
from device_tools.screenshot.core.agent_proxy import AgentHttpTransport, AgentMetrics, AgentProxyCapture
from device_tools.screenshot.core.config import CaptureConfig, load_capture_config
from device_tools.screenshot.core.constants import EXTERNAL_TOOL
from device_tools.screenshot.core.errors import ConfigurationError, ScreenshotError
from device_tools.screenshot.core.external_tool import ExternalCaptureTool
from device_tools.screenshot.core.image_processing import image_size
from device_tools.screenshot.core.simulator import SimctlDeviceManager
from device_tools.screenshot.core.types import (
    CaptureSource,
    DeviceClass,
    DeviceContext,
    EncodedImage,
    ExecutionContext,
    Orientation,
)
from device_tools.screenshot.core.utils import setup_logger
from device_tools.screenshot.core.viewport import ViewportCropper
from device_tools.screenshot.cli.formatters import (
    create_progress,
    print_capture_result,
    print_error,
    print_info,
    print_json,
    print_plan_table,
)
from device_tools.screenshot.cli.schemas import capture_result, format_cli_response, plan_to_dicts
from device_tools.screenshot.cli.validators import (
    validate_json_output,
    validate_log_level,
    validate_orientation_option,
    validate_output_path,
    validate_prefer_option,
)

__version__ = "1.0.0"

# Initialize typer app with command groups
app = typer.Typer(
    help="Device screenshot acquisition tool",
    rich_markup_mode="rich",
    add_completion=False
)

tools_app = typer.Typer(help="Utility tools", rich_markup_mode="rich")
app.add_typer(tools_app, name="tools", help="Utility tools")


# Shared options
UDID_OPTION = typer.Option(..., "--udid", "-u", envvar="DEVICE_UDID", help="Device identifier")
SIMULATOR_OPTION = typer.Option(
    None,
    "--simulator/--physical",
    help="Device class. Detected with 'xcrun simctl' when omitted."
)
ORIENTATION_OPTION = typer.Option(
    None,
    "--orientation",
    help="portrait, landscape or auto (ask the agent)",
    callback=validate_orientation_option
)
AGENT_URL_OPTION = typer.Option(None, "--agent-url", help="Agent base URL (overrides AGENT_URL)")
SESSION_OPTION = typer.Option(None, "--session-id", help="Agent session id")
PREFER_OPTION = typer.Option(
    None,
    "--prefer",
    help="Explicit screenshotter, e.g. 'idevicescreenshot'",
    callback=validate_prefer_option
)
OUTPUT_OPTION = typer.Option(
    None,
    "--output", "-o",
    help="Output PNG path. If not provided, saves to the screenshots directory.",
    callback=validate_output_path
)


@app.callback()
def main(
    ctx: typer.Context,
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output results as JSON",
        callback=validate_json_output
    ),
    log_level: str = typer.Option(
        "WARNING",
        "--log-level",
        help="Log level for stderr output",
        callback=validate_log_level
    ),
    log_file: Optional[str] = typer.Option(None, "--log-file", help="Also write logs to this file"),
):
    """
    Device Screenshot Tool - Captures screenshots of mobile devices

    Tries a live stream, the on-device agent, the simulator API and the
    native capture utility in turn until one of them produces an image.
    """
    ctx.ensure_object(dict)
    ctx.obj["json_output"] = json_output

    logger.remove()
    logger.add(
        sys.stderr,
        format="<level>{level}: {message}</level>",
        level=log_level,
        colorize=True
    )
    if log_file:
        setup_logger(log_file, level=log_level)


def _load_config(agent_url: Optional[str], prefer: Optional[CaptureSource]) -> CaptureConfig:
    config = load_capture_config()
    updates: Dict[str, Any] = {}
    if agent_url:
        updates["agent_url"] = agent_url
    if prefer is not None:
        updates["preferred_source"] = prefer
    return config.model_copy(update=updates) if updates else config


def _resolve_device_class(udid: str, simulator: Optional[bool]) -> DeviceClass:
    if simulator is None:
        simulator = SimctlDeviceManager().is_simulator(udid)
        logger.info(f"Detected '{udid}' as a {'simulator' if simulator else 'physical device'}")
    return DeviceClass.SIMULATOR if simulator else DeviceClass.PHYSICAL


def _build_context(
    config: CaptureConfig,
    udid: str,
    simulator: Optional[bool],
    orientation: Optional[Orientation]
) -> DeviceContext:
    return config.device_context(udid, _resolve_device_class(udid, simulator), orientation)


def _default_output(udid: str, kind: str) -> str:
    timestamp = int(time.time() * 1000)
    return os.path.join("screenshots", f"{kind}_{udid}_{timestamp}.png")


def _save(image: EncodedImage, output: Optional[str], udid: str, kind: str) -> Dict[str, Any]:
    path = output or _default_output(udid, kind)
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    with open(path, "wb") as f:
        f.write(image.data)
    logger.info(f"Screenshot saved to {path}")
    return capture_result(image, path, image_size(image), udid)


def _run_capture(ctx: typer.Context, udid: str, kind: str, output: Optional[str], capture) -> None:
    """Run a capture callable, save the image and report the outcome"""
    json_output = ctx.obj.get("json_output", False)
    try:
        if json_output:
            image = capture()
        else:
            with create_progress() as progress:
                progress.add_task(f"Capturing {kind} of {udid}...", total=None)
                image = capture()

        result = _save(image, output, udid, kind)
        if json_output:
            print_json(format_cli_response(True, data=result))
        else:
            print_capture_result(result)

    except Exception as e:
        logger.error(f"{kind.capitalize()} command failed: {str(e)}")
        if json_output:
            details = {"udid": udid, "error_type": type(e).__name__}
            print_json(format_cli_response(False, error=str(e), details=details))
        else:
            print_error(f"{kind.capitalize()} failed: {str(e)}")
        sys.exit(1)


@app.command("screenshot")
def screenshot_command(
    ctx: typer.Context,
    udid: str = UDID_OPTION,
    simulator: Optional[bool] = SIMULATOR_OPTION,
    orientation: Optional[str] = ORIENTATION_OPTION,
    agent_url: Optional[str] = AGENT_URL_OPTION,
    session_id: Optional[str] = SESSION_OPTION,
    prefer: Optional[str] = PREFER_OPTION,
    output: Optional[str] = OUTPUT_OPTION,
):
    """
    Take a screenshot of the whole device screen.
    """
    def capture() -> EncodedImage:
        config = _load_config(agent_url, prefer)
        context = _build_context(config, udid, simulator, orientation)
        transport = AgentHttpTransport(config.agent_url, session_id=session_id, timeout=config.agent_timeout)
        return build_acquisition(config, transport=transport).capture(context)

    _run_capture(ctx, udid, "screenshot", output, capture)


@app.command("element")
def element_command(
    ctx: typer.Context,
    element_id: str = typer.Argument(..., help="Element id returned by the agent"),
    udid: str = UDID_OPTION,
    agent_url: Optional[str] = AGENT_URL_OPTION,
    session_id: Optional[str] = SESSION_OPTION,
    output: Optional[str] = OUTPUT_OPTION,
):
    """
    Take a screenshot bounded by one element.
    """
    def capture() -> EncodedImage:
        config = _load_config(agent_url, None)
        transport = AgentHttpTransport(config.agent_url, session_id=session_id, timeout=config.agent_timeout)
        return AgentProxyCapture(transport).capture_element(element_id, ExecutionContext.NATIVE_APP)

    _run_capture(ctx, udid, "element", output, capture)


@app.command("viewport")
def viewport_command(
    ctx: typer.Context,
    udid: str = UDID_OPTION,
    simulator: Optional[bool] = SIMULATOR_OPTION,
    orientation: Optional[str] = ORIENTATION_OPTION,
    agent_url: Optional[str] = AGENT_URL_OPTION,
    session_id: Optional[str] = SESSION_OPTION,
    prefer: Optional[str] = PREFER_OPTION,
    output: Optional[str] = OUTPUT_OPTION,
):
    """
    Take a screenshot of the viewport (the screen without the status bar).
    """
    def capture() -> EncodedImage:
        config = _load_config(agent_url, prefer)
        context = _build_context(config, udid, simulator, orientation)
        transport = AgentHttpTransport(config.agent_url, session_id=session_id, timeout=config.agent_timeout)
        cropper = ViewportCropper(build_acquisition(config, transport=transport), AgentMetrics(transport))
        return cropper.capture_viewport(context)

    _run_capture(ctx, udid, "viewport", output, capture)


@tools_app.command("check")
def check_tool(
    ctx: typer.Context,
    tool: Optional[str] = typer.Option(
        None,
        "--tool",
        help=f"Capture utility to look for (default: EXTERNAL_SCREENSHOT_TOOL or {EXTERNAL_TOOL['NAME']})"
    ),
):
    """
    Check that the native capture utility is installed.
    """
    json_output = ctx.obj.get("json_output", False)
    try:
        tool = tool or load_capture_config().external_tool
        ExternalCaptureTool(tool).is_available()
    except (ScreenshotError, ConfigurationError) as e:
        if json_output:
            print_json(format_cli_response(False, error=str(e), details={"tool": tool}))
        else:
            print_error(str(e))
        sys.exit(1)

    if json_output:
        print_json(format_cli_response(True, data={"tool": tool, "available": True}))
    else:
        print_info(f"'{tool}' is available")


@tools_app.command("plan")
def show_plan(
    ctx: typer.Context,
    udid: str = UDID_OPTION,
    simulator: Optional[bool] = SIMULATOR_OPTION,
    prefer: Optional[str] = PREFER_OPTION,
    stream_active: bool = typer.Option(False, "--stream-active", help="Assume a live stream is running"),
):
    """
    Show the order in which capture sources would be tried, without capturing.
    """
    json_output = ctx.obj.get("json_output", False)
    try:
        config = _load_config(None, prefer)
        context = _build_context(config, udid, simulator, None)
        plan = build_acquisition(config).build_capture_plan(context, stream_active)
    except Exception as e:
        logger.error(f"Plan command failed: {str(e)}")
        if json_output:
            print_json(format_cli_response(False, error=str(e)))
        else:
            print_error(f"Failed to build capture plan: {str(e)}")
        sys.exit(1)

    steps = plan_to_dicts(plan)
    if json_output:
        print_json(format_cli_response(True, data={"udid": udid, "plan": steps}))
    else:
        print_plan_table(steps, udid)


@tools_app.command("version")
def show_version(ctx: typer.Context):
    """
    Show version information.
    """
    version_info = {
        "name": "Device Screenshot Tool",
        "version": __version__,
        "description": "Multi-source screenshot acquisition for mobile devices.",
    }

    if ctx.obj.get("json_output", False):
        print_json(format_cli_response(True, data=version_info))
    else:
        print_info(f"{version_info['name']} v{version_info['version']}\n{version_info['description']}")


if __name__ == "__main__":
    """
    CLI entry point for the device screenshot module.

    Examples:
      python -m device_tools.screenshot.cli.cli screenshot --udid 00008030-001A --physical
      python -m device_tools.screenshot.cli.cli viewport --udid 00008030-001A
      python -m device_tools.screenshot.cli.cli tools plan --udid 00008030-001A --simulator
    """
    app()
