#!/usr/bin/env python3
"""
Validators for Device Screenshot CLI

This module provides Typer callbacks that validate and convert CLI inputs
into core types, printing a friendly error and exiting on bad input.

This module is part of the Presentation Layer and should only depend on
Core Layer components, not on Integration Layer.

Sample input:
- CLI parameter values, e.g. --orientation landscape, --prefer idevicescreenshot

Expected output:
- Validated and converted parameter values
- Friendly error messages
"""

import os
from typing import Optional

import typer

from device_tools.screenshot.core.config import parse_capture_source
from device_tools.screenshot.core.errors import ConfigurationError
from device_tools.screenshot.core.types import CaptureSource, Orientation
from device_tools.screenshot.cli.formatters import print_error

LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")


def validate_orientation_option(ctx: typer.Context, value: Optional[str]) -> Optional[Orientation]:
    """
    Typer callback for the orientation option.

    "auto" (or no value) leaves the orientation to be asked from the agent.
    """
    if value is None or value.lower() == "auto":
        return None
    if value.lower() not in ("portrait", "landscape"):
        print_error(f"Invalid orientation: {value}. Must be one of portrait, landscape, auto.")
        raise typer.Exit(1)
    return Orientation(value.upper())


def validate_prefer_option(ctx: typer.Context, value: Optional[str]) -> Optional[CaptureSource]:
    """Typer callback for the preferred screenshotter option"""
    try:
        return parse_capture_source(value)
    except ConfigurationError as e:
        print_error(str(e))
        raise typer.Exit(1)


def validate_output_path(ctx: typer.Context, value: Optional[str]) -> Optional[str]:
    """
    Typer callback for the output file path.

    Creates the parent directory if needed.
    """
    if value is None:
        return None

    directory = os.path.dirname(value)
    if directory:
        try:
            os.makedirs(directory, exist_ok=True)
        except OSError as e:
            print_error(f"Cannot create output directory: {directory}. Error: {str(e)}")
            raise typer.Exit(1)
    return value


def validate_log_level(ctx: typer.Context, value: str) -> str:
    level = value.upper()
    if level not in LOG_LEVELS:
        print_error(f"Invalid log level: {value}. Must be one of {', '.join(LOG_LEVELS)}.")
        raise typer.Exit(1)
    return level


def validate_json_output(ctx: typer.Context, value: bool) -> bool:
    """Store the JSON flag in the context for other callbacks to access"""
    ctx.ensure_object(dict)
    ctx.obj["json_output"] = value
    return value
