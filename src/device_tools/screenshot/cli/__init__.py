"""
CLI Layer for Device Screenshot Module

This package contains the CLI (Command Line Interface) layer for the
screenshot functionality, providing a rich interface for human users.

The CLI layer is designed to:
1. Handle user interaction concerns
2. Format outputs for human readability
3. Parse and validate command-line arguments
4. Implement CLI-specific error handling

Usage:
    from device_tools.screenshot.cli import app as screenshot_app
    screenshot_app()
"""

# CLI application
from device_tools.screenshot.cli.cli import app

# Formatters for rich output
from device_tools.screenshot.cli.formatters import (
    print_capture_result,
    print_plan_table,
    print_error,
    print_warning,
    print_info,
    print_json,
    create_progress,
    console
)

# Response envelopes
from device_tools.screenshot.cli.schemas import format_cli_response

__all__ = [
    'app',
    'print_capture_result',
    'print_plan_table',
    'print_error',
    'print_warning',
    'print_info',
    'print_json',
    'create_progress',
    'console',
    'format_cli_response'
]
