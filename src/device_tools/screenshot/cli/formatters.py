#!/usr/bin/env python3
"""
Formatters for Device Screenshot CLI

This module provides rich formatting utilities for the CLI presentation layer.
It includes panels, tables and progress indicators for a better user experience.

This module is part of the Presentation Layer and should only depend on
Core Layer components, not on Integration Layer.

Sample input:
- Capture result dictionary
- Capture plan as a list of step dictionaries
- Error messages

Expected output:
- Rich formatted tables, panels, and progress indicators
"""

import os
import json
from typing import Dict, List, Any

from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.syntax import Syntax
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.text import Text


# Initialize console
console = Console()


# Color scheme
COLORS = {
    "success": "green",
    "error": "red",
    "warning": "yellow",
    "info": "blue",
    "path": "cyan",
    "highlight": "magenta",
    "dim": "grey70",
}


def print_capture_result(result: Dict[str, Any]) -> None:
    """
    Format and print a capture result to the console.

    Args:
        result: Capture result dictionary
    """
    if "error" in result:
        print_error(result["error"])
        return

    file_path = result.get("file", "Unknown")

    info = Text()
    info.append("Filename: ", style=COLORS["dim"])
    info.append(f"{os.path.basename(file_path)}\n", style=COLORS["path"])
    info.append("Directory: ", style=COLORS["dim"])
    info.append(f"{os.path.dirname(file_path) or '.'}\n", style=COLORS["path"])
    info.append("Device: ", style=COLORS["dim"])
    info.append(f"{result.get('udid', 'Unknown')}\n", style=COLORS["highlight"])
    info.append("Source: ", style=COLORS["dim"])
    info.append(f"{result.get('source') or 'unknown'}\n", style=COLORS["highlight"])
    info.append("Dimensions: ", style=COLORS["dim"])
    info.append(f"{result.get('width')}x{result.get('height')}\n", style=COLORS["info"])
    info.append("Size: ", style=COLORS["dim"])
    info.append(f"{result.get('bytes', 0) / 1024:.1f} KB", style=COLORS["info"])

    panel = Panel(
        info,
        title="[bold green]Screenshot Captured Successfully",
        border_style=COLORS["success"],
        padding=(1, 2)
    )

    console.print(panel)


def print_plan_table(plan: List[Dict[str, Any]], udid: str) -> None:
    """
    Format and print a capture plan as a table.

    Args:
        plan: Capture steps as dictionaries
        udid: Device the plan was built for
    """
    table = Table(title=f"Capture Plan for {udid}")

    table.add_column("#", justify="right", style=COLORS["dim"])
    table.add_column("Source", style=COLORS["highlight"])
    table.add_column("On Failure", style=COLORS["info"])
    table.add_column("Attempts", justify="right", style=COLORS["info"])
    table.add_column("Interval (s)", justify="right", style=COLORS["info"])

    for index, step in enumerate(plan, start=1):
        table.add_row(
            str(index),
            step["source"],
            "stop" if step["fatal"] else "fall through",
            str(step["attempts"]),
            f"{step['interval']:.1f}"
        )

    console.print(table)


def print_error(message: str, title: str = "Error") -> None:
    """
    Format and print error message to the console.

    Args:
        message: Error message
        title: Panel title
    """
    panel = Panel(
        Text(message, style=COLORS["error"]),
        title=f"[bold {COLORS['error']}]{title}",
        border_style=COLORS["error"],
        padding=(1, 2)
    )

    console.print(panel)


def print_warning(message: str, title: str = "Warning") -> None:
    panel = Panel(
        Text(message, style=COLORS["warning"]),
        title=f"[bold {COLORS['warning']}]{title}",
        border_style=COLORS["warning"],
        padding=(1, 2)
    )

    console.print(panel)


def print_info(message: str, title: str = "Info") -> None:
    panel = Panel(
        Text(message, style=COLORS["info"]),
        title=f"[bold {COLORS['info']}]{title}",
        border_style=COLORS["info"],
        padding=(1, 2)
    )

    console.print(panel)


def print_json(data: Dict[str, Any], title: str = "JSON Output") -> None:
    """
    Format and print JSON data to the console.

    Args:
        data: JSON data
        title: Panel title
    """
    json_str = json.dumps(data, indent=2)
    syntax = Syntax(json_str, "json", theme="monokai", line_numbers=True)

    panel = Panel(
        syntax,
        title=f"[bold {COLORS['info']}]{title}",
        border_style=COLORS["info"],
        padding=(1, 2)
    )

    console.print(panel)


def create_progress() -> Progress:
    """
    Create a progress indicator.

    Returns:
        Progress: Rich spinner with elapsed time
    """
    return Progress(
        SpinnerColumn(),
        TextColumn("[bold blue]{task.description}"),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    )
