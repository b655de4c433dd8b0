#!/usr/bin/env python3
"""
Utility Functions for Device Screenshot Module

This module provides common utility functions used by other core modules:
process invocation, scoped temporary files and logging helpers.

This module is part of the Core Layer and should have no dependencies on
Presentation or Integration layers.

Sample input:
- run_command("idevicescreenshot", ["-u", "00008030-001A", "/tmp/screenshot.png"])
- with scoped_temp_path("screenshot-00008030-001A", ".png") as path: ...

Expected output:
- subprocess.CompletedProcess with captured stdout/stderr
- A unique temp path that no longer exists once the block exits
"""

import os
import re
import shutil
import subprocess
import tempfile
import uuid
from contextlib import contextmanager
from typing import Iterator, List, Optional

from loguru import logger

from device_tools.screenshot.core.constants import LOG_MAX_STR_LEN


def truncate_large_value(value, max_str_len: int = LOG_MAX_STR_LEN):
    """
    Truncates large string values for logging purposes.

    Args:
        value: The value to truncate
        max_str_len: Maximum string length to allow

    Returns:
        Truncated string, or the value unchanged if it is not a long string
    """
    if isinstance(value, str) and len(value) > max_str_len:
        return f"{value[:max_str_len]}... [truncated, {len(value)} chars total]"
    return value


def setup_logger(log_file: str, level: str = "INFO"):
    """
    Add a rotating file sink to the shared loguru logger.

    Args:
        log_file: Path to the log file
        level: Logging level

    Returns:
        The configured logger
    """
    directory = os.path.dirname(log_file)
    if directory:
        os.makedirs(directory, exist_ok=True)

    logger.add(
        log_file,
        rotation="10 MB",
        level=level,
        format="{time:YYYY-MM-DD HH:mm:ss} | {level} | {message}"
    )
    return logger


def which(command: str) -> Optional[str]:
    """Return the full path of an executable on PATH, or None"""
    return shutil.which(command)


def run_command(command: str, args: List[str]) -> subprocess.CompletedProcess:
    """
    Run an external command and capture its output.

    Args:
        command: Executable name
        args: Command arguments

    Returns:
        subprocess.CompletedProcess

    Raises:
        subprocess.CalledProcessError: If the command exits with a non-zero status
        OSError: If the command cannot be started
    """
    logger.debug(f"Running: {command} {' '.join(args)}")
    return subprocess.run([command, *args], capture_output=True, check=True)


def describe_process_error(error: Exception) -> str:
    """Build a readable message from a failed process invocation"""
    if isinstance(error, subprocess.CalledProcessError):
        stderr = error.stderr
        if isinstance(stderr, bytes):
            stderr = stderr.decode("utf-8", errors="replace")
        stderr = (stderr or "").strip()
        message = f"Command '{error.cmd[0] if error.cmd else ''}' exited with status {error.returncode}"
        return f"{message}: {stderr}" if stderr else message
    return str(error)


def remove_if_exists(path: str) -> None:
    """
    Remove a file if present.

    Failures are logged rather than raised so that cleanup running in a
    finally block can never replace an error already in flight.
    """
    try:
        os.remove(path)
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning(f"Could not remove temporary file {path}: {str(e)}")


def read_bytes(path: str) -> bytes:
    with open(path, "rb") as f:
        return f.read()


def safe_filename(value: str) -> str:
    """Replace path separators and other unsafe characters so value stays one path component"""
    return re.sub(r"[^A-Za-z0-9._-]", "_", value).strip(".") or "_"


@contextmanager
def scoped_temp_path(prefix: str, suffix: str, directory: Optional[str] = None) -> Iterator[str]:
    """
    Yield a fresh, not-yet-existing temporary file path.

    The path is namespaced by prefix plus a unique suffix and is removed when
    the block exits, whether it exits normally or by exception.

    Args:
        prefix: Filename prefix, e.g. "screenshot-<udid>"
        suffix: Filename suffix, e.g. ".png"
        directory: Parent directory (defaults to the system temp dir)
    """
    path = os.path.join(
        directory or tempfile.gettempdir(),
        f"{safe_filename(prefix)}-{uuid.uuid4().hex}{suffix}"
    )
    remove_if_exists(path)
    try:
        yield path
    finally:
        remove_if_exists(path)


if __name__ == "__main__":
    """Validate utility functions"""
    import sys

    all_validation_failures = []
    total_tests = 0

    # Test 1: Temp path is cleaned up even when the block raises
    total_tests += 1
    leaked = None
    try:
        with scoped_temp_path("screenshot-validate", ".png") as path:
            leaked = path
            with open(path, "wb") as f:
                f.write(b"data")
            raise RuntimeError("boom")
    except RuntimeError:
        pass
    if leaked is None or os.path.exists(leaked):
        all_validation_failures.append(f"Temp path test: {leaked} was not removed")

    # Test 2: Truncation
    total_tests += 1
    truncated = truncate_large_value("x" * 500)
    if not truncated.endswith("[truncated, 500 chars total]"):
        all_validation_failures.append(f"Truncation test: unexpected result {truncated[-40:]}")

    if all_validation_failures:
        print(f"❌ VALIDATION FAILED - {len(all_validation_failures)} of {total_tests} tests failed:")
        for failure in all_validation_failures:
            print(f"  - {failure}")
        sys.exit(1)
    else:
        print(f"✅ VALIDATION PASSED - All {total_tests} tests produced expected results")
        sys.exit(0)
