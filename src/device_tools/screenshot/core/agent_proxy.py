#!/usr/bin/env python3
"""
Agent Proxy Capture Module

This module talks to the on-device automation agent (a WebDriverAgent-style
HTTP service) to obtain full-screen and element screenshots, the current
orientation and the metrics needed to crop the status bar off a screenshot.

This module is part of the Core Layer and should have no dependencies on
Presentation or Integration layers.

Third-party package documentation:
- Requests: https://requests.readthedocs.io/

Sample input:
- AgentProxyCapture(AgentHttpTransport("http://127.0.0.1:8100")).capture()
- capture_element({"ELEMENT": "5"})

Expected output:
- EncodedImage decoded from the base64 PNG the agent returns
- UnexpectedResponseError if the agent returns anything else
"""

import json
from typing import Any, Callable, Dict, List, Optional, Union

import requests
from loguru import logger

from device_tools.screenshot.core.constants import (
    AGENT_ENDPOINTS,
    AGENT_SETTINGS,
    ELEMENT_KEYS,
    ELEMENT_SCREENSHOT_ATOM,
)
from device_tools.screenshot.core.errors import (
    AgentProxyError,
    ImageProcessingError,
    ScreenshotError,
    UnexpectedResponseError,
)
from device_tools.screenshot.core.types import (
    AgentTransport,
    CaptureSource,
    EncodedImage,
    ExecutionContext,
    Orientation,
    WindowSize,
)
from device_tools.screenshot.core.image_processing import ensure_decodable
from device_tools.screenshot.core.utils import truncate_large_value

AtomExecutor = Callable[[str, List[Any]], Any]


class AgentHttpTransport:
    """
    Minimal HTTP transport to the on-device agent.

    Unwraps the {"value": ...} envelope of successful responses and raises
    AgentProxyError on connection failures and error statuses.
    """

    def __init__(
        self,
        base_url: str = AGENT_SETTINGS["DEFAULT_URL"],
        session_id: Optional[str] = None,
        timeout: float = AGENT_SETTINGS["DEFAULT_TIMEOUT"],
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.session_id = session_id
        self.timeout = timeout
        self._session = session or requests.Session()

    def url_for(self, path: str) -> str:
        if self.session_id:
            return f"{self.base_url}/session/{self.session_id}{path}"
        return f"{self.base_url}{path}"

    def proxy(self, path: str, method: str = "GET") -> Any:
        url = self.url_for(path)
        logger.debug(f"Proxying {method} {url}")
        try:
            response = self._session.request(method, url, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise AgentProxyError(path, str(e)) from e

        try:
            body = response.json()
        except ValueError:
            body = response.text

        if not response.ok:
            message = body
            if isinstance(body, dict) and isinstance(body.get("value"), dict):
                message = body["value"].get("message", body["value"])
            raise AgentProxyError(path, f"HTTP {response.status_code}: {truncate_large_value(str(message))}")

        if isinstance(body, dict) and "value" in body:
            return body["value"]
        return body


def unwrap_element(element: Union[str, Dict[str, str]]) -> str:
    """
    Extract the element id from a WebDriver element reference.

    Args:
        element: Raw id, or a dict keyed by the W3C or JSONWP element key

    Returns:
        str: The element id
    """
    if isinstance(element, dict):
        for key in ELEMENT_KEYS:
            if key in element:
                return element[key]
        raise ValueError(f"Not an element reference: {element}")
    return element


def _describe_payload(payload: Any) -> str:
    try:
        rendered = json.dumps(payload)
    except (TypeError, ValueError):
        rendered = repr(payload)
    return truncate_large_value(rendered)


def decode_screenshot_payload(payload: Any, what: str) -> EncodedImage:
    """
    Validate that an agent payload is a base64 encoded image string.

    Raises:
        UnexpectedResponseError: If the payload is not a base64 string holding an image
    """
    if not isinstance(payload, str):
        raise UnexpectedResponseError(
            f"Unable to take {what}. Agent returned '{_describe_payload(payload)}'",
            payload=payload,
        )
    try:
        return ensure_decodable(EncodedImage.from_base64(payload, source=CaptureSource.AGENT_PROXY))
    except ImageProcessingError as e:
        raise UnexpectedResponseError(
            f"Unable to take {what}. Agent returned '{_describe_payload(payload)}': {str(e)}",
            payload=payload,
        ) from e


class AgentProxyCapture:
    """Screenshots requested from the on-device automation agent"""

    def __init__(self, transport: AgentTransport, atom_executor: Optional[AtomExecutor] = None):
        self._transport = transport
        self._atom_executor = atom_executor

    def capture(self) -> EncodedImage:
        logger.debug("Taking screenshot with the agent")
        data = self._transport.proxy(AGENT_ENDPOINTS["SCREENSHOT"], "GET")
        return decode_screenshot_payload(data, "screenshot")

    def capture_element(
        self,
        element: Union[str, Dict[str, str]],
        context: ExecutionContext = ExecutionContext.NATIVE_APP,
    ) -> EncodedImage:
        """
        Take a screenshot bounded by one element.

        In a web view the screenshot comes from the DOM automation atom
        instead of the native element endpoint.

        Args:
            element: Element id or element reference dict
            context: Current execution context

        Returns:
            EncodedImage: Element screenshot
        """
        element_id = unwrap_element(element)
        if context == ExecutionContext.WEBVIEW:
            if self._atom_executor is None:
                raise ScreenshotError("Element screenshots in a web view need an atom executor")
            logger.debug(f"Taking screenshot of web element {element_id} with the '{ELEMENT_SCREENSHOT_ATOM}' atom")
            data = self._atom_executor(ELEMENT_SCREENSHOT_ATOM, [element])
            return decode_screenshot_payload(data, f"a screenshot of the element {element_id}")

        path = AGENT_ENDPOINTS["ELEMENT_SCREENSHOT"].format(element_id=element_id)
        data = self._transport.proxy(path, "GET")
        return decode_screenshot_payload(data, f"a screenshot of the element {element_id}")

    def orientation(self) -> Orientation:
        return Orientation.parse(self._transport.proxy(AGENT_ENDPOINTS["ORIENTATION"], "GET"))


class AgentMetrics:
    """Viewport metrics read from the agent's screen and window endpoints"""

    def __init__(self, transport: AgentTransport):
        self._transport = transport

    def _screen_info(self) -> Dict[str, Any]:
        info = self._transport.proxy(AGENT_ENDPOINTS["SCREEN_INFO"], "GET")
        if not isinstance(info, dict):
            raise UnexpectedResponseError(
                f"Unable to read screen info. Agent returned '{_describe_payload(info)}'",
                payload=info,
            )
        return info

    def status_bar_height(self) -> float:
        status_bar = self._screen_info().get("statusBarSize") or {}
        return float(status_bar.get("height", 0))

    def device_pixel_ratio(self) -> float:
        return float(self._screen_info().get("scale", 1))

    def window_size(self) -> WindowSize:
        size = self._transport.proxy(AGENT_ENDPOINTS["WINDOW_SIZE"], "GET")
        if not isinstance(size, dict) or "width" not in size or "height" not in size:
            raise UnexpectedResponseError(
                f"Unable to read window size. Agent returned '{_describe_payload(size)}'",
                payload=size,
            )
        return WindowSize(width=size["width"], height=size["height"])
