#!/usr/bin/env python3
"""
Screenshot Acquisition Module

This module decides which capture source produces the screenshot of a device.
The decision is an explicit, ordered capture plan of CaptureStep entries,
evaluated by a single loop: a non-fatal step that fails (or yields nothing)
falls through to the next one, a fatal step ends the call either way.

Plan order:
    live stream        (if active; an empty buffer falls through)
    external tool      (only when explicitly preferred; fatal, nothing follows)
    agent proxy
    simulator API      (simulators only; fatal, nothing follows)
    external tool      (physical devices; best effort)
    agent proxy retry  (physical devices; fatal, bounded fixed-interval retry)

This module is part of the Core Layer and should have no dependencies on
Presentation or Integration layers.

Third-party package documentation:
- Tenacity: https://tenacity.readthedocs.io/

Sample input:
- ScreenshotAcquisition(agent, external_tool, simulator).capture(
      DeviceContext(udid="00008030-001A", device_class="physical", orientation="LANDSCAPE"))

Expected output:
- EncodedImage whose `source` names the capture source that produced it
"""

import time
from typing import Callable, Dict, List, Optional

from loguru import logger
from tenacity import Retrying, stop_after_attempt, wait_fixed

from device_tools.screenshot.core.agent_proxy import AgentProxyCapture
from device_tools.screenshot.core.config import CaptureConfig
from device_tools.screenshot.core.errors import ScreenshotError
from device_tools.screenshot.core.external_tool import ExternalCaptureTool
from device_tools.screenshot.core.image_processing import rotate90
from device_tools.screenshot.core.simulator import SimulatorCapture
from device_tools.screenshot.core.stream import StreamCapture
from device_tools.screenshot.core.types import (
    CaptureSource,
    CaptureStep,
    DeviceContext,
    EncodedImage,
    Orientation,
)


class ScreenshotAcquisition:
    """Source selection and fallback across all capture mechanisms"""

    def __init__(
        self,
        agent: AgentProxyCapture,
        external_tool: ExternalCaptureTool,
        simulator: Optional[SimulatorCapture] = None,
        stream: Optional[StreamCapture] = None,
        config: Optional[CaptureConfig] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self._agent = agent
        self._external_tool = external_tool
        self._simulator = simulator
        self._stream = stream or StreamCapture()
        self._config = config or CaptureConfig()
        self._sleep = sleep
        self._handlers: Dict[CaptureSource, Callable[[DeviceContext], Optional[EncodedImage]]] = {
            CaptureSource.LIVE_STREAM: self._from_stream,
            CaptureSource.EXTERNAL_TOOL: self._from_external_tool,
            CaptureSource.AGENT_PROXY: self._from_agent,
            CaptureSource.SIMULATOR_API: self._from_simulator,
        }

    def build_capture_plan(
        self,
        context: DeviceContext,
        stream_active: Optional[bool] = None
    ) -> List[CaptureStep]:
        """
        Build the ordered list of capture steps for one call.

        Args:
            context: Device being captured
            stream_active: Whether a live stream is running; queried when omitted

        Returns:
            List[CaptureStep]: Steps in the order they will be attempted
        """
        if stream_active is None:
            stream_active = self._stream.is_active()

        plan = []
        if stream_active:
            plan.append(CaptureStep(source=CaptureSource.LIVE_STREAM, fatal=False))

        if context.preferred_source == CaptureSource.EXTERNAL_TOOL:
            plan.append(CaptureStep(source=CaptureSource.EXTERNAL_TOOL, fatal=True))
            return plan

        plan.append(CaptureStep(source=CaptureSource.AGENT_PROXY, fatal=False))

        if context.is_simulator:
            plan.append(CaptureStep(source=CaptureSource.SIMULATOR_API, fatal=True))
            return plan

        plan.append(CaptureStep(source=CaptureSource.EXTERNAL_TOOL, fatal=False))
        plan.append(CaptureStep(
            source=CaptureSource.AGENT_PROXY,
            fatal=True,
            attempts=self._config.retry_attempts,
            interval=self._config.retry_interval,
        ))
        return plan

    def capture(self, context: DeviceContext) -> EncodedImage:
        """
        Take a screenshot of the device using the first source that works.

        Args:
            context: Device being captured

        Returns:
            EncodedImage: The screenshot, tagged with the source that produced it

        Raises:
            ScreenshotError: The error of the fatal step that ended the call
        """
        stream_active = self._stream.is_active()
        if stream_active and context.preferred_source == CaptureSource.EXTERNAL_TOOL:
            logger.warning(
                "You've specified screenshot retrieval via both a live stream and "
                "a real device screenshot utility. Please use one or the other! "
                "Choosing the live stream"
            )

        plan = self.build_capture_plan(context, stream_active)
        last_error: Optional[Exception] = None
        for step in plan:
            try:
                image = self._run_step(step, context)
            except Exception as e:
                if step.fatal:
                    raise
                logger.warning(f"Error getting screenshot via {step.source.value}: {str(e)}")
                last_error = e
                continue

            if image is not None:
                logger.debug(f"Screenshot of '{context.udid}' taken via {step.source.value}")
                return image

            if step.source == CaptureSource.LIVE_STREAM:
                logger.warning(
                    "Tried to get screenshot from the active live stream, but there "
                    "was no data yet. Falling back to regular screenshot methods."
                )

        raise ScreenshotError(
            f"No capture source produced a screenshot of the device '{context.udid}'"
        ) from last_error

    def _run_step(self, step: CaptureStep, context: DeviceContext) -> Optional[EncodedImage]:
        handler = self._handlers[step.source]
        if step.attempts <= 1:
            return handler(context)

        retrying = Retrying(
            stop=stop_after_attempt(step.attempts),
            wait=wait_fixed(step.interval),
            sleep=self._sleep,
            reraise=True,
            before_sleep=lambda state: logger.info(
                f"Retrying screenshot via {step.source.value} "
                f"(attempt {state.attempt_number} of {step.attempts} failed: {state.outcome.exception()})"
            ),
        )
        return retrying(handler, context)

    def _from_stream(self, context: DeviceContext) -> Optional[EncodedImage]:
        return self._stream.last_frame()

    def _from_agent(self, context: DeviceContext) -> EncodedImage:
        return self._agent.capture()

    def _from_simulator(self, context: DeviceContext) -> EncodedImage:
        if self._simulator is None:
            raise ScreenshotError(
                f"Device '{context.udid}' is a simulator but no simulator capture is configured"
            )
        return self._simulator.capture(context.udid)

    def _from_external_tool(self, context: DeviceContext) -> EncodedImage:
        self._external_tool.is_available()
        orientation = context.orientation or self._agent.orientation()
        image = self._external_tool.capture(context.udid)
        if orientation == Orientation.LANDSCAPE:
            image = rotate90(image)
        return image
