#!/usr/bin/env python3
"""
Unit tests for core/acquisition.py
"""

import io
import os
import sys
import unittest
from unittest.mock import MagicMock

from loguru import logger
from PIL import Image

# Add src directory to path to import module
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../../..')))

from device_tools.screenshot.core.acquisition import ScreenshotAcquisition
from device_tools.screenshot.core.agent_proxy import AgentProxyCapture
from device_tools.screenshot.core.config import CaptureConfig
from device_tools.screenshot.core.errors import (
    AgentProxyError,
    CaptureToolError,
    ToolNotFoundError,
    UnexpectedResponseError,
)
from device_tools.screenshot.core.external_tool import ExternalCaptureTool
from device_tools.screenshot.core.image_processing import image_size
from device_tools.screenshot.core.simulator import SimulatorCapture
from device_tools.screenshot.core.stream import StreamCapture
from device_tools.screenshot.core.types import (
    CaptureSource,
    CaptureStep,
    DeviceClass,
    DeviceContext,
    EncodedImage,
    Orientation,
)


def png_image(width, height, source=None):
    buffer = io.BytesIO()
    Image.new("RGB", (width, height), color="purple").save(buffer, format="PNG")
    return EncodedImage(data=buffer.getvalue(), source=source)


AGENT_IMAGE = png_image(10, 20, CaptureSource.AGENT_PROXY)
STREAM_IMAGE = png_image(11, 21, CaptureSource.LIVE_STREAM)
SIMULATOR_IMAGE = png_image(12, 22, CaptureSource.SIMULATOR_API)
TOOL_IMAGE = png_image(1600, 800, CaptureSource.EXTERNAL_TOOL)


class AcquisitionTestCase(unittest.TestCase):
    """Builds an orchestrator over mocked capture sources"""

    def setUp(self):
        self.agent = MagicMock(spec=AgentProxyCapture)
        self.tool = MagicMock(spec=ExternalCaptureTool)
        self.simulator = MagicMock(spec=SimulatorCapture)
        self.stream = MagicMock(spec=StreamCapture)
        self.stream.is_active.return_value = False
        self.stream.last_frame.return_value = None
        self.tool.capture.return_value = TOOL_IMAGE
        self.sleeps = []
        self.acquisition = ScreenshotAcquisition(
            agent=self.agent,
            external_tool=self.tool,
            simulator=self.simulator,
            stream=self.stream,
            config=CaptureConfig(retry_attempts=2, retry_interval=1.0),
            sleep=self.sleeps.append,
        )

        self.warnings = []
        self._handler = logger.add(lambda message: self.warnings.append(str(message)), level="WARNING")

    def tearDown(self):
        logger.remove(self._handler)

    def context(self, device_class=DeviceClass.PHYSICAL, orientation=Orientation.PORTRAIT, preferred=None):
        return DeviceContext(
            udid="00008030-001A",
            device_class=device_class,
            orientation=orientation,
            preferred_source=preferred,
        )


class TestCapturePlan(AcquisitionTestCase):
    """Test cases for build_capture_plan"""

    def test_physical_plan(self):
        plan = self.acquisition.build_capture_plan(self.context(), stream_active=False)
        self.assertEqual(plan, [
            CaptureStep(source=CaptureSource.AGENT_PROXY, fatal=False),
            CaptureStep(source=CaptureSource.EXTERNAL_TOOL, fatal=False),
            CaptureStep(source=CaptureSource.AGENT_PROXY, fatal=True, attempts=2, interval=1.0),
        ])

    def test_simulator_plan(self):
        plan = self.acquisition.build_capture_plan(self.context(DeviceClass.SIMULATOR), stream_active=False)
        self.assertEqual([(s.source, s.fatal) for s in plan], [
            (CaptureSource.AGENT_PROXY, False),
            (CaptureSource.SIMULATOR_API, True),
        ])

    def test_explicit_tool_plan(self):
        context = self.context(preferred=CaptureSource.EXTERNAL_TOOL)
        plan = self.acquisition.build_capture_plan(context, stream_active=False)
        self.assertEqual(plan, [CaptureStep(source=CaptureSource.EXTERNAL_TOOL, fatal=True)])

    def test_stream_comes_first(self):
        context = self.context(preferred=CaptureSource.EXTERNAL_TOOL)
        plan = self.acquisition.build_capture_plan(context, stream_active=True)
        self.assertEqual([s.source for s in plan], [CaptureSource.LIVE_STREAM, CaptureSource.EXTERNAL_TOOL])

    def test_stream_activity_is_queried_when_omitted(self):
        self.stream.is_active.return_value = True
        plan = self.acquisition.build_capture_plan(self.context())
        self.assertEqual(plan[0].source, CaptureSource.LIVE_STREAM)


class TestLiveStream(AcquisitionTestCase):
    """Test cases for the stream short-circuit"""

    def test_stream_frame_is_returned_without_other_sources(self):
        self.stream.is_active.return_value = True
        self.stream.last_frame.return_value = STREAM_IMAGE

        image = self.acquisition.capture(self.context())

        self.assertIs(image, STREAM_IMAGE)
        self.agent.capture.assert_not_called()
        self.tool.capture.assert_not_called()
        self.tool.is_available.assert_not_called()
        self.simulator.capture.assert_not_called()

    def test_empty_stream_falls_through(self):
        self.stream.is_active.return_value = True
        self.agent.capture.return_value = AGENT_IMAGE

        image = self.acquisition.capture(self.context())

        self.assertIs(image, AGENT_IMAGE)
        self.stream.last_frame.assert_called_once_with()
        self.assertTrue(any("no data yet" in w for w in self.warnings))

    def test_empty_stream_runs_full_fallback_sequence(self):
        self.stream.is_active.return_value = True
        self.agent.capture.side_effect = [AgentProxyError("/screenshot", "down"), AGENT_IMAGE]
        self.tool.capture.side_effect = CaptureToolError("00008030-001A", "lockdownd")

        image = self.acquisition.capture(self.context())

        self.assertIs(image, AGENT_IMAGE)
        self.assertEqual(self.agent.capture.call_count, 2)
        self.tool.capture.assert_called_once_with("00008030-001A")

    def test_inactive_stream_is_not_read(self):
        self.agent.capture.return_value = AGENT_IMAGE
        self.acquisition.capture(self.context())
        self.stream.last_frame.assert_not_called()

    def test_conflicting_configuration_prefers_stream(self):
        self.stream.is_active.return_value = True
        self.stream.last_frame.return_value = STREAM_IMAGE

        image = self.acquisition.capture(self.context(preferred=CaptureSource.EXTERNAL_TOOL))

        self.assertIs(image, STREAM_IMAGE)
        self.tool.capture.assert_not_called()
        self.assertTrue(any("Choosing the live stream" in w for w in self.warnings))


class TestExplicitExternalTool(AcquisitionTestCase):
    """Test cases for the explicit external tool preference"""

    def test_landscape_capture_is_rotated_once(self):
        context = self.context(orientation=Orientation.LANDSCAPE, preferred=CaptureSource.EXTERNAL_TOOL)

        image = self.acquisition.capture(context)

        self.assertEqual(image_size(TOOL_IMAGE), (1600, 800))
        self.assertEqual(image_size(image), (800, 1600))
        self.assertEqual(image.source, CaptureSource.EXTERNAL_TOOL)
        self.tool.is_available.assert_called_once_with()
        self.agent.capture.assert_not_called()

    def test_portrait_capture_is_untouched(self):
        context = self.context(orientation=Orientation.PORTRAIT, preferred=CaptureSource.EXTERNAL_TOOL)

        image = self.acquisition.capture(context)

        self.assertEqual(image.data, TOOL_IMAGE.data)

    def test_orientation_is_asked_when_unknown(self):
        self.agent.orientation.return_value = Orientation.LANDSCAPE
        context = self.context(orientation=None, preferred=CaptureSource.EXTERNAL_TOOL)

        image = self.acquisition.capture(context)

        self.agent.orientation.assert_called_once_with()
        self.assertEqual(image_size(image), (800, 1600))

    def test_missing_tool_is_fatal(self):
        self.tool.is_available.side_effect = ToolNotFoundError("idevicescreenshot", "brew install")

        with self.assertRaises(ToolNotFoundError):
            self.acquisition.capture(self.context(preferred=CaptureSource.EXTERNAL_TOOL))

        self.tool.capture.assert_not_called()
        self.agent.capture.assert_not_called()

    def test_capture_failure_is_fatal(self):
        self.tool.capture.side_effect = CaptureToolError("00008030-001A", "lockdownd")

        with self.assertRaises(CaptureToolError):
            self.acquisition.capture(self.context(preferred=CaptureSource.EXTERNAL_TOOL))

        self.agent.capture.assert_not_called()
        self.assertEqual(self.sleeps, [])


class TestAgentAndSimulator(AcquisitionTestCase):
    """Test cases for the agent path and the simulator fallback"""

    def test_agent_success_returns_immediately(self):
        self.agent.capture.return_value = AGENT_IMAGE

        image = self.acquisition.capture(self.context(DeviceClass.SIMULATOR))

        self.assertIs(image, AGENT_IMAGE)
        self.simulator.capture.assert_not_called()
        self.tool.capture.assert_not_called()

    def test_simulator_fallback(self):
        self.agent.capture.side_effect = UnexpectedResponseError("bad payload")
        self.simulator.capture.return_value = SIMULATOR_IMAGE

        image = self.acquisition.capture(self.context(DeviceClass.SIMULATOR))

        self.assertIs(image, SIMULATOR_IMAGE)
        self.simulator.capture.assert_called_once_with("00008030-001A")
        self.assertTrue(any("bad payload" in w for w in self.warnings))

    def test_simulator_failure_is_fatal_without_retry(self):
        self.agent.capture.side_effect = AgentProxyError("/screenshot", "down")
        failure = RuntimeError("simctl io screenshot failed")
        self.simulator.capture.side_effect = failure

        with self.assertRaises(RuntimeError) as raised:
            self.acquisition.capture(self.context(DeviceClass.SIMULATOR))

        self.assertIs(raised.exception, failure)
        self.assertEqual(self.agent.capture.call_count, 1)
        self.tool.is_available.assert_not_called()
        self.tool.capture.assert_not_called()
        self.assertEqual(self.sleeps, [])

    def test_simulator_without_capture_configured(self):
        acquisition = ScreenshotAcquisition(agent=self.agent, external_tool=self.tool, sleep=self.sleeps.append)
        self.agent.capture.side_effect = AgentProxyError("/screenshot", "down")

        with self.assertRaisesRegex(Exception, "simulator"):
            acquisition.capture(self.context(DeviceClass.SIMULATOR))


class TestPhysicalFallback(AcquisitionTestCase):
    """Test cases for the physical device fallback and final retry"""

    def test_external_tool_fallback(self):
        self.agent.capture.side_effect = AgentProxyError("/screenshot", "down")

        image = self.acquisition.capture(self.context(orientation=Orientation.LANDSCAPE))

        self.assertEqual(image_size(image), (800, 1600))
        self.assertEqual(self.agent.capture.call_count, 1)
        self.simulator.capture.assert_not_called()

    def test_tool_failure_is_followed_by_two_agent_retries(self):
        errors = [AgentProxyError("/screenshot", f"down {i}") for i in range(3)]
        self.agent.capture.side_effect = errors
        self.tool.capture.side_effect = CaptureToolError("00008030-001A", "lockdownd")

        with self.assertRaises(AgentProxyError) as raised:
            self.acquisition.capture(self.context())

        self.assertIs(raised.exception, errors[-1])
        self.assertEqual(self.agent.capture.call_count, 3)
        self.assertEqual(self.sleeps, [1.0])

    def test_missing_tool_is_recovered(self):
        self.agent.capture.side_effect = [AgentProxyError("/screenshot", "down"), AGENT_IMAGE]
        self.tool.is_available.side_effect = ToolNotFoundError("idevicescreenshot", "brew install")

        image = self.acquisition.capture(self.context())

        self.assertIs(image, AGENT_IMAGE)
        self.tool.capture.assert_not_called()
        self.assertEqual(self.sleeps, [])

    def test_retry_succeeds_on_last_attempt(self):
        self.agent.capture.side_effect = [
            AgentProxyError("/screenshot", "down"),
            AgentProxyError("/screenshot", "still down"),
            AGENT_IMAGE,
        ]
        self.tool.capture.side_effect = CaptureToolError("00008030-001A", "lockdownd")

        image = self.acquisition.capture(self.context())

        self.assertIs(image, AGENT_IMAGE)
        self.assertEqual(self.sleeps, [1.0])

    def test_retry_policy_follows_config(self):
        acquisition = ScreenshotAcquisition(
            agent=self.agent,
            external_tool=self.tool,
            config=CaptureConfig(retry_attempts=4, retry_interval=0.25),
            sleep=self.sleeps.append,
        )
        self.agent.capture.side_effect = AgentProxyError("/screenshot", "down")
        self.tool.capture.side_effect = CaptureToolError("00008030-001A", "lockdownd")

        with self.assertRaises(AgentProxyError):
            acquisition.capture(self.context())

        self.assertEqual(self.agent.capture.call_count, 5)
        self.assertEqual(self.sleeps, [0.25, 0.25, 0.25])


class TestPayloadsThatAreNotImages(AcquisitionTestCase):
    """Test cases for sources answering with data that does not decode"""

    def test_agent_junk_falls_through_to_external_tool(self):
        transport = MagicMock()
        transport.proxy.return_value = "Zm9v"
        acquisition = ScreenshotAcquisition(
            agent=AgentProxyCapture(transport),
            external_tool=self.tool,
            stream=self.stream,
            sleep=self.sleeps.append,
        )

        image = acquisition.capture(self.context())

        self.assertEqual(image.source, CaptureSource.EXTERNAL_TOOL)
        self.assertEqual(image_size(image), (1600, 800))
        self.tool.capture.assert_called_once_with("00008030-001A")

    def test_stream_junk_falls_through_to_agent(self):
        live = MagicMock()
        live.is_active.return_value = True
        live.last_chunk_base64.return_value = "Zm9v"
        acquisition = ScreenshotAcquisition(
            agent=self.agent,
            external_tool=self.tool,
            stream=StreamCapture(live),
            sleep=self.sleeps.append,
        )
        self.agent.capture.return_value = AGENT_IMAGE

        image = acquisition.capture(self.context())

        self.assertIs(image, AGENT_IMAGE)
        self.assertTrue(any("live_stream" in w for w in self.warnings))


if __name__ == "__main__":
    unittest.main()
