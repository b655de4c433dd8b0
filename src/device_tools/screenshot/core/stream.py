"""
Live stream capture.

Reads the most recent frame buffered by an already running video stream.
The stream itself is owned elsewhere; this module never blocks on it.
"""

from typing import Optional

from loguru import logger

from device_tools.screenshot.core.image_processing import ensure_decodable
from device_tools.screenshot.core.types import CaptureSource, EncodedImage, LiveStream


class StreamCapture:
    """Latest frame of a live stream, if one is configured and running"""

    def __init__(self, stream: Optional[LiveStream] = None):
        self._stream = stream

    def is_active(self) -> bool:
        return self._stream is not None and bool(self._stream.is_active())

    def last_frame(self) -> Optional[EncodedImage]:
        """
        Return the most recent buffered frame.

        Returns:
            EncodedImage, or None when no frame has arrived yet

        Raises:
            ImageProcessingError: If the buffered frame is not an image
        """
        if self._stream is None:
            return None
        data = self._stream.last_chunk_base64()
        if not data:
            return None
        logger.debug("Using the latest frame of the live stream")
        return ensure_decodable(EncodedImage.from_base64(data, source=CaptureSource.LIVE_STREAM))
