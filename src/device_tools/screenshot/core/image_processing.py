#!/usr/bin/env python3
"""
Image Processing for Device Screenshot Module

This module provides the pure transforms applied to captured screenshots:
rotating landscape captures upright and cropping to a region. Every transform
takes an EncodedImage, works on the decoded raster and re-encodes in the
input's encoding.

This module is part of the Core Layer and should have no dependencies on
Presentation or Integration layers.

Sample input:
- EncodedImage of a 1600x800 PNG, rotate90()
- EncodedImage of an 800x1600 PNG, crop(Rectangle(left=0, top=40, width=800, height=1560))

Expected output:
- EncodedImage of an 800x1600 PNG
- EncodedImage of an 800x1560 PNG
"""

import io
from typing import Tuple

from PIL import Image, UnidentifiedImageError
from loguru import logger

from device_tools.screenshot.core.constants import CAPTURE_SETTINGS
from device_tools.screenshot.core.errors import ImageProcessingError, InvalidRegionError
from device_tools.screenshot.core.types import EncodedImage, Rectangle


def decode_image(data: bytes) -> Image.Image:
    """
    Decode an encoded image buffer into a PIL image.

    Args:
        data: Encoded image bytes

    Returns:
        PIL.Image: Fully loaded image

    Raises:
        ImageProcessingError: If the buffer is not a decodable image
    """
    try:
        img = Image.open(io.BytesIO(data))
        img.load()
        return img
    except (UnidentifiedImageError, OSError, ValueError) as e:
        raise ImageProcessingError(f"Cannot decode image buffer: {str(e)}") from e


def encode_image(img: Image.Image, encoding: str = CAPTURE_SETTINGS["IMAGE_ENCODING"]) -> bytes:
    """
    Encode a PIL image.

    Args:
        img: PIL Image object
        encoding: Target encoding, e.g. "png"

    Returns:
        bytes: Encoded image bytes
    """
    buffer = io.BytesIO()
    try:
        img.save(buffer, format=encoding.upper())
    except (OSError, ValueError, KeyError) as e:
        raise ImageProcessingError(f"Cannot encode image as {encoding}: {str(e)}") from e
    return buffer.getvalue()


def image_size(image: EncodedImage) -> Tuple[int, int]:
    """Return (width, height) of an encoded image"""
    return decode_image(image.data).size


def ensure_decodable(image: EncodedImage) -> EncodedImage:
    """
    Check that an encoded image holds a decodable raster.

    Returns:
        EncodedImage: The image, unchanged

    Raises:
        ImageProcessingError: If the bytes are not an image
    """
    decode_image(image.data)
    return image


def rotate90(image: EncodedImage) -> EncodedImage:
    """
    Rotate an image 90 degrees clockwise.

    Args:
        image: Encoded image

    Returns:
        EncodedImage: Rotated image in the same encoding

    Raises:
        ImageProcessingError: If the input is not a decodable image
    """
    img = decode_image(image.data)
    rotated = img.transpose(Image.Transpose.ROTATE_270)
    logger.debug(f"Rotated image from {img.size[0]}x{img.size[1]} to {rotated.size[0]}x{rotated.size[1]}")
    return image.model_copy(update={"data": encode_image(rotated, image.encoding)})


def validate_region(rect: Rectangle, size: Tuple[int, int]) -> None:
    """
    Check that a rectangle lies inside an image of the given size.

    Raises:
        InvalidRegionError: If any edge falls outside the image
    """
    width, height = size
    if (
        rect.left < 0
        or rect.top < 0
        or rect.width <= 0
        or rect.height <= 0
        or rect.left + rect.width > width
        or rect.top + rect.height > height
    ):
        raise InvalidRegionError(rect, size)


def crop(image: EncodedImage, rect: Rectangle) -> EncodedImage:
    """
    Cut a sub-image out of an encoded image.

    Args:
        image: Encoded image
        rect: Region in pixels of the source image

    Returns:
        EncodedImage: The cropped region in the same encoding

    Raises:
        InvalidRegionError: If the rectangle lies outside the image bounds
        ImageProcessingError: If the input is not a decodable image
    """
    img = decode_image(image.data)
    validate_region(rect, img.size)
    logger.debug(f"Cropping {img.size[0]}x{img.size[1]} image to {rect}")
    cropped = img.crop(rect.as_box())
    return image.model_copy(update={"data": encode_image(cropped, image.encoding)})


if __name__ == "__main__":
    """Validate image processing functions with real test data"""
    import sys

    all_validation_failures = []
    total_tests = 0

    source = EncodedImage(data=encode_image(Image.new("RGB", (1600, 800), color="red")))

    # Test 1: Rotation swaps dimensions
    total_tests += 1
    rotated = rotate90(source)
    if image_size(rotated) != (800, 1600):
        all_validation_failures.append(f"Rotate test: Expected (800, 1600), got {image_size(rotated)}")

    # Test 2: Crop inside bounds
    total_tests += 1
    cropped = crop(rotated, Rectangle(left=0, top=40, width=800, height=1560))
    if image_size(cropped) != (800, 1560):
        all_validation_failures.append(f"Crop test: Expected (800, 1560), got {image_size(cropped)}")

    # Test 3: Crop outside bounds
    total_tests += 1
    try:
        crop(rotated, Rectangle(left=0, top=40, width=800, height=1600))
        all_validation_failures.append("Out of bounds crop test: Expected InvalidRegionError")
    except InvalidRegionError:
        pass

    # Test 4: Undecodable input
    total_tests += 1
    try:
        rotate90(EncodedImage(data=b"not an image"))
        all_validation_failures.append("Undecodable test: Expected ImageProcessingError")
    except ImageProcessingError:
        pass

    if all_validation_failures:
        print(f"❌ VALIDATION FAILED - {len(all_validation_failures)} of {total_tests} tests failed:")
        for failure in all_validation_failures:
            print(f"  - {failure}")
        sys.exit(1)
    else:
        print(f"✅ VALIDATION PASSED - All {total_tests} tests produced expected results")
        print("Image processing functions are validated and ready for use")
        sys.exit(0)
