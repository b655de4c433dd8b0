#!/usr/bin/env python3
"""
Unit tests for core/image_processing.py
"""

import io
import os
import sys
import unittest

from PIL import Image

# Add src directory to path to import module
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../../..')))

from device_tools.screenshot.core.constants import CAPTURE_SETTINGS
from device_tools.screenshot.core.errors import ImageProcessingError, InvalidRegionError
from device_tools.screenshot.core.image_processing import (
    crop,
    decode_image,
    encode_image,
    ensure_decodable,
    image_size,
    rotate90,
)
from device_tools.screenshot.core.types import CaptureSource, EncodedImage, Rectangle


def png_image(width, height, color="red", source=None):
    buffer = io.BytesIO()
    Image.new("RGB", (width, height), color=color).save(buffer, format="PNG")
    return EncodedImage(data=buffer.getvalue(), source=source)


class TestEncodedImage(unittest.TestCase):
    """Test cases for the default image encoding"""

    def test_default_encoding(self):
        image = EncodedImage(data=b"\x89PNG")
        self.assertEqual(image.encoding, CAPTURE_SETTINGS["IMAGE_ENCODING"])
        self.assertEqual(image.mime_type, "image/png")

    def test_encode_image_uses_default_encoding(self):
        data = encode_image(Image.new("RGB", (3, 3)))
        self.assertEqual(decode_image(data).format, CAPTURE_SETTINGS["IMAGE_ENCODING"].upper())

    def test_ensure_decodable(self):
        image = png_image(5, 5)
        self.assertIs(ensure_decodable(image), image)
        with self.assertRaises(ImageProcessingError):
            ensure_decodable(EncodedImage(data=b"foo"))


class TestRotate(unittest.TestCase):
    """Test cases for rotate90"""

    def test_rotate_swaps_dimensions(self):
        rotated = rotate90(png_image(1600, 800))
        self.assertEqual(image_size(rotated), (800, 1600))

    def test_rotate_is_clockwise(self):
        # Left column red, rest blue: clockwise rotation moves it to the top row
        img = Image.new("RGB", (4, 2), color="blue")
        img.putpixel((0, 0), (255, 0, 0))
        img.putpixel((0, 1), (255, 0, 0))
        rotated = decode_image(rotate90(EncodedImage(data=encode_image(img))).data)

        self.assertEqual(rotated.size, (2, 4))
        self.assertEqual(rotated.convert("RGB").getpixel((0, 0)), (255, 0, 0))
        self.assertEqual(rotated.convert("RGB").getpixel((1, 0)), (255, 0, 0))
        self.assertEqual(rotated.convert("RGB").getpixel((0, 3)), (0, 0, 255))

    def test_rotate_preserves_encoding_and_source(self):
        rotated = rotate90(png_image(10, 20, source=CaptureSource.EXTERNAL_TOOL))
        self.assertEqual(rotated.encoding, "png")
        self.assertEqual(rotated.source, CaptureSource.EXTERNAL_TOOL)
        self.assertEqual(decode_image(rotated.data).format, "PNG")

    def test_rotate_undecodable_input(self):
        with self.assertRaises(ImageProcessingError):
            rotate90(EncodedImage(data=b"definitely not a png"))


class TestCrop(unittest.TestCase):
    """Test cases for crop"""

    def test_crop_inside_bounds(self):
        cropped = crop(png_image(800, 1600), Rectangle(left=0, top=40, width=800, height=1560))
        self.assertEqual(image_size(cropped), (800, 1560))

    def test_crop_takes_the_requested_region(self):
        img = Image.new("RGB", (10, 10), color="blue")
        for x in range(10):
            img.putpixel((x, 0), (255, 0, 0))
        cropped = decode_image(crop(EncodedImage(data=encode_image(img)), Rectangle(left=0, top=1, width=10, height=9)).data)

        self.assertEqual(cropped.convert("RGB").getpixel((0, 0)), (0, 0, 255))

    def test_crop_full_image(self):
        cropped = crop(png_image(30, 40), Rectangle(left=0, top=0, width=30, height=40))
        self.assertEqual(image_size(cropped), (30, 40))

    def test_crop_height_out_of_bounds(self):
        with self.assertRaises(InvalidRegionError) as raised:
            crop(png_image(800, 1600), Rectangle(left=0, top=40, width=800, height=1600))
        self.assertEqual(raised.exception.image_size, (800, 1600))

    def test_crop_width_out_of_bounds(self):
        with self.assertRaises(InvalidRegionError):
            crop(png_image(800, 1600), Rectangle(left=1, top=0, width=800, height=10))

    def test_crop_negative_origin(self):
        with self.assertRaises(InvalidRegionError):
            crop(png_image(100, 100), Rectangle(left=-1, top=0, width=10, height=10))

    def test_crop_empty_region(self):
        with self.assertRaises(InvalidRegionError):
            crop(png_image(100, 100), Rectangle(left=0, top=0, width=0, height=10))

    def test_crop_undecodable_input(self):
        with self.assertRaises(ImageProcessingError):
            crop(EncodedImage(data=b"\x89PNG broken"), Rectangle(left=0, top=0, width=1, height=1))


if __name__ == "__main__":
    unittest.main()
