"""
Pytest configuration and shared fixtures for Translucify tests.

This module provides shared test fixtures used across multiple test modules.
"""

import pytest
from PIL import Image


GRAY = (200, 200, 200, 255)
BLUE = (0, 0, 255, 255)
RED = (255, 0, 0, 255)
WHITE = (255, 255, 255, 255)
CLEAR = (0, 0, 0, 0)


def build_buffer(width, height, color_at):
    """Build a flat RGBA bytearray where color_at(x, y) gives each pixel."""
    buffer = bytearray()
    for y in range(height):
        for x in range(width):
            buffer.extend(color_at(x, y))
    return buffer


def pixel_at(buffer, width, x, y):
    """Read pixel (x, y) of a flat RGBA buffer as a tuple."""
    index = (y * width + x) * 4
    return tuple(buffer[index:index + 4])


@pytest.fixture
def framed_image():
    """
    A 6x6 white image with a 2x2 black square in the middle.

    Returns:
        RGBA PIL Image
    """
    image = Image.new("RGBA", (6, 6), WHITE)
    pixels = image.load()
    for y in (2, 3):
        for x in (2, 3):
            pixels[x, y] = (0, 0, 0, 255)
    return image


@pytest.fixture
def image_files(tmp_path, framed_image):
    """
    Write two small PNG files with white backgrounds.

    Returns:
        List of Paths [logo.png, badge.png]
    """
    logo = tmp_path / "logo.png"
    badge = tmp_path / "badge.png"
    framed_image.save(logo)
    framed_image.convert("RGB").save(badge)
    return [logo, badge]
