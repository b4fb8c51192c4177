"""
Scanline flood fill for raw RGBA pixel buffers.

The engine clears (sets all four channels to 0) every pixel connected to a
seed pixel whose color lies within a relative tolerance of the seed's
original color. It works directly on a flat, row-major RGBA buffer so it can
be driven by Pillow byte buffers, numpy arrays or plain lists alike.

Classes:
    InvalidSeedError: Raised when the seed lies outside the buffer
    ToleranceBounds: Per-channel acceptance window derived from the seed color

Functions:
    pixel_index: Byte offset of a pixel inside a buffer
    compute_tolerance_bounds: Build the acceptance window for a seed color
    matches_tolerance: Test one pixel against an acceptance window
    flood_fill: Clear the region connected to a seed pixel, in place
"""

from dataclasses import dataclass
from typing import List, MutableSequence, Sequence, Tuple
import logging

from TL_Libs.constants import CHANNELS_PER_PIXEL, DEFAULT_TOLERANCE

logger = logging.getLogger(__name__)

PixelBuffer = MutableSequence[int]


class InvalidSeedError(ValueError):
    """Seed coordinate outside [0, width) x [0, height)."""


@dataclass(frozen=True)
class ToleranceBounds:
    """Inclusive RGB acceptance window around a seed color."""
    r_min: float
    r_max: float
    g_min: float
    g_max: float
    b_min: float
    b_max: float


def pixel_index(x: int, y: int, width: int) -> int:
    """Return the offset of the red channel of pixel (x, y)."""
    return (y * width + x) * CHANNELS_PER_PIXEL


def compute_tolerance_bounds(color: Sequence[int], tolerance: float) -> ToleranceBounds:
    """
    Derive the acceptance window for a seed color.

    Each channel may deviate by ``channel * tolerance`` in either direction,
    so darker channels get a narrower window than brighter ones.

    Args:
        color: Sequence whose first three items are the R, G, B values (0-255)
        tolerance: Relative deviation allowed per channel (>= 0)

    Returns:
        ToleranceBounds for the color
    """
    r, g, b = int(color[0]), int(color[1]), int(color[2])
    return ToleranceBounds(
        r_min=r * (1 - tolerance),
        r_max=r * (1 + tolerance),
        g_min=g * (1 - tolerance),
        g_max=g * (1 + tolerance),
        b_min=b * (1 - tolerance),
        b_max=b * (1 + tolerance),
    )


def matches_tolerance(buffer: Sequence[int], index: int, bounds: ToleranceBounds) -> bool:
    """Return True if the pixel at ``index`` falls inside ``bounds`` (alpha ignored)."""
    r = buffer[index]
    g = buffer[index + 1]
    b = buffer[index + 2]
    return (
        bounds.r_min <= r <= bounds.r_max
        and bounds.g_min <= g <= bounds.g_max
        and bounds.b_min <= b <= bounds.b_max
    )


def _validate_fill_arguments(
    buffer: Sequence[int],
    width: int,
    height: int,
    seed_x: int,
    seed_y: int,
    tolerance: float,
) -> None:
    if width <= 0 or height <= 0:
        raise ValueError(f"Buffer dimensions must be positive, got {width}x{height}")

    expected_length = width * height * CHANNELS_PER_PIXEL
    if len(buffer) != expected_length:
        raise ValueError(
            f"Buffer length {len(buffer)} does not match {width}x{height} RGBA "
            f"(expected {expected_length})"
        )

    if not (0 <= seed_x < width and 0 <= seed_y < height):
        raise InvalidSeedError(
            f"Seed ({seed_x}, {seed_y}) is outside the {width}x{height} buffer"
        )

    if tolerance < 0:
        raise ValueError(f"tolerance must be >= 0, got {tolerance}")


def flood_fill(
    buffer: PixelBuffer,
    width: int,
    height: int,
    seed_x: int,
    seed_y: int,
    tolerance: float = DEFAULT_TOLERANCE,
) -> int:
    """
    Clear the region connected to a seed pixel, in place.

    Uses a stack-based scanline fill. Each popped coordinate is moved up to
    the top of its matching column run, then the run is walked downward,
    clearing pixels and pushing the left and right neighbours that start a
    new run. ``reach_left``/``reach_right`` suppress duplicate pushes along a
    contiguous neighbour run. When the right neighbour does not match but the
    pixel above it does, that diagonal pixel is pushed so thin diagonal
    connections are not lost.

    All comparisons use the bounds of the seed's original color. Pixels this
    call has already cleared never match again, so the fill terminates even
    when (0, 0, 0) lies inside the bounds (near-black seeds, tolerance >= 1).

    Args:
        buffer: Flat row-major RGBA buffer (bytearray, 1-D numpy uint8 array,
                or list of ints) of length width * height * 4
        width: Buffer width in pixels
        height: Buffer height in pixels
        seed_x: Seed column, 0 <= seed_x < width
        seed_y: Seed row, 0 <= seed_y < height
        tolerance: Relative per-channel deviation from the seed color (>= 0)

    Returns:
        Number of pixels cleared

    Raises:
        InvalidSeedError: If the seed lies outside the buffer
        ValueError: If dimensions, buffer length or tolerance are invalid
    """
    _validate_fill_arguments(buffer, width, height, seed_x, seed_y, tolerance)

    row_stride = width * CHANNELS_PER_PIXEL
    seed_index = pixel_index(seed_x, seed_y, width)
    bounds = compute_tolerance_bounds(
        (buffer[seed_index], buffer[seed_index + 1], buffer[seed_index + 2]),
        tolerance,
    )

    filled = bytearray(width * height)

    def can_fill(index: int) -> bool:
        return not filled[index // CHANNELS_PER_PIXEL] and matches_tolerance(buffer, index, bounds)

    cleared = 0
    stack: List[Tuple[int, int]] = [(seed_x, seed_y)]

    while stack:
        x, y = stack.pop()
        index = pixel_index(x, y, width)

        while y >= 0 and can_fill(index):
            index -= row_stride
            y -= 1
        # index now sits on the top matching row, y one row above it
        index += row_stride

        reach_left = False
        reach_right = False

        while y < height - 1 and can_fill(index):
            y += 1

            buffer[index] = buffer[index + 1] = buffer[index + 2] = buffer[index + 3] = 0
            filled[index // CHANNELS_PER_PIXEL] = 1
            cleared += 1

            if x > 0:
                if can_fill(index - CHANNELS_PER_PIXEL):
                    if not reach_left:
                        stack.append((x - 1, y))
                        reach_left = True
                elif reach_left:
                    reach_left = False

            if x < width - 1:
                if can_fill(index + CHANNELS_PER_PIXEL):
                    if not reach_right:
                        stack.append((x + 1, y))
                        reach_right = True
                elif y > 0 and can_fill(index + CHANNELS_PER_PIXEL - row_stride):
                    if not reach_left:
                        stack.append((x + 1, y - 1))
                        reach_left = True
                elif reach_right:
                    reach_right = False

            index += row_stride

    logger.debug(
        f"Flood fill from ({seed_x}, {seed_y}) with tolerance {tolerance} "
        f"cleared {cleared} of {width * height} pixels"
    )
    return cleared
