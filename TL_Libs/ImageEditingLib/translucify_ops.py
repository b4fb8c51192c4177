"""
Image-level translucify operations for Translucify.

This module wraps the flood fill engine with everything needed to run it on
real images: decoding a Pillow image into a mutable RGBA buffer, committing
the buffer back to an image, the single-image pipeline and the batch entry
point.

Functions:
    ensure_loaded: Force decoding of a lazily opened image
    load_source: Open a path or accept an image, failing with ImageLoadError
    image_to_buffer: Copy an image's pixels into a mutable RGBA buffer
    buffer_to_image: Build an RGBA image from a buffer
    translucify_image: Clear the background region of one image
    translucify_all: Translucify one image or a collection of images
    generate_change_mask: Mask of pixels that differ between two images
    save_images: Batch save ImageRecords as PNG
"""

from pathlib import Path
from typing import Any, Iterable, List, Optional, Sequence, Tuple, Union
import concurrent.futures
import logging

import numpy as np
from PIL import Image

from TL_Libs.constants import (
    DEFAULT_OUTPUT_FORMAT,
    DEFAULT_SEED_X,
    DEFAULT_SEED_Y,
    DEFAULT_TOLERANCE,
    OUTPUT_FILE_PREFIX,
)
from TL_Libs.ImageEditingLib.flood_fill import InvalidSeedError, flood_fill
from TL_Libs.ImageEditingLib.image_models import ImageRecord, Seed

logger = logging.getLogger(__name__)

ImageSource = Union[str, Path, Image.Image]


class ImageLoadError(OSError):
    """Raised when an image cannot be opened or decoded."""


def ensure_loaded(image: Any) -> bool:
    """
    Make sure an image's pixel data is available.

    Pillow opens files lazily; this forces the decode so that truncated or
    corrupt files are detected before any pixel work starts.

    Args:
        image: A PIL Image

    Returns:
        True if the image decoded and has a non-zero area, False otherwise
    """
    if image.width == 0 or image.height == 0:
        return False

    try:
        image.load()
    except (OSError, ValueError) as e:
        logger.warning(f"Image failed to decode: {e}")
        return False

    return True


def load_source(source: ImageSource) -> Any:
    """
    Resolve a path or image into a decoded PIL Image.

    Args:
        source: Path to an image file, or an already opened PIL Image

    Returns:
        The decoded PIL Image

    Raises:
        ImageLoadError: If the file cannot be opened or decoded
        TypeError: If source is neither a path nor a PIL Image
    """
    if isinstance(source, Image.Image):
        if not ensure_loaded(source):
            label = getattr(source, "filename", "") or "<in-memory image>"
            raise ImageLoadError(f"Image could not be decoded: {label}")
        return source

    if not isinstance(source, (str, Path)):
        raise TypeError(f"Expected path or PIL Image, got {type(source)}")

    try:
        handle = Image.open(Path(source))
    except (OSError, ValueError) as e:
        raise ImageLoadError(f"Failed to open image {source}: {e}") from e

    # Detached copy; multi-frame files would otherwise stay open
    with handle:
        if not ensure_loaded(handle):
            raise ImageLoadError(f"Image could not be decoded: {source}")
        return handle.copy()


def image_to_buffer(image: Any) -> Tuple[bytearray, int, int]:
    """
    Copy an image's pixels into a mutable row-major RGBA buffer.

    Args:
        image: PIL Image in any mode (converted to RGBA)

    Returns:
        Tuple of (buffer, width, height)
    """
    rgba = image if image.mode == "RGBA" else image.convert("RGBA")
    return bytearray(rgba.tobytes()), rgba.width, rgba.height


def buffer_to_image(buffer: Sequence[int], width: int, height: int) -> Any:
    """Build a new RGBA PIL Image from a row-major RGBA buffer."""
    return Image.frombytes("RGBA", (width, height), bytes(buffer))


def translucify_image(
    image: Any,
    tolerance: float = DEFAULT_TOLERANCE,
    seed: Seed = (DEFAULT_SEED_X, DEFAULT_SEED_Y),
) -> Any:
    """
    Make the background region of an image transparent.

    Decodes the image to an RGBA buffer, flood fills from ``seed`` and
    commits the result to a new image. The input image is left untouched.

    Args:
        image: PIL Image to process
        tolerance: Relative per-channel tolerance (default 0.05)
        seed: (x, y) origin of the fill (default top-left corner)

    Returns:
        New RGBA PIL Image with the matched region cleared

    Raises:
        ImageLoadError: If the image is not loaded; nothing is filled
        InvalidSeedError: If seed lies outside the image
    """
    if not ensure_loaded(image):
        raise ImageLoadError("Image is not loaded; translucify skipped")

    buffer, width, height = image_to_buffer(image)
    seed_x, seed_y = seed
    flood_fill(buffer, width, height, seed_x, seed_y, tolerance)
    return buffer_to_image(buffer, width, height)


def _is_source(item: Any) -> bool:
    return isinstance(item, (str, Path, Image.Image))


def _collect_sources(query: Any) -> List[ImageSource]:
    if _is_source(query):
        return [query]

    if isinstance(query, (bytes, bytearray)) or not hasattr(query, "__iter__"):
        logger.debug(f"Unsupported input for translucify_all: {type(query).__name__}")
        return []

    sources: List[ImageSource] = []
    for item in query:
        if _is_source(item):
            sources.append(item)
        else:
            logger.debug(f"Skipping unsupported item: {type(item).__name__}")
    return sources


def _translucify_source(
    source: ImageSource,
    tolerance: float,
    seed: Seed,
) -> Optional[ImageRecord]:
    try:
        original = load_source(source)
    except ImageLoadError as e:
        logger.warning(f"Skipping image: {e}")
        return None

    if isinstance(source, (str, Path)):
        path: Optional[Path] = Path(source)
    else:
        filename = getattr(source, "filename", "")
        path = Path(filename) if filename else None

    try:
        modified = translucify_image(original, tolerance, seed)
    except InvalidSeedError as e:
        logger.warning(f"Skipping image {path or '<in-memory image>'}: {e}")
        return None
    return ImageRecord(path=path, original=original, modified=modified)


def translucify_all(
    query: Any,
    tolerance: Optional[float] = None,
    seed: Seed = (DEFAULT_SEED_X, DEFAULT_SEED_Y),
    use_threading: bool = False,
    max_workers: Optional[int] = None,
) -> List[ImageRecord]:
    """
    Translucify one image or a collection of images.

    Every image is processed independently. Images that fail to load, or
    that the seed lies outside of, are logged and skipped. Input that is
    neither an image, a path, nor an iterable of those is ignored and yields
    an empty list.

    Args:
        query: PIL Image, path, or iterable of images/paths
        tolerance: Relative tolerance; None selects the 0.05 default
        seed: (x, y) origin of each fill
        use_threading: Process images on a thread pool
        max_workers: Maximum number of threads (default: None = CPU count)

    Returns:
        ImageRecords for the images that were processed, in input order

    Example:
        >>> records = translucify_all(["logo.png", "badge.jpg"], tolerance=0.1)
        >>> records[0].modified.save("logo_clear.png")
    """
    if tolerance is None:
        tolerance = DEFAULT_TOLERANCE

    sources = _collect_sources(query)
    if not sources:
        return []

    if use_threading and len(sources) > 1:
        with concurrent.futures.ThreadPoolExecutor(max_workers=max_workers) as executor:
            futures = [
                executor.submit(_translucify_source, source, tolerance, seed)
                for source in sources
            ]
            results = [future.result() for future in futures]
    else:
        results = [_translucify_source(source, tolerance, seed) for source in sources]

    records = [record for record in results if record is not None]
    logger.info(f"Translucified {len(records)} of {len(sources)} images")
    return records


def generate_change_mask(
    original_image: Any,
    modified_image: Any,
    alpha_channel: bool = True,
) -> Any:
    """
    Generate a mask showing differences between two images.

    Args:
        original_image: Original PIL Image
        modified_image: Modified PIL Image
        alpha_channel: If True, return RGBA mask; else return L (grayscale)

    Returns:
        PIL Image mask where pixels are white where images differ

    Raises:
        ValueError: If the images differ in size
    """
    if original_image.size != modified_image.size:
        raise ValueError("Images must have the same size")

    original = np.asarray(original_image.convert("RGBA"))
    modified = np.asarray(modified_image.convert("RGBA"))
    changed = np.any(original != modified, axis=-1)

    if not alpha_channel:
        return Image.fromarray(changed.astype(np.uint8) * 255)

    height, width = changed.shape
    mask = np.zeros((height, width, 4), dtype=np.uint8)
    mask[..., 3] = 255
    mask[changed, :3] = 255
    return Image.fromarray(mask)


def save_images(records: Iterable[ImageRecord], output_dir: Path) -> int:
    """
    Save multiple ImageRecords to disk in PNG format.

    Each image is saved with a 'translucent_' prefix added to the original
    file stem. Records without a source path are numbered instead.

    Args:
        records: ImageRecord objects to save
        output_dir: Directory path where images should be saved

    Returns:
        The number of images saved

    Raises:
        OSError: If directory cannot be accessed or files cannot be written
    """
    if not output_dir.exists():
        raise OSError(f"Output directory does not exist: {output_dir}")

    if not output_dir.is_dir():
        raise OSError(f"Output path is not a directory: {output_dir}")

    saved_count = 0
    for position, record in enumerate(records):
        stem = record.path.stem if record.path is not None else f"image_{position}"
        save_path = output_dir / f"{OUTPUT_FILE_PREFIX}{stem}.png"
        record.modified.save(save_path, format=DEFAULT_OUTPUT_FORMAT)
        saved_count += 1
    return saved_count
