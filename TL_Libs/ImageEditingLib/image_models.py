"""
Image editing data models for Translucify.

Classes:
    ImageRecord: Container for an image's source and both original and translucent versions

Type Aliases:
    RgbaColor: A tuple of 4 integers representing RGBA color values (0-255)
    Seed: An (x, y) pixel coordinate used as flood fill origin
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

from PIL import Image

RgbaColor = Tuple[int, int, int, int]
Seed = Tuple[int, int]


@dataclass
class ImageRecord:
    path: Optional[Path]
    original: 'Image.Image'
    modified: 'Image.Image'
