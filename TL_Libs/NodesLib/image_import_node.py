"""
Image Import Node for Translucify.

Reads an image file into an RGBA Pillow image, the form the translucify node
expects. For animated GIFs one frame is taken (``frame_index``); an index
past the last frame falls back to the first one.

Classes:
    ImageImportNode: Validated import settings plus a lazily loaded image

Functions:
    get_supported_formats: Every extension the import node accepts
    is_supported_format: Whether a path has one of those extensions
    execute_import_image_node: Executor for "Image Import" node dictionaries
    create_import_image_node: Build an "Image Import" node dictionary
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from PIL import Image

from TL_Libs.constants import (
    NODE_TYPE_IMAGE_IMPORT,
    SUPPORTED_GIF,
    SUPPORTED_STANDARD_IMAGES,
)
from TL_Libs.ImageEditingLib.translucify_ops import ImageLoadError, ensure_loaded


def get_supported_formats() -> List[str]:
    """Sorted list of accepted extensions, lower case with the leading dot."""
    return sorted(SUPPORTED_STANDARD_IMAGES | SUPPORTED_GIF)


def is_supported_format(file_path: Path) -> bool:
    return Path(file_path).suffix.lower() in SUPPORTED_STANDARD_IMAGES | SUPPORTED_GIF


def _check_source_file(path: Path) -> None:
    if not path.exists():
        raise FileNotFoundError(f"Image file not found: {path}")
    if not path.is_file():
        raise ValueError(f"Not a regular file: {path}")
    if not is_supported_format(path):
        raise ValueError(
            f"Unsupported image format '{path.suffix}'; expected one of "
            f"{', '.join(get_supported_formats())}"
        )


def _seek_frame(img: Any, frame_index: int) -> None:
    try:
        img.seek(frame_index)
    except EOFError:
        img.seek(0)


@dataclass
class ImageImportNode:
    """Settings of one import node.

    Attributes:
        node_id: Identifier of the node in its chain
        file_path: Image file to read
        frame_index: Frame taken from animated GIFs (ignored otherwise)
        cache_image: Keep the decoded image for repeated load_image calls
        cached_image: Decoded RGBA image, filled by load_image when caching
    """

    node_id: str
    file_path: Path
    frame_index: int = 0
    cache_image: bool = True
    cached_image: Optional[Any] = field(default=None, init=False, repr=False)

    def __post_init__(self):
        self.file_path = Path(self.file_path)
        _check_source_file(self.file_path)
        if self.frame_index < 0:
            raise ValueError(f"frame_index must be >= 0, got {self.frame_index}")

    @property
    def is_gif(self) -> bool:
        return self.file_path.suffix.lower() in SUPPORTED_GIF

    def load_image(self) -> Any:
        """
        Decode the file and return it as a new RGBA image.

        The file handle is closed before returning; the returned image owns
        its pixel data.

        Raises:
            ImageLoadError: If Pillow cannot open or decode the file
        """
        if self.cache_image and self.cached_image is not None:
            return self.cached_image

        try:
            handle = Image.open(self.file_path)
        except (OSError, ValueError) as e:
            raise ImageLoadError(f"Cannot open {self.file_path}: {e}") from e

        with handle:
            if self.is_gif:
                _seek_frame(handle, self.frame_index)
            if not ensure_loaded(handle):
                raise ImageLoadError(f"Cannot decode {self.file_path}")
            rgba = handle.convert("RGBA")

        if self.cache_image:
            self.cached_image = rgba
        return rgba

    def get_num_frames(self) -> int:
        if not self.is_gif:
            return 1
        with Image.open(self.file_path) as handle:
            return getattr(handle, "n_frames", 1)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "node_id": self.node_id,
            "file_path": str(self.file_path),
            "frame_index": self.frame_index,
            "cache_image": self.cache_image,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ImageImportNode":
        return cls(
            node_id=data.get("node_id", ""),
            file_path=Path(data.get("file_path", "")),
            frame_index=int(data.get("frame_index", 0)),
            cache_image=bool(data.get("cache_image", True)),
        )


def execute_import_image_node(node: Dict[str, Any], inputs: List[Any]) -> Any:
    """
    Executor for "Image Import" nodes. Source node: ``inputs`` is ignored.

    Node keys:
        file_path: Image file to read (required)
        frame_index: GIF frame to take (default 0)

    Returns:
        Freshly decoded RGBA image (never cached, so every chain gets its own)

    Raises:
        KeyError: If the node has no file_path
        FileNotFoundError: If the file does not exist
        ValueError: If the path is not a supported image file
        ImageLoadError: If the file cannot be decoded
    """
    file_path = node.get("file_path")
    if not file_path:
        raise KeyError("Image Import node needs a 'file_path'")

    importer = ImageImportNode(
        node_id=node.get("id", node.get("node_id", "import")),
        file_path=Path(file_path),
        frame_index=int(node.get("frame_index", 0)),
        cache_image=False,
    )
    return importer.load_image()


def create_import_image_node(node_id: str, file_path: Path, frame_index: int = 0) -> Dict[str, Any]:
    return {
        "id": node_id,
        "type": NODE_TYPE_IMAGE_IMPORT,
        "file_path": str(file_path),
        "frame_index": frame_index,
    }
