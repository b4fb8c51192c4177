"""
Unit tests for image_import_node module.

Tests format detection, node validation, RGBA loading, GIF frame selection
and the pipeline executor.
"""

from pathlib import Path

import pytest
from PIL import Image

from TL_Libs.ImageEditingLib.translucify_ops import ImageLoadError
from TL_Libs.NodesLib.image_import_node import (
    ImageImportNode,
    create_import_image_node,
    execute_import_image_node,
    get_supported_formats,
    is_supported_format,
)


@pytest.fixture
def gif_file(tmp_path):
    """Two-frame GIF: red first frame, blue second frame."""
    path = tmp_path / "blink.gif"
    red = Image.new("RGB", (4, 4), (255, 0, 0))
    blue = Image.new("RGB", (4, 4), (0, 0, 255))
    red.save(path, save_all=True, append_images=[blue], duration=100)
    return path


class TestSupportedFormats:
    """Tests for format helpers."""

    def test_lists_common_formats(self):
        formats = get_supported_formats()

        assert ".png" in formats
        assert ".jpg" in formats
        assert ".gif" in formats
        assert formats == sorted(formats)

    def test_extension_is_case_insensitive(self):
        assert is_supported_format(Path("photo.JPG"))
        assert not is_supported_format(Path("notes.txt"))


class TestImageImportNode:
    """Tests for ImageImportNode dataclass."""

    def test_loads_as_rgba(self, image_files):
        node = ImageImportNode(node_id="import", file_path=image_files[1])

        image = node.load_image()

        assert image.mode == "RGBA"
        assert image.size == (6, 6)

    def test_caches_image(self, image_files):
        node = ImageImportNode(node_id="import", file_path=image_files[0])

        assert node.load_image() is node.load_image()

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            ImageImportNode(node_id="import", file_path=tmp_path / "missing.png")

    def test_directory_is_rejected(self, tmp_path):
        folder = tmp_path / "folder.png"
        folder.mkdir()

        with pytest.raises(ValueError):
            ImageImportNode(node_id="import", file_path=folder)

    def test_unsupported_extension(self, tmp_path):
        text_file = tmp_path / "notes.txt"
        text_file.write_text("hello")

        with pytest.raises(ValueError):
            ImageImportNode(node_id="import", file_path=text_file)

    def test_negative_frame_index(self, image_files):
        with pytest.raises(ValueError):
            ImageImportNode(node_id="import", file_path=image_files[0], frame_index=-1)

    def test_corrupt_file(self, tmp_path):
        bogus = tmp_path / "broken.png"
        bogus.write_bytes(b"definitely not a png")
        node = ImageImportNode(node_id="import", file_path=bogus)

        with pytest.raises(ImageLoadError):
            node.load_image()

    def test_gif_frame_selection(self, gif_file):
        node = ImageImportNode(node_id="import", file_path=gif_file, frame_index=1)

        image = node.load_image()

        assert node.is_gif
        assert node.get_num_frames() == 2
        assert image.getpixel((0, 0)) == (0, 0, 255, 255)

    def test_gif_frame_out_of_range_uses_first(self, gif_file):
        node = ImageImportNode(node_id="import", file_path=gif_file, frame_index=5)

        image = node.load_image()

        assert image.getpixel((0, 0)) == (255, 0, 0, 255)

    def test_static_image_has_one_frame(self, image_files):
        node = ImageImportNode(node_id="import", file_path=image_files[0])

        assert not node.is_gif
        assert node.get_num_frames() == 1

    def test_dict_round_trip(self, image_files):
        node = ImageImportNode(node_id="import", file_path=image_files[0], cache_image=False)

        restored = ImageImportNode.from_dict(node.to_dict())

        assert restored.node_id == "import"
        assert restored.file_path == image_files[0]
        assert restored.cache_image is False


class TestExecuteImportImageNode:
    """Tests for the import node executor."""

    def test_executes_node_dict(self, image_files):
        node = create_import_image_node("import-0", image_files[0])

        image = execute_import_image_node(node, [])

        assert image.mode == "RGBA"
        assert image.getpixel((0, 0)) == (255, 255, 255, 255)

    def test_missing_file_path(self):
        with pytest.raises(KeyError):
            execute_import_image_node({"id": "import"}, [])

    def test_create_node_dict(self, image_files):
        node = create_import_image_node("import-3", image_files[1], frame_index=2)

        assert node == {
            "id": "import-3",
            "type": "Image Import",
            "file_path": str(image_files[1]),
            "frame_index": 2,
        }
