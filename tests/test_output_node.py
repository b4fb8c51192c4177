"""
Unit tests for output_node module.

Tests filename tag substitution, path validation, saving behaviour and the
pipeline executor.
"""

import logging
from datetime import datetime
from pathlib import Path

import pytest
from PIL import Image

from TL_Libs.NodesLib.output_node import (
    OutputNodeConfig,
    OutputNodeHandler,
    create_output_node,
    execute_output_node,
    render_template,
)


FIXED_NOW = datetime(2024, 3, 9, 14, 5, 7)


def make_handler(base_dir, output_path, **kwargs):
    config = OutputNodeConfig(output_path=output_path, base_directory=str(base_dir), **kwargs)
    return OutputNodeHandler(config)


class TestOutputNodeConfig:
    """Tests for OutputNodeConfig."""

    def test_defaults(self):
        config = OutputNodeConfig()

        assert config.output_path == "{NAME}.png"
        assert config.save_format == "PNG"
        assert config.overwrite is False

    def test_jpg_maps_to_jpeg(self):
        assert OutputNodeConfig(save_format="jpg").get_pil_format() == "JPEG"
        assert OutputNodeConfig(save_format="webp").get_pil_format() == "WEBP"

    def test_from_dict_ignores_unknown_keys(self):
        config = OutputNodeConfig.from_dict({"id": "out", "type": "Output", "counter": 4})

        assert config.counter == 4


class TestRenderTemplate:
    """Tests for render_template."""

    def test_leaves_plain_text_alone(self):
        assert render_template("clear/{unknown}.png", "logo", 1, FIXED_NOW) == "clear/{unknown}.png"

    def test_all_tags(self):
        rendered = render_template("{NAME}-{COUNTER:2}-{DATE:%d}-{TIME:%H}", "logo", 5, FIXED_NOW)

        assert rendered == "logo-05-09-14"


class TestResolveFilename:
    """Tests for tag substitution and path validation."""

    def test_name_tag(self, tmp_path):
        handler = make_handler(tmp_path, "{NAME}_clear.png", source_name="logo")

        assert handler.resolve_filename(FIXED_NOW) == tmp_path.resolve() / "logo_clear.png"

    def test_tags_are_case_insensitive(self, tmp_path):
        handler = make_handler(tmp_path, "{name}.png", source_name="logo")

        assert handler.resolve_filename(FIXED_NOW).name == "logo.png"

    def test_counter_padding(self, tmp_path):
        handler = make_handler(tmp_path, "frame_{COUNTER:4}.png", counter=7)

        assert handler.resolve_filename(FIXED_NOW).name == "frame_0007.png"

    def test_counter_without_width(self, tmp_path):
        handler = make_handler(tmp_path, "{COUNTER}.png", counter=12)

        assert handler.resolve_filename(FIXED_NOW).name == "12.png"

    def test_invalid_counter_width(self, tmp_path):
        handler = make_handler(tmp_path, "{COUNTER:wide}.png")

        with pytest.raises(ValueError):
            handler.resolve_filename(FIXED_NOW)

    def test_date_and_time_defaults(self, tmp_path):
        handler = make_handler(tmp_path, "{DATE}_{TIME}.png")

        assert handler.resolve_filename(FIXED_NOW).name == "2024-03-09_14-05-07.png"

    def test_custom_date_format(self, tmp_path):
        handler = make_handler(tmp_path, "{DATE:%Y%m%d}/{NAME}.png", source_name="logo")

        assert handler.resolve_filename(FIXED_NOW) == tmp_path.resolve() / "20240309" / "logo.png"

    def test_path_traversal_rejected(self, tmp_path):
        handler = make_handler(tmp_path, "../escape.png")

        with pytest.raises(ValueError):
            handler.resolve_filename(FIXED_NOW)

    def test_absolute_path_outside_base(self, tmp_path):
        outside = tmp_path.parent / "elsewhere.png"
        handler = make_handler(tmp_path / "out", str(outside))

        with pytest.raises(ValueError):
            handler.resolve_filename(FIXED_NOW)

    def test_relative_base_directory_rejected(self):
        with pytest.raises(ValueError):
            OutputNodeHandler(OutputNodeConfig(base_directory="relative/dir"))


class TestSaveImage:
    """Tests for OutputNodeHandler.save_image."""

    def test_creates_directories(self, tmp_path):
        handler = make_handler(tmp_path, "nested/deeper/{NAME}.png", source_name="logo")

        saved = handler.save_image(Image.new("RGBA", (2, 2), (0, 0, 0, 0)))

        assert saved.exists()
        assert saved.parent.name == "deeper"
        with Image.open(saved) as reloaded:
            assert reloaded.mode == "RGBA"
            assert reloaded.getpixel((0, 0)) == (0, 0, 0, 0)

    def test_refuses_to_overwrite(self, tmp_path):
        handler = make_handler(tmp_path, "result.png")
        image = Image.new("RGBA", (2, 2))
        handler.save_image(image)

        with pytest.raises(FileExistsError):
            handler.save_image(image)

    def test_overwrite_allowed(self, tmp_path):
        handler = make_handler(tmp_path, "result.png", overwrite=True)
        handler.save_image(Image.new("RGBA", (2, 2)))

        saved = handler.save_image(Image.new("RGBA", (3, 3)))

        with Image.open(saved) as reloaded:
            assert reloaded.size == (3, 3)

    def test_jpeg_drops_alpha_with_warning(self, tmp_path, caplog):
        handler = make_handler(tmp_path, "{NAME}.jpg", source_name="photo", save_format="JPG")

        with caplog.at_level(logging.WARNING):
            saved = handler.save_image(Image.new("RGBA", (4, 4), (10, 200, 30, 0)))

        assert "cannot store transparency" in caplog.text
        with Image.open(saved) as reloaded:
            assert reloaded.format == "JPEG"
            assert reloaded.mode == "RGB"

    def test_rejects_non_image(self, tmp_path):
        handler = make_handler(tmp_path, "result.png")

        with pytest.raises(TypeError):
            handler.save_image("not an image")


class TestExecuteOutputNode:
    """Tests for execute_output_node and create_output_node."""

    def test_saves_image(self, tmp_path):
        node = create_output_node("out", source_name="logo", base_directory=str(tmp_path))

        saved = execute_output_node(node, [Image.new("RGBA", (2, 2))])

        assert saved == tmp_path.resolve() / "logo.png"
        assert saved.exists()

    def test_accepts_image_mask_tuple(self, tmp_path):
        node = create_output_node("out", output_path="{COUNTER:2}.png", counter=3,
                                  base_directory=str(tmp_path))
        image = Image.new("RGBA", (2, 2))
        mask = Image.new("RGBA", (2, 2), (255, 255, 255, 255))

        saved = execute_output_node(node, [(image, mask)])

        assert saved.name == "03.png"

    def test_requires_input(self, tmp_path):
        node = create_output_node("out", base_directory=str(tmp_path))

        with pytest.raises(ValueError):
            execute_output_node(node, [])

    def test_rejects_non_image(self, tmp_path):
        node = create_output_node("out", base_directory=str(tmp_path))

        with pytest.raises(TypeError):
            execute_output_node(node, [42])

    def test_node_dict(self):
        node = create_output_node("out-1", "batch/{NAME}.png", source_name="logo", counter=2)

        assert node["type"] == "Output"
        assert node["output_path"] == "batch/{NAME}.png"
        assert node["source_name"] == "logo"
        assert node["counter"] == 2
        assert node["base_directory"] is None
