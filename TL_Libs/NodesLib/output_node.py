"""
Output Node for Translucify.

Writes a translucent image to a file whose name is built from a template.
Template tags, matched case-insensitively:

    {NAME}                 stem of the source image
    {DATE} / {DATE:fmt}    strftime date, default %Y-%m-%d
    {TIME} / {TIME:fmt}    strftime time, default %H-%M-%S
    {COUNTER} / {COUNTER:n}  position of the image in its batch, zero-padded to n

Rendered paths may not contain '..' and, when a base directory is set, must
stay inside it.

Classes:
    OutputNodeConfig: Template and save settings
    OutputNodeHandler: Resolves the target path and saves the image

Functions:
    render_template: Substitute tags in an output template
    execute_output_node: Executor for "Output" node dictionaries
    create_output_node: Build an "Output" node dictionary
"""

from dataclasses import dataclass, asdict
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional
import logging
import re

from TL_Libs.constants import (
    DEFAULT_OUTPUT_FORMAT,
    DEFAULT_OUTPUT_TEMPLATE,
    FORMATS_WITHOUT_ALPHA,
    NODE_TYPE_OUTPUT,
)

logger = logging.getLogger(__name__)

TAG_PATTERN = re.compile(r"\{(NAME|DATE|TIME|COUNTER)(?::([^}]*))?\}", re.IGNORECASE)
DEFAULT_STRFTIME = {"DATE": "%Y-%m-%d", "TIME": "%H-%M-%S"}


def render_template(template: str, source_name: str, counter: int, now: datetime) -> str:
    """
    Substitute {NAME}, {DATE}, {TIME} and {COUNTER} tags in ``template``.

    Raises:
        ValueError: If a COUNTER width is not an integer or a strftime
                    format is rejected
    """

    def substitute(match: "re.Match[str]") -> str:
        tag = match.group(1).upper()
        argument = match.group(2)

        if tag == "NAME":
            return source_name
        if tag == "COUNTER":
            if not argument:
                return str(counter)
            try:
                width = int(argument)
            except ValueError:
                raise ValueError(f"{{COUNTER:{argument}}}: width must be an integer") from None
            return str(counter).zfill(width)

        fmt = argument or DEFAULT_STRFTIME[tag]
        try:
            return now.strftime(fmt)
        except (ValueError, TypeError) as e:
            raise ValueError(f"{{{tag}:{fmt}}}: bad format: {e}") from e

    return TAG_PATTERN.sub(substitute, template)


def _confine(path: Path, base_dir: Optional[Path]) -> Path:
    if ".." in path.parts:
        raise ValueError(f"Output path may not contain '..': {path}")

    if base_dir is None:
        return path.resolve()

    target = path.resolve() if path.is_absolute() else (base_dir / path).resolve()
    if not target.is_relative_to(base_dir):
        raise ValueError(f"Output path {target} is outside {base_dir}")
    return target


@dataclass
class OutputNodeConfig:
    """Settings of one output node.

    Attributes:
        output_path: File name template, relative to base_directory when set
        save_format: Pillow format name; "JPG" is accepted for JPEG
        source_name: Substituted for {NAME}
        counter: Substituted for {COUNTER}
        create_directories: Create missing parent directories
        overwrite: Replace an existing file instead of failing
        base_directory: Absolute directory outputs are confined to
    """
    output_path: str = DEFAULT_OUTPUT_TEMPLATE
    save_format: str = DEFAULT_OUTPUT_FORMAT
    source_name: str = "image"
    counter: int = 0
    create_directories: bool = True
    overwrite: bool = False
    base_directory: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "OutputNodeConfig":
        """Build from a node dictionary; keys that are not fields are dropped."""
        return cls(**{k: v for k, v in data.items() if k in cls.__dataclass_fields__})

    def get_pil_format(self) -> str:
        fmt = self.save_format.upper()
        return "JPEG" if fmt == "JPG" else fmt


class OutputNodeHandler:
    """Turns an OutputNodeConfig into a file on disk."""

    TAG_PATTERN = TAG_PATTERN

    def __init__(self, config: OutputNodeConfig):
        self.config = config
        self.base_dir: Optional[Path] = None
        if config.base_directory:
            base = Path(config.base_directory)
            if not base.is_absolute():
                raise ValueError(f"base_directory must be absolute, got {config.base_directory}")
            self.base_dir = base.resolve()

    def resolve_filename(self, now: Optional[datetime] = None) -> Path:
        """
        Render the template and return the absolute target path.

        Args:
            now: Moment used for {DATE} and {TIME} (default: now)

        Raises:
            ValueError: On a bad tag argument, a '..' segment, or a path
                        outside base_directory
        """
        rendered = render_template(
            self.config.output_path,
            self.config.source_name,
            self.config.counter,
            now or datetime.now(),
        )
        return _confine(Path(rendered), self.base_dir)

    def save_image(self, image: Any) -> Path:
        """
        Save ``image`` to the resolved path and return that path.

        Formats that cannot hold alpha (JPEG, BMP) get an RGB copy and a
        warning, since the transparency is lost.

        Raises:
            TypeError: If image has no save method
            FileExistsError: If the target exists and overwrite is off
            OSError: If Pillow fails to write the file
        """
        if not hasattr(image, "save"):
            raise TypeError(f"Expected PIL Image, got {type(image)}")

        target = self.resolve_filename()
        if self.config.create_directories:
            target.parent.mkdir(parents=True, exist_ok=True)
        if target.exists() and not self.config.overwrite:
            raise FileExistsError(f"{target} exists and overwrite is off")

        pil_format = self.config.get_pil_format()
        if pil_format in FORMATS_WITHOUT_ALPHA and image.mode == "RGBA":
            logger.warning(f"{pil_format} cannot store transparency; {target.name} is saved as RGB")
            image = image.convert("RGB")

        try:
            image.save(target, format=pil_format)
        except (OSError, ValueError, KeyError) as e:
            raise OSError(f"Could not write {target}: {e}") from e

        logger.debug(f"Wrote {target}")
        return target


def execute_output_node(node: Dict[str, Any], inputs: List[Any]) -> Path:
    """
    Executor for "Output" nodes.

    ``inputs[0]`` is the image to save, or the (image, mask) pair a
    translucify node returns when it outputs a mask; only the image is saved.

    Returns:
        Path of the written file

    Raises:
        ValueError: If there is no input or the node settings are invalid
        TypeError: If the input is not an image
        FileExistsError: If the target exists and overwrite is off
        OSError: If the file cannot be written
    """
    if not inputs:
        raise ValueError("Output node requires 1 input image")

    image = inputs[0]
    if isinstance(image, (list, tuple)) and image:
        image = image[0]
    if not (hasattr(image, "save") and hasattr(image, "mode")):
        raise TypeError(f"Expected PIL Image, got {type(image)}")

    return OutputNodeHandler(OutputNodeConfig.from_dict(node)).save_image(image)


def create_output_node(
    node_id: str,
    output_path: str = DEFAULT_OUTPUT_TEMPLATE,
    source_name: str = "image",
    counter: int = 0,
    save_format: str = DEFAULT_OUTPUT_FORMAT,
    create_directories: bool = True,
    overwrite: bool = False,
    base_directory: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Build an "Output" node dictionary.

    Examples:
        >>> create_output_node("out-1", "{NAME}_clear.png", source_name="logo")
        >>> create_output_node("out-2", "batch_{DATE}/{COUNTER:3}.png", counter=7)
    """
    node = OutputNodeConfig(
        output_path=output_path,
        save_format=save_format,
        source_name=source_name,
        counter=counter,
        create_directories=create_directories,
        overwrite=overwrite,
        base_directory=base_directory,
    ).to_dict()
    node.update({"id": node_id, "type": NODE_TYPE_OUTPUT})
    return node
