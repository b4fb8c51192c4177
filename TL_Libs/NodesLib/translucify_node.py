"""
Translucify Node for Translucify pipelines.

This node clears the background region of an image by flood filling from a
seed pixel, and optionally returns a mask showing which pixels were cleared.

Classes:
    TranslucifyNodeConfig: Configuration for translucify node

Functions:
    execute_translucify_node: Pipeline executor for translucify nodes
    create_translucify_node: Helper to create a translucify node dictionary
"""

from dataclasses import dataclass, asdict
from typing import Any, Dict, List

from TL_Libs.constants import (
    DEFAULT_SEED_X,
    DEFAULT_SEED_Y,
    DEFAULT_TOLERANCE,
    NODE_TYPE_TRANSLUCIFY,
)
from TL_Libs.ImageEditingLib.image_models import Seed
from TL_Libs.ImageEditingLib.translucify_ops import (
    generate_change_mask,
    translucify_image,
)


@dataclass
class TranslucifyNodeConfig:
    """Configuration for translucify node execution.

    Attributes:
        tolerance: Relative per-channel tolerance around the seed color (>= 0)
        seed_x: Column of the fill origin
        seed_y: Row of the fill origin
        output_mask: If True, return (image, mask) tuple; else just image
    """
    tolerance: float = DEFAULT_TOLERANCE
    seed_x: int = DEFAULT_SEED_X
    seed_y: int = DEFAULT_SEED_Y
    output_mask: bool = False

    def __post_init__(self):
        self.tolerance = float(self.tolerance)
        self.seed_x = int(self.seed_x)
        self.seed_y = int(self.seed_y)
        if self.tolerance < 0:
            raise ValueError(f"tolerance must be >= 0, got {self.tolerance}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TranslucifyNodeConfig":
        """Create from dictionary, ignoring unknown keys."""
        normalized = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        return cls(**normalized)

    def get_seed(self) -> Seed:
        return (self.seed_x, self.seed_y)


def execute_translucify_node(node: Dict[str, Any], inputs: List[Any]) -> Any:
    """
    Pipeline executor for translucify nodes.

    Args:
        node: Node dictionary containing TranslucifyNodeConfig fields
        inputs: Should contain exactly one element: the input PIL Image

    Returns:
        - If output_mask=True: Tuple of (translucent_image, change_mask)
        - If output_mask=False: Just translucent_image

    Raises:
        ValueError: If inputs list is empty or configuration is invalid
        TypeError: If input is not a PIL Image
        ImageLoadError: If the input image is not loaded
        InvalidSeedError: If the seed lies outside the image
    """
    if not inputs:
        raise ValueError("Translucify node requires 1 input image")

    image = inputs[0]
    if not hasattr(image, "size") or not hasattr(image, "tobytes"):
        raise TypeError(f"Expected PIL Image, got {type(image)}")

    config = TranslucifyNodeConfig.from_dict(node)
    result = translucify_image(image, config.tolerance, config.get_seed())

    if config.output_mask:
        return (result, generate_change_mask(image, result))
    return result


def create_translucify_node(
    node_id: str,
    tolerance: float = DEFAULT_TOLERANCE,
    seed: Seed = (DEFAULT_SEED_X, DEFAULT_SEED_Y),
    output_mask: bool = False,
) -> Dict[str, Any]:
    """
    Helper to create a translucify node dictionary for graph building.

    Args:
        node_id: Unique node identifier
        tolerance: Relative tolerance for the fill
        seed: (x, y) origin of the fill
        output_mask: Whether to output a change mask

    Returns:
        Node dictionary ready for serialization
    """
    seed_x, seed_y = seed
    return {
        "id": node_id,
        "type": NODE_TYPE_TRANSLUCIFY,
        "output_ports": ["image", "mask"] if output_mask else ["image"],
        "tolerance": tolerance,
        "seed_x": seed_x,
        "seed_y": seed_y,
        "output_mask": output_mask,
    }
