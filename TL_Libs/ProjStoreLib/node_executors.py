"""
Executor registry for Translucify node chains.

A node dictionary names its kind in ``"type"``; the registry maps that name
to the function that runs the node, plus a small description of the node's
ports used for listing and filtering.

Classes:
    NodeTypeInfo: Executor and port description for one node type
    NodeExecutorRegistry: Lookup table from node type to NodeTypeInfo

Functions:
    get_default_registry: Shared registry with the Translucify node types
    register_default_executors: Add Image Import, Translucify and Output
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence
import logging
import threading

from TL_Libs.constants import (
    NODE_TYPE_IMAGE_IMPORT,
    NODE_TYPE_OUTPUT,
    NODE_TYPE_TRANSLUCIFY,
)

logger = logging.getLogger(__name__)

# (node_dict, inputs) -> node result
ExecutorFunction = Callable[[Dict[str, Any], List[Any]], Any]


def _clean_type_name(node_type: Any) -> str:
    return str(node_type).strip()


@dataclass(frozen=True)
class NodeTypeInfo:
    """Everything the registry knows about one node type.

    Attributes:
        node_type: Name used in the node dictionary's "type" field
        executor: Function running the node
        description: Short human-readable summary
        input_count: Number of upstream results the node consumes
        output_count: Number of results the node produces
        tags: Lower-case labels used by filter_by_tag
    """
    node_type: str
    executor: ExecutorFunction
    description: str = ""
    input_count: int = 0
    output_count: int = 1
    tags: Sequence[str] = field(default_factory=tuple)

    def has_tag(self, tag: str) -> bool:
        return tag.lower() in (t.lower() for t in self.tags)

    def to_metadata(self) -> Dict[str, Any]:
        return {
            "description": self.description,
            "input_count": self.input_count,
            "output_count": self.output_count,
            "tags": list(self.tags),
        }


class NodeExecutorRegistry:
    """
    Maps node type names to their executors.

    Example:
        >>> registry = NodeExecutorRegistry()
        >>> registry.register("Translucify", execute_translucify_node, input_count=1)
        >>> translucent = registry.execute("Translucify", node, [image])
    """

    def __init__(self):
        self._node_types: Dict[str, NodeTypeInfo] = {}

    def register(
        self,
        node_type: str,
        executor: ExecutorFunction,
        description: str = "",
        input_count: int = 0,
        output_count: int = 1,
        tags: Optional[List[str]] = None,
    ) -> None:
        """
        Add a node type to the registry.

        Args:
            node_type: Name matched against a node dictionary's "type"
            executor: Function called as executor(node_dict, inputs)
            description: Short summary shown when listing node types
            input_count: Upstream results consumed (0 for source nodes)
            output_count: Results produced (0 for sink nodes)
            tags: Labels for filter_by_tag

        Raises:
            ValueError: If the name is blank or the executor is not callable
            RuntimeError: If the name is taken
        """
        name = _clean_type_name(node_type)
        if not name:
            raise ValueError("node_type cannot be empty")
        if not callable(executor):
            raise ValueError(f"executor for '{name}' is not callable: {executor!r}")
        if name in self._node_types:
            raise RuntimeError(f"Node type '{name}' is already registered; unregister it first")

        self._node_types[name] = NodeTypeInfo(
            node_type=name,
            executor=executor,
            description=str(description),
            input_count=int(input_count),
            output_count=int(output_count),
            tags=tuple(tags or ()),
        )
        logger.debug(f"Registered node type '{name}'")

    def unregister(self, node_type: str) -> bool:
        """Remove a node type. Returns False when it was not registered."""
        removed = self._node_types.pop(_clean_type_name(node_type), None)
        if removed is None:
            return False
        logger.debug(f"Unregistered node type '{removed.node_type}'")
        return True

    def _lookup(self, node_type: str) -> NodeTypeInfo:
        name = _clean_type_name(node_type)
        try:
            return self._node_types[name]
        except KeyError:
            known = ", ".join(self.list_node_types()) or "none"
            raise KeyError(f"Unknown node type '{name}' (registered: {known})") from None

    def get_executor(self, node_type: str) -> ExecutorFunction:
        """
        Return the executor of a node type.

        Raises:
            KeyError: If the node type is not registered
        """
        return self._lookup(node_type).executor

    def has_executor(self, node_type: str) -> bool:
        return _clean_type_name(node_type) in self._node_types

    def execute(self, node_type: str, node_dict: Dict[str, Any], inputs: List[Any]) -> Any:
        """Run ``node_dict`` with the executor registered for ``node_type``."""
        return self.get_executor(node_type)(node_dict, inputs)

    def list_node_types(self) -> List[str]:
        return sorted(self._node_types)

    def get_metadata(self, node_type: str) -> Dict[str, Any]:
        """
        Return a copy of a node type's description, port counts and tags.

        Raises:
            KeyError: If the node type is not registered
        """
        return self._lookup(node_type).to_metadata()

    def filter_by_tag(self, tag: str) -> List[str]:
        """Names of node types carrying ``tag``, case-insensitive, sorted."""
        wanted = _clean_type_name(tag)
        return sorted(name for name, info in self._node_types.items() if info.has_tag(wanted))


_default_registry: Optional[NodeExecutorRegistry] = None
_default_registry_lock = threading.Lock()


def get_default_registry() -> NodeExecutorRegistry:
    """Return the process-wide registry, building it on first use."""
    global _default_registry

    with _default_registry_lock:
        if _default_registry is None:
            fresh = NodeExecutorRegistry()
            register_default_executors(fresh)
            _default_registry = fresh
    return _default_registry


def register_default_executors(registry: NodeExecutorRegistry) -> None:
    """Add the three node types a batch chain is built from."""
    # Deferred: the node modules pull in Pillow and the fill engine
    from TL_Libs.NodesLib.image_import_node import execute_import_image_node
    from TL_Libs.NodesLib.output_node import execute_output_node
    from TL_Libs.NodesLib.translucify_node import execute_translucify_node

    defaults = (
        (NODE_TYPE_IMAGE_IMPORT, execute_import_image_node,
         "Read an image file and hand it on as RGBA", 0, 1, ["input", "image", "source"]),
        (NODE_TYPE_TRANSLUCIFY, execute_translucify_node,
         "Make the region connected to the seed pixel transparent", 1, 2,
         ["processing", "transparency", "filter"]),
        (NODE_TYPE_OUTPUT, execute_output_node,
         "Write the image to a templated file name", 1, 0, ["output", "image", "sink"]),
    )
    for node_type, executor, description, input_count, output_count, tags in defaults:
        registry.register(node_type, executor, description, input_count, output_count, tags)

    logger.info(f"Registered {len(defaults)} default node types")
