"""
Translucify Nodes Library.

This module contains the node implementations used by Translucify batch
pipelines. Nodes are components that process data in a chain.

Modules:
    image_import_node: Image import node for loading images
    translucify_node: Background flood fill node with optional change mask
    output_node: Output node for saving images with templated names
"""

from TL_Libs.NodesLib.image_import_node import (
    ImageImportNode,
    execute_import_image_node,
    create_import_image_node,
    get_supported_formats,
    is_supported_format,
)
from TL_Libs.NodesLib.translucify_node import (
    TranslucifyNodeConfig,
    execute_translucify_node,
    create_translucify_node,
)
from TL_Libs.NodesLib.output_node import (
    OutputNodeConfig,
    OutputNodeHandler,
    render_template,
    execute_output_node,
    create_output_node,
)

__all__ = [
    "ImageImportNode",
    "execute_import_image_node",
    "create_import_image_node",
    "get_supported_formats",
    "is_supported_format",
    "TranslucifyNodeConfig",
    "execute_translucify_node",
    "create_translucify_node",
    "OutputNodeConfig",
    "OutputNodeHandler",
    "render_template",
    "execute_output_node",
    "create_output_node",
]
