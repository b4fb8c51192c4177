"""
Unit tests for node_executors module.

Tests executor registration, lookup, metadata and the default registry.
"""

import unittest

from PIL import Image

from TL_Libs.NodesLib.translucify_node import create_translucify_node
from TL_Libs.ProjStoreLib.node_executors import (
    NodeExecutorRegistry,
    NodeTypeInfo,
    get_default_registry,
    register_default_executors,
)


def echo_executor(node, inputs):
    return inputs


class TestNodeExecutorRegistry(unittest.TestCase):
    """Tests for NodeExecutorRegistry."""

    def setUp(self):
        self.registry = NodeExecutorRegistry()

    def test_register_and_execute(self):
        self.registry.register("Echo", echo_executor, input_count=1)
        self.assertTrue(self.registry.has_executor("Echo"))
        self.assertEqual(self.registry.execute("Echo", {}, [1, 2]), [1, 2])

    def test_node_type_is_stripped(self):
        self.registry.register("  Echo  ", echo_executor)
        self.assertTrue(self.registry.has_executor("Echo"))

    def test_empty_node_type(self):
        with self.assertRaises(ValueError):
            self.registry.register("   ", echo_executor)

    def test_executor_must_be_callable(self):
        with self.assertRaises(ValueError):
            self.registry.register("Broken", "not callable")

    def test_duplicate_registration(self):
        self.registry.register("Echo", echo_executor)
        with self.assertRaises(RuntimeError):
            self.registry.register("Echo", echo_executor)

    def test_unregister(self):
        self.registry.register("Echo", echo_executor)
        self.assertTrue(self.registry.unregister("Echo"))
        self.assertFalse(self.registry.unregister("Echo"))
        self.assertFalse(self.registry.has_executor("Echo"))

    def test_unknown_executor(self):
        with self.assertRaises(KeyError):
            self.registry.get_executor("Missing")

    def test_metadata(self):
        self.registry.register("Echo", echo_executor, description="echo", tags=["debug"])
        metadata = self.registry.get_metadata("Echo")
        self.assertEqual(metadata["description"], "echo")
        self.assertEqual(metadata["tags"], ["debug"])

        with self.assertRaises(KeyError):
            self.registry.get_metadata("Missing")

    def test_filter_by_tag(self):
        self.registry.register("B", echo_executor, tags=["image"])
        self.registry.register("A", echo_executor, tags=["image", "source"])
        self.registry.register("C", echo_executor, tags=["sink"])
        self.assertEqual(self.registry.filter_by_tag("image"), ["A", "B"])


class TestNodeTypeInfo(unittest.TestCase):
    """Tests for NodeTypeInfo."""

    def test_tags_match_case_insensitively(self):
        info = NodeTypeInfo("Echo", echo_executor, tags=("Image", "source"))
        self.assertTrue(info.has_tag("image"))
        self.assertFalse(info.has_tag("sink"))

    def test_metadata_is_a_copy(self):
        info = NodeTypeInfo("Echo", echo_executor, tags=("debug",))
        metadata = info.to_metadata()
        metadata["tags"].append("changed")
        self.assertEqual(info.to_metadata()["tags"], ["debug"])


class TestDefaultExecutors(unittest.TestCase):
    """Tests for the default Translucify executors."""

    def test_registers_three_node_types(self):
        registry = NodeExecutorRegistry()
        register_default_executors(registry)
        self.assertEqual(registry.list_node_types(), ["Image Import", "Output", "Translucify"])
        self.assertEqual(registry.get_metadata("Translucify")["input_count"], 1)
        self.assertEqual(registry.get_metadata("Image Import")["input_count"], 0)

    def test_default_registry_is_singleton(self):
        self.assertIs(get_default_registry(), get_default_registry())
        self.assertTrue(get_default_registry().has_executor("Output"))

    def test_execute_translucify_through_registry(self):
        image = Image.new("RGBA", (3, 3), (250, 250, 250, 255))
        result = get_default_registry().execute(
            "Translucify", create_translucify_node("t"), [image]
        )
        self.assertEqual(result.getpixel((1, 1)), (0, 0, 0, 0))


if __name__ == "__main__":
    unittest.main()
