"""
Tests for the pydot rendering glue.
"""

import shutil
import unittest
from unittest.mock import patch

import pydot

from rregex.exceptions import GraphDescriptionError, RenderError
from rregex.pipeline import AnnotatedGraph, annotate_description
from rregex.renderer import load_graph, render, validate_description

RAW = 'digraph {\n    0 [ label = "0" ]\n    1 [ label = "1" ]\n    0 -> 1 [ label = "a" ]\n}\n'
ANNOTATED = annotate_description(RAW, 0, {1})


class TestValidateDescription(unittest.TestCase):
    def test_annotated_description_is_valid(self):
        validate_description(ANNOTATED)

    def test_pydot_sees_markers(self):
        graph = load_graph(ANNOTATED)
        shapes = {node.get_name(): node.get("shape") for node in graph.get_nodes()}
        self.assertEqual(shapes["0"], "Mcircle")
        self.assertEqual(shapes["1"], "doublecircle")

    def test_duplicate_attributes_rejected(self):
        text = 'digraph {\n    0 [ label = "0" shape = circle shape = Mcircle ]\n}\n'
        with self.assertRaises(GraphDescriptionError) as ctx:
            validate_description(text)
        self.assertEqual(ctx.exception.details["attributes"], ["shape"])

    def test_malformed(self):
        with self.assertRaises(GraphDescriptionError):
            validate_description("digraph {\n")


class TestRender(unittest.TestCase):
    def test_unsupported_format(self):
        with self.assertRaises(ValueError):
            render(ANNOTATED, fmt="gif")

    def test_width_hint_sets_size(self):
        captured = {}

        def fake_create(self, prog=None, format=None, **kwargs):
            captured["size"] = self.get("size")
            captured["format"] = format
            return b"<svg/>"

        graph = AnnotatedGraph(description=ANNOTATED, start=0, accepting=frozenset({1}), width=960)
        with patch.object(pydot.Dot, "create", fake_create):
            self.assertEqual(render(graph), b"<svg/>")

        self.assertEqual(captured, {"size": '"10.00"', "format": "svg"})

    def test_explicit_width_wins(self):
        captured = {}

        def fake_create(self, prog=None, format=None, **kwargs):
            captured["size"] = self.get("size")
            return b""

        graph = AnnotatedGraph(description=ANNOTATED, start=0, accepting=frozenset({1}), width=960)
        with patch.object(pydot.Dot, "create", fake_create):
            render(graph, width=192)
        self.assertEqual(captured["size"], '"2.00"')

    def test_graphviz_failure(self):
        def broken_create(self, prog=None, format=None, **kwargs):
            raise FileNotFoundError("dot not found")

        with patch.object(pydot.Dot, "create", broken_create):
            with self.assertRaises(RenderError):
                render(ANNOTATED)

    @unittest.skipIf(shutil.which("dot") is None, "Graphviz not installed")
    def test_render_svg(self):
        output = render(ANNOTATED, fmt="svg", width=480)
        self.assertIn(b"<svg", output)


if __name__ == "__main__":
    unittest.main()
