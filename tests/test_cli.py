"""
Unit tests for the CLI module.
"""

import json
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from typer.testing import CliRunner

from rregex import __version__
from rregex.cli import app, build_settings
from rregex.markers import MarkerStyle

runner = CliRunner()

RAW = 'digraph {\n    0 [ label = "0" ]\n    1 [ label = "1" ]\n    0 -> 1 [ label = "a" ]\n}\n'


class TestBuildSettings(unittest.TestCase):
    def test_defaults(self):
        settings = build_settings(None)
        self.assertEqual(settings.rankdir, "LR")

    def test_overrides(self):
        settings = build_settings(None, MarkerStyle.LABEL_SUFFIX, "tb", 300)
        self.assertEqual(settings.marker_style, MarkerStyle.LABEL_SUFFIX)
        self.assertEqual(settings.rankdir, "TB")
        self.assertEqual(settings.width, 300)

    def test_invalid_override_exits(self):
        import typer

        with self.assertRaises(typer.Exit):
            build_settings(None, rankdir="up")

    def test_missing_config_exits(self):
        import typer

        with self.assertRaises(typer.Exit):
            build_settings(Path("/nonexistent/rregex.yaml"))


class TestDotCommand(unittest.TestCase):
    def test_b_star(self):
        result = runner.invoke(app, ["dot", "b*"])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn('0 [ label = "0" shape = Mcircle peripheries = 2 ]', result.output)
        self.assertEqual(result.output.count("rankdir = LR"), 1)

    def test_marker_style_option(self):
        result = runner.invoke(app, ["dot", "b*", "--marker-style", "label_suffix"])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn('label = "0 ▸" shape = doublecircle', result.output)

    def test_output_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "out.dot"
            result = runner.invoke(app, ["dot", "b*", "-o", str(path)])
            self.assertEqual(result.exit_code, 0, result.output)
            self.assertIn("rankdir = LR", path.read_text(encoding="utf-8"))

    def test_invalid_regex(self):
        result = runner.invoke(app, ["dot", ""])
        self.assertEqual(result.exit_code, 1)
        self.assertIn("regex_syntax", result.output)

    def test_json_output(self):
        result = runner.invoke(app, ["dot", "b*", "--json"])
        self.assertEqual(result.exit_code, 0, result.output)
        payload = json.loads(result.output)
        self.assertEqual(payload["start"], 0)
        self.assertEqual(payload["accepting"], [0])
        self.assertIsNone(payload["error"])

    def test_json_error(self):
        result = runner.invoke(app, ["dot", "", "--json"])
        self.assertEqual(result.exit_code, 1)
        payload = json.loads(result.output)
        self.assertEqual(payload["error"]["kind"], "regex_syntax")

    def test_svg_uses_renderer(self):
        with patch("rregex.cli.render", return_value=b"<svg/>") as render:
            result = runner.invoke(app, ["dot", "b*", "--format", "svg", "--width", "480"])

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertEqual(result.output, "<svg/>")
        graph = render.call_args.args[0]
        self.assertEqual(graph.width, 480)
        self.assertEqual(render.call_args.kwargs["fmt"], "svg")

    def test_binary_format_to_stdout(self):
        png = b"\x89PNG\r\n\x1a\n\xff\x00"
        with patch("rregex.cli.render", return_value=png):
            result = runner.invoke(app, ["dot", "b*", "-f", "png"])

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIsNone(result.exception)
        self.assertEqual(result.stdout_bytes, png)


class TestAnnotateCommand(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.path = Path(self.tmp.name) / "raw.dot"
        self.path.write_text(RAW, encoding="utf-8")

    def tearDown(self):
        self.tmp.cleanup()

    def test_annotate(self):
        result = runner.invoke(app, ["annotate", str(self.path), "--start", "0", "--accept", "1"])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertEqual(
            result.output,
            "digraph {\n"
            '    0 [ label = "0" shape = Mcircle ]\n'
            '    1 [ label = "1" shape = doublecircle ]\n'
            '    0 -> 1 [ label = "a" ]\n'
            "    rankdir = LR\n"
            "}\n",
        )

    def test_annotate_coverage_error(self):
        result = runner.invoke(app, ["annotate", str(self.path), "--start", "0", "--accept", "10"])
        self.assertEqual(result.exit_code, 1)
        self.assertIn("annotation_coverage", result.output)

    def test_annotate_missing_file(self):
        result = runner.invoke(app, ["annotate", "/nonexistent/raw.dot", "--start", "0"])
        self.assertEqual(result.exit_code, 1)
        self.assertIn("not found", result.output)


class TestVersion(unittest.TestCase):
    def test_version(self):
        result = runner.invoke(app, ["--version"])
        self.assertEqual(result.exit_code, 0)
        self.assertIn(__version__, result.output)


if __name__ == "__main__":
    unittest.main()
