"""Tests for the command-line entry point."""

import contextlib
import io
import json
import tempfile
import unittest
from pathlib import Path

from p2i.cli import build_config, create_argument_parser, expand_inputs, main
from tests.fixtures import make_collection, make_request


class CliTestCase(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = Path(self._tmp.name)

    def tearDown(self):
        self._tmp.cleanup()

    def write_json(self, name, document):
        path = self.tmp / name
        path.write_text(document if isinstance(document, str) else json.dumps(document), encoding="utf-8")
        return str(path)

    def run_main(self, *argv):
        out = io.StringIO()
        with contextlib.redirect_stdout(out):
            code = main(list(argv))
        return code, out.getvalue()


class TestConvertCommand(CliTestCase):
    def test_converts_glob(self):
        self.write_json("a.json", make_collection([make_request("A")], name="A"))
        self.write_json("b.json", make_collection([make_request("B")], name="B"))
        (self.tmp / "notes.txt").write_text("ignored", encoding="utf-8")
        out_dir = self.tmp / "out"

        code, output = self.run_main(str(self.tmp / "*"), "-o", str(out_dir), "-f", "json")

        self.assertEqual(code, 0)
        self.assertIn("Conversion complete: 2 successful, 0 failed", output)
        self.assertEqual(sorted(p.name for p in out_dir.iterdir()), ["a.insomnia.json", "b.insomnia.json"])

    def test_partial_failure_still_succeeds(self):
        good = self.write_json("good.json", make_collection([make_request("A")]))
        bad = self.write_json("bad.json", "[]")
        code, output = self.run_main(good, bad, "-o", str(self.tmp / "out"))
        self.assertEqual(code, 0)
        self.assertIn("1 successful, 1 failed", output)

    def test_all_failed(self):
        bad = self.write_json("bad.json", "{")
        code, _ = self.run_main(bad, "-o", str(self.tmp / "out"))
        self.assertEqual(code, 1)

    def test_no_inputs(self):
        code, output = self.run_main()
        self.assertEqual(code, 1)
        self.assertIn("no input files", output)

    def test_no_matches(self):
        code, output = self.run_main(str(self.tmp / "*.json"))
        self.assertEqual(code, 1)
        self.assertIn("no Postman JSON files matched", output)

    def test_merge_flag(self):
        first = self.write_json("a.json", make_collection([make_request("A")], name="A"))
        second = self.write_json("b.json", make_collection([make_request("B")], name="B"))
        out_dir = self.tmp / "out"

        code, _ = self.run_main(first, second, "--merge", "-o", str(out_dir))
        self.assertEqual(code, 0)
        self.assertEqual([p.name for p in out_dir.iterdir()], ["merged-collection.insomnia.yaml"])

    def test_invalid_settings_file(self):
        settings = self.write_json("p2i_config.json", {"output": {"format": "toml"}})
        source = self.write_json("a.json", make_collection())
        code, output = self.run_main(source, "--settings", settings)
        self.assertEqual(code, 1)
        self.assertIn("Configuration Error", output)


class TestConfigCommands(CliTestCase):
    def test_generate_then_validate(self):
        path = str(self.tmp / "rules.json")
        code, output = self.run_main("--generate-config", path, "--experimental")
        self.assertEqual(code, 0)
        self.assertIn("Sample config generated", output)

        code, output = self.run_main("--validate-config", path)
        self.assertEqual(code, 0)
        self.assertIn("Transform config is valid", output)

    def test_validate_reports_bad_pattern(self):
        path = self.write_json("rules.json", {"postprocess": [
            {"name": "ok", "pattern": "a", "replacement": "b"},
            {"name": "broken", "pattern": "(a", "replacement": "b"},
        ]})
        code, output = self.run_main("--validate-config", path)
        self.assertEqual(code, 1)
        self.assertIn('"broken" does not compile', output)

    def test_validate_reports_duplicates(self):
        rule = {"name": "same", "pattern": "a", "replacement": "b"}
        path = self.write_json("rules.json", {"preprocess": [rule, rule]})
        code, output = self.run_main("--validate-config", path)
        self.assertEqual(code, 1)
        self.assertIn("Duplicate preprocess rule name: same", output)

    def test_validate_missing_file(self):
        code, _ = self.run_main("--validate-config", str(self.tmp / "missing.json"))
        self.assertEqual(code, 1)


class TestHelpers(CliTestCase):
    def test_expand_inputs_dedupes(self):
        path = self.write_json("a.json", make_collection())
        self.assertEqual(expand_inputs([path, str(self.tmp / "*.json")]), [path])
        self.assertEqual(expand_inputs([str(self.tmp / "missing.json")]), [])

    def test_flags_override_settings(self):
        settings = self.write_json("p2i_config.json", {
            "output": {"directory": "from-settings", "format": "json"},
            "transforms": {"preprocess": True},
        })
        args = create_argument_parser().parse_args(
            ["x.json", "--settings", settings, "-f", "yaml", "--postprocess", "--use-collection-folder"])
        with contextlib.redirect_stdout(io.StringIO()):
            config = build_config(args)

        self.assertEqual(str(config.output.directory), "from-settings")
        self.assertEqual(config.output.format, "yaml")
        self.assertTrue(config.transforms.preprocess)
        self.assertTrue(config.transforms.postprocess)
        self.assertTrue(config.importer.use_collection_folder)


if __name__ == "__main__":
    unittest.main()
