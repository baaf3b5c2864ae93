"""Tests for the pm.* prefix rewriter and script assembly."""

import unittest

from p2i.engine.transform_engine import TransformEngine
from p2i.generators.script_factory import PrefixRewriter, ScriptFactory, rewrite_collection_variables
from tests.fixtures import make_event


class TestPrefixRewriter(unittest.TestCase):
    def setUp(self):
        self.rewriter = PrefixRewriter()

    def test_rewrites_call_site(self):
        self.assertEqual(self.rewriter.rewrite("pm.test()"), "insomnia.test()")

    def test_identifier_suffix_is_left_alone(self):
        self.assertEqual(self.rewriter.rewrite("mypm.test()"), "mypm.test()")
        self.assertEqual(self.rewriter.rewrite("_pm.value"), "_pm.value")
        self.assertEqual(self.rewriter.rewrite("$pm.value"), "$pm.value")
        self.assertEqual(self.rewriter.rewrite("x2pm.value"), "x2pm.value")

    def test_every_occurrence_renamed_with_growing_offset(self):
        source = "x=pm.a;y=pm.b;z=mypm.c;w=pm.d"
        self.assertEqual(
            self.rewriter.rewrite(source),
            "x=insomnia.a;y=insomnia.b;z=mypm.c;w=insomnia.d",
        )

    def test_adjacent_and_nested_occurrences(self):
        self.assertEqual(self.rewriter.rewrite("pm.pm.x"), "insomnia.insomnia.x")
        self.assertEqual(self.rewriter.rewrite("(pm.a)+[pm.b]"), "(insomnia.a)+[insomnia.b]")

    def test_strings_and_comments_are_rewritten(self):
        source = 'console.log("pm.test"); // see pm.info'
        self.assertEqual(
            self.rewriter.rewrite(source),
            'console.log("insomnia.test"); // see insomnia.info',
        )

    def test_degenerate_inputs(self):
        self.assertEqual(self.rewriter.rewrite(""), "")
        self.assertEqual(self.rewriter.rewrite("pm"), "pm")
        self.assertEqual(self.rewriter.rewrite("pm."), "insomnia.")

    def test_multiline_script(self):
        source = "pm.test('ok', function () {\n    pm.response.to.have.status(200);\n});"
        expected = "insomnia.test('ok', function () {\n    insomnia.response.to.have.status(200);\n});"
        self.assertEqual(self.rewriter.rewrite(source), expected)


class TestCollectionVariableRewrite(unittest.TestCase):
    def test_writes_use_folder_constant(self):
        script = 'insomnia.collectionVariables.set("token", "abc");'
        result = rewrite_collection_variables(script, "Auth")
        self.assertTrue(result.startswith("const thisFolder = insomnia.parentFolders.get('Auth');\n"))
        self.assertIn('thisFolder.environment.set("token", "abc");', result)

    def test_constant_declared_once(self):
        script = ('insomnia.collectionVariables.set("a", 1);\n'
                  'insomnia.collectionVariables.unset("b");')
        result = rewrite_collection_variables(script, "Auth")
        self.assertEqual(result.count("const thisFolder"), 1)
        self.assertIn('thisFolder.environment.unset("b");', result)

    def test_reads_address_folder_inline(self):
        script = 'const t = insomnia.collectionVariables.get("token");'
        result = rewrite_collection_variables(script, "Auth")
        self.assertEqual(
            result,
            "const t = insomnia.parentFolders.get('Auth').environment.get(\"token\");",
        )
        self.assertNotIn("thisFolder", result)

    def test_folder_name_quotes_escaped(self):
        result = rewrite_collection_variables('insomnia.collectionVariables.has("x")', "Bob's API")
        self.assertIn("insomnia.parentFolders.get('Bob\\'s API')", result)


class TestScriptFactory(unittest.TestCase):
    def test_extract_source_joins_exec_lines(self):
        events = [make_event("test", "line one", "line two")]
        self.assertEqual(ScriptFactory.extract_source(events, "test"), "line one\nline two")

    def test_extract_source_missing_hook(self):
        self.assertEqual(ScriptFactory.extract_source(None, "test"), "")
        self.assertEqual(ScriptFactory.extract_source([make_event("prerequest", "x")], "test"), "")
        self.assertEqual(ScriptFactory.extract_source([{"listen": "test"}], "test"), "")

    def test_extract_source_accepts_string_exec(self):
        events = [{"listen": "test", "script": {"exec": "pm.test()"}}]
        self.assertEqual(ScriptFactory.extract_source(events, "test"), "pm.test()")

    def test_create_scripts_without_engine(self):
        factory = ScriptFactory()
        events = [
            make_event("prerequest", 'pm.environment.set("a", "1");'),
            make_event("test", "pm.test('ok', () => {});"),
        ]
        scripts = factory.create_scripts(events, "Folder")
        self.assertEqual(scripts["preRequestScript"], 'insomnia.environment.set("a", "1");')
        self.assertEqual(scripts["afterResponseScript"], "insomnia.test('ok', () => {});")

    def test_create_scripts_empty(self):
        scripts = ScriptFactory().create_scripts([], "Folder")
        self.assertEqual(scripts, {"preRequestScript": "", "afterResponseScript": ""})

    def test_postprocess_runs_after_rename(self):
        factory = ScriptFactory(transform_engine=TransformEngine())
        events = [make_event("prerequest", 'pm.request.url = "https://example.com";')]
        scripts = factory.create_scripts(events, "Folder")
        self.assertEqual(scripts["preRequestScript"], 'insomnia.request.url.update("https://example.com");')

    def test_experimental_rules_only_when_requested(self):
        events = [make_event("test", "const id = json['data']['id'];")]

        plain = ScriptFactory(transform_engine=TransformEngine()).create_scripts(events, "F")
        self.assertEqual(plain["afterResponseScript"], "const id = json['data']['id'];")

        experimental = ScriptFactory(transform_engine=TransformEngine(), experimental=True)
        scripts = experimental.create_scripts(events, "F")
        self.assertEqual(scripts["afterResponseScript"], "const id = json.data.id;")


if __name__ == "__main__":
    unittest.main()
