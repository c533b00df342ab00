from __future__ import annotations

import unittest
from dataclasses import replace
from unittest import mock

from pygments.util import ClassNotFound

from sharpie import languages
from sharpie.languages import CSHARP, GO, classify
from sharpie.languages import go as go_rules
from sharpie.languages.base import extract_generic_argument, normalize_type_name
from sharpie.languages.csharp import is_task_type, return_type
from sharpie.symbols_types import ChannelDirection, SymbolKind


class FakeLexer:
    def __init__(self, *aliases: str) -> None:
        self.aliases = list(aliases)


class FakeNode:
    def __init__(self, node_type: str, fields: dict | None = None) -> None:
        self.type = node_type
        self._fields = fields or {}

    def child_by_field_name(self, name: str):
        return self._fields.get(name)


class ClassifyTests(unittest.TestCase):
    def test_file_patterns(self) -> None:
        self.assertIs(classify("/src/App/Program.cs"), CSHARP)
        self.assertIs(classify("cmd/server/main.go"), GO)
        self.assertIs(classify("LEGACY.CS"), CSHARP)

    def test_filetype_wins_over_file_name(self) -> None:
        self.assertIs(classify("scratch.txt", filetype="go"), GO)
        self.assertIs(classify(None, filetype="csharp"), CSHARP)

    def test_force_overrides_everything(self) -> None:
        self.assertIs(classify("main.go", filetype="go", force="csharp"), CSHARP)

    def test_unknown_force_is_ignored(self) -> None:
        with self.assertLogs("sharpie.languages", level="WARNING"):
            profile = classify("main.go", force="cobol")
        self.assertIs(profile, GO)

    def test_lexer_aliases_resolve_unusual_names(self) -> None:
        with mock.patch("sharpie.languages.get_lexer_for_filename", return_value=FakeLexer("csharp", "c#")):
            self.assertIs(classify("Generated.csx"), CSHARP)

    def test_unknown_file_is_unsupported(self) -> None:
        with mock.patch("sharpie.languages.get_lexer_for_filename", side_effect=ClassNotFound("nope")):
            self.assertIsNone(classify("notes.xyz"))
        self.assertIsNone(classify(None))

    def test_lexer_for_other_language_is_unsupported(self) -> None:
        with mock.patch("sharpie.languages.get_lexer_for_filename", return_value=FakeLexer("python", "py")):
            self.assertIsNone(classify("tool.py"))


class RegistryTests(unittest.TestCase):
    def test_builtin_profiles(self) -> None:
        self.assertTrue(languages.is_supported("csharp"))
        self.assertTrue(languages.is_supported("go"))
        self.assertFalse(languages.is_supported("rust"))
        self.assertFalse(languages.is_supported(None))
        self.assertEqual(languages.all_file_patterns(), ["*.cs", "*.go"])

    def test_register_profile_adds_language(self) -> None:
        fsharp = replace(CSHARP, name="fsharp", display_name="F#", filetypes=("fsharp",), file_patterns=("*.fs",))
        with mock.patch.dict(languages._PROFILES, clear=False):
            languages.register_profile(fsharp)
            self.assertIs(languages.get_profile("fsharp"), fsharp)
            self.assertIs(classify("Lib.fs"), fsharp)
            self.assertIn("*.fs", languages.all_file_patterns())
        self.assertIsNone(languages.get_profile("fsharp"))

    def test_lsp_client_matching(self) -> None:
        self.assertTrue(CSHARP.matches_lsp_client("OmniSharp"))
        self.assertTrue(CSHARP.matches_lsp_client("csharp_ls"))
        self.assertTrue(GO.matches_lsp_client("gopls"))
        self.assertFalse(GO.matches_lsp_client("omnisharp"))


class CSharpHelperTests(unittest.TestCase):
    def test_return_type_skips_modifiers(self) -> None:
        self.assertEqual(return_type("public static async Task<int> RunAsync()"), "Task<int>")
        self.assertEqual(return_type("int"), "int")
        self.assertIsNone(return_type(None))

    def test_task_type_detection(self) -> None:
        self.assertTrue(is_task_type("Task"))
        self.assertTrue(is_task_type("ValueTask<bool>"))
        self.assertTrue(is_task_type("IAsyncEnumerable<int>"))
        self.assertFalse(is_task_type("TaskFactory"))
        self.assertFalse(is_task_type(None))

    def test_generic_argument_is_bracket_balanced(self) -> None:
        self.assertEqual(extract_generic_argument("Task<Dictionary<string, List<int>>>", "Task"), "Dictionary<string, List<int>>")
        self.assertIsNone(extract_generic_argument("Task<int", "Task"))
        self.assertIsNone(extract_generic_argument("List<int>", "Task"))

    def test_normalize_type_name(self) -> None:
        self.assertEqual(normalize_type_name(" List< String > "), "list<string>")
        self.assertEqual(normalize_type_name("*Config"), "config")
        self.assertEqual(CSHARP.rules.normalize("int?"), "int")

    def test_lenient_classification_defaults_to_aggregate(self) -> None:
        self.assertEqual(CSHARP.rules.classify_type("Widget"), "object")
        self.assertIsNone(CSHARP.rules.classify_type("Widget", strict=True))
        self.assertEqual(GO.rules.classify_type("Widget"), "struct")


class GoHelperTests(unittest.TestCase):
    def test_return_types(self) -> None:
        self.assertEqual(go_rules.return_types("func(ctx context.Context) (int, error)"), ["int", "error"])
        self.assertEqual(go_rules.return_types("func() (n int, err error)"), ["int", "error"])
        self.assertEqual(go_rules.return_types("func() map[string][]int"), ["map[string][]int"])
        self.assertEqual(go_rules.return_types("func()"), [])
        self.assertEqual(go_rules.return_types("[]string"), [])

    def test_returns_error_requires_error_last(self) -> None:
        self.assertTrue(go_rules.returns_error("func() error"))
        self.assertFalse(go_rules.returns_error("func() (error, int)"))

    def test_method_receiver(self) -> None:
        receiver = go_rules.method_receiver("func (s *Server) Start() error")
        self.assertEqual((receiver.name, receiver.type), ("s", "*Server"))
        self.assertTrue(receiver.is_pointer)

        value_receiver = go_rules.method_receiver("func (c Config) Name() string")
        self.assertFalse(value_receiver.is_pointer)

    def test_parameters_are_not_receivers(self) -> None:
        self.assertIsNone(go_rules.method_receiver("func(w *Writer) error"))
        self.assertIsNone(go_rules.method_receiver("func(ctx context.Context) (int, error)"))

    def test_channel_direction(self) -> None:
        self.assertIs(go_rules.channel_direction("func(out chan<- Event)"), ChannelDirection.SEND)
        self.assertIs(go_rules.channel_direction("func() <-chan Event"), ChannelDirection.RECEIVE)
        self.assertIs(go_rules.channel_direction("chan Event"), ChannelDirection.BIDIRECTIONAL)
        self.assertIsNone(go_rules.channel_direction("func(channel string)"))
        self.assertIsNone(go_rules.channel_direction(None))

    def test_exported_names(self) -> None:
        self.assertTrue(go_rules.is_exported("Handler"))
        self.assertFalse(go_rules.is_exported("handler"))
        self.assertFalse(go_rules.is_exported("_private"))
        self.assertTrue(go_rules.is_exported("(*Server).Start"))
        self.assertFalse(go_rules.is_exported(""))

    def test_goroutine_names(self) -> None:
        for name in ("runLoop", "StartServer", "workerPool", "processQueue", "handleConn", "syncAsync", "flushBackground"):
            with self.subTest(name=name):
                self.assertTrue(go_rules.is_goroutine_func(name))
        self.assertFalse(go_rules.is_goroutine_func("Parse"))

    def test_type_spec_kind_follows_type_child(self) -> None:
        struct_spec = FakeNode("type_spec", {"type": FakeNode("struct_type")})
        iface_spec = FakeNode("type_spec", {"type": FakeNode("interface_type")})
        alias_spec = FakeNode("type_spec", {"type": FakeNode("type_identifier")})

        self.assertIs(go_rules.node_symbol_kind(struct_spec), SymbolKind.STRUCT)
        self.assertIs(go_rules.node_symbol_kind(iface_spec), SymbolKind.INTERFACE)
        self.assertIs(go_rules.node_symbol_kind(alias_spec), SymbolKind.CLASS)
        self.assertIs(go_rules.node_symbol_kind(FakeNode("function_declaration")), SymbolKind.FUNCTION)
        self.assertIsNone(go_rules.node_symbol_kind(FakeNode("block")))


if __name__ == "__main__":
    unittest.main()
